from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class SelectorStatus(Enum):
    UNKNOWN = 'unknown'
    USED = 'used'
    UNUSED = 'unused'


@dataclass
class SelectorRecord:
    """One selector within one source context. ``eligible`` never changes."""
    selector: str
    source_file: str
    media: Optional[str] = None
    eligible: bool = False
    status: SelectorStatus = SelectorStatus.UNKNOWN

    def __post_init__(self):
        if not self.eligible:
            self.status = SelectorStatus.USED

    @property
    def key(self):
        return (self.source_file, self.selector, self.media)

    def mark_used(self):
        self.status = SelectorStatus.USED

    def mark_unused(self):
        # used is terminal
        if self.status is not SelectorStatus.USED:
            self.status = SelectorStatus.UNUSED


@dataclass
class SampleResult:
    records: List[SelectorRecord] = field(default_factory=list)
    added: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    # selectors declared again in the same media context
    duplicates: List[str] = field(default_factory=list)

    @property
    def unused(self) -> Dict[str, List[dict]]:
        """Request body for the save/generate endpoint"""
        payload = {}
        for record in self.records:
            payload.setdefault(record.source_file, [])
            if record.status is SelectorStatus.UNUSED:
                entry = {'selector': record.selector, 'media': record.media}
                if entry not in payload[record.source_file]:
                    payload[record.source_file].append(entry)
        return payload

    @property
    def unused_count(self):
        return len({record.selector for record in self.records if record.status is SelectorStatus.UNUSED})
