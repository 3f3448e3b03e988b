import logging
from dataclasses import dataclass, field
from typing import List

from lib.css_tree import iter_selectors, parse_stylesheet
from services.errors import CssParseError, StylesheetError
from services.selector_rules import classify, normalize_selector
from services.stylesheet_source import DEFAULT_MAX_FILE_SIZE, read_stylesheet
from utils.ledger_store import UNUSED, USED
from utils.paths import INLINE_SOURCE, normalize_file_path

logger = logging.getLogger(__name__)


@dataclass
class MergeResult:
    processed_files: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


class UsageAggregator:
    """
    Folds one page's report of unused selectors into the ledger.

    "used" is sticky: once a selector is proven used by any visit, no later
    report can turn it back into "unused".
    """

    def __init__(self, document_root, max_file_size=DEFAULT_MAX_FILE_SIZE):
        self.document_root = document_root
        self.max_file_size = max_file_size

    def merge(self, ledger, payload):
        """
        Merge a request payload into the ledger in place.

        Args:
            ledger (dict): Ledger loaded inside a store transaction.
            payload (dict): {source file: [{"selector": ..., "media": ...}, ...]}
                listing the file's currently unused, eligible selectors.

        Returns:
            MergeResult: normalized file keys touched and per-file seeding errors.
        """
        result = MergeResult()

        for href, reported in payload.items():
            relative_path = normalize_file_path(href)
            if relative_path not in ledger:
                ledger[relative_path] = self._seed(relative_path, result.errors)

            unused = {normalize_selector(item['selector']) for item in reported}
            unused.discard('')
            self._apply(ledger[relative_path], unused)

            if relative_path not in result.processed_files:
                result.processed_files.append(relative_path)

        logger.info("Merged usage report for %d files", len(result.processed_files))
        return result

    @staticmethod
    def _apply(statuses, unused):
        for selector in unused:
            if selector not in statuses:
                statuses[selector] = UNUSED if classify(selector) else USED

        for selector, status in statuses.items():
            if selector in unused:
                if status != USED:
                    statuses[selector] = UNUSED if classify(selector) else USED
            else:
                statuses[selector] = USED

    def _seed(self, relative_path, errors):
        """Initialize a new file's entry from every selector in the original stylesheet"""
        statuses = {}
        if relative_path == INLINE_SOURCE:
            return statuses

        try:
            css, _ = read_stylesheet(self.document_root, relative_path, self.max_file_size)
            tree = parse_stylesheet(css)
        except StylesheetError as e:
            errors.append(f'Could not initialize selectors for {relative_path}: {e}')
            logger.warning("Seeding skipped for %s: %s", relative_path, e)
            return statuses
        except CssParseError as e:
            errors.append(f'Could not initialize selectors for {relative_path}: CSS parse error: {e}')
            logger.warning("Seeding skipped for %s: parse error %s", relative_path, e)
            return statuses

        for selector, _media in iter_selectors(tree):
            if selector not in statuses:
                statuses[selector] = UNUSED if classify(selector) else USED

        logger.debug("Seeded %d selectors for %s", len(statuses), relative_path)
        return statuses
