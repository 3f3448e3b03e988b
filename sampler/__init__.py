# sampler/__init__.py
from .models import SampleResult, SelectorRecord, SelectorStatus
from .reporter import ReportError, UsageReporter
from .scheduler import ScanScheduler
from .stylesheet_loader import StylesheetLoader
from .usage_sampler import UsageSampler

__all__ = [
    'SampleResult',
    'SelectorRecord',
    'SelectorStatus',
    'ReportError',
    'UsageReporter',
    'ScanScheduler',
    'StylesheetLoader',
    'UsageSampler',
]
