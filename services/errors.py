class PrunerError(Exception):
    """Base class for every error raised by the pruning pipeline"""


class PayloadError(PrunerError):
    """Request body is missing, malformed or has the wrong shape"""


class StylesheetError(PrunerError):
    """A single stylesheet could not be used; recorded per file"""

    def __init__(self, relative_path, message):
        super().__init__(message)
        self.relative_path = relative_path


class PathOutsideRootError(StylesheetError):
    pass


class StylesheetNotFoundError(StylesheetError):
    pass


class FileTooLargeError(StylesheetError):
    pass


class CssParseError(PrunerError):
    """tinycss2 reported a parse error inside the rule structure"""

    def __init__(self, message, line=None, column=None):
        super().__init__(message)
        self.line = line
        self.column = column


class LedgerError(PrunerError):
    """Ledger could not be read or written; fatal for the request"""


class LedgerCorruptedError(LedgerError):
    pass


class LedgerWriteError(LedgerError):
    pass


class RewriteTimeoutError(PrunerError):
    """Rewrite pass exceeded its time budget"""


class OutputWriteError(PrunerError):
    """Combined bundle could not be written"""
