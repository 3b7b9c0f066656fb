from typing import Optional


class FuzzyError(Exception):
    """Root of every error raised by fuzzycontrol."""


class FuzzyConfigurationError(FuzzyError, ValueError):
    """A rule base, variable or membership function was used before it was fully configured,
    or was given an index or option it does not have."""


class FCLParseError(FuzzyError, ValueError):
    """Malformed FCL input. Carries the offending line and its 1-based number."""

    def __init__(self, reason: str, line_number: int, line: str):
        super().__init__(f"[fcl:{line_number}] {reason}\n  >> {line.strip()}")
        self.reason = reason
        self.line_number = line_number
        self.line = line


class FCLIOError(FuzzyError, OSError):
    """An FCL file could not be opened, read or written."""

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"FCL file {path!r} could not be accessed{detail}")
        self.path = path
        self.cause = cause
