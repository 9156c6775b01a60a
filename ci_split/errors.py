from typing import Optional


class CISplitError(Exception):
    """Base class for every error raised by ci_split."""


class ParseError(CISplitError, ValueError):
    """A single report could not be parsed.

    Localized to one report: ingestion logs it and carries on with the others.
    """

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to parse {path}: {reason}")


class InvalidArgument(CISplitError, ValueError):
    """A caller passed an argument that violates a function's contract."""


class MissingInput(CISplitError):
    """There is nothing to work on, e.g. no test files were discovered.

    This is a terminal but successful condition; callers should exit cleanly.
    """

    def __init__(self, message: str = "No test files found", path: Optional[str] = None):
        self.path = path
        super().__init__(message)
