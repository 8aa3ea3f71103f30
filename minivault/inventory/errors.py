"""Exception types shared across the inventory core."""


class MinivaultError(Exception):
    """Base exception for Minivault operations."""

    pass


class FormatError(MinivaultError):
    """Raised when tabular input is malformed beyond per-row recovery."""

    pass


class ValidationError(MinivaultError):
    """A row that does not line up with the header; skipped during decode."""

    def __init__(self, line_number: int, expected: int, actual: int, raw: str = ""):
        self.line_number = line_number
        self.expected = expected
        self.actual = actual
        self.raw = raw
        super().__init__(
            f"Row {line_number}: expected {expected} fields but found {actual}"
        )


class PersistenceError(MinivaultError):
    """Raised by storage backends; the history store logs it instead of raising."""

    pass


class RestoreShapeError(MinivaultError):
    """Raised when a saved history does not have the past/present/future shape."""

    pass


class ConfigurationError(MinivaultError):
    """Raised when configuration is invalid."""

    pass
