from __future__ import annotations


class ConversionError(RuntimeError):
    code = "CONVERSION_ERROR"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code


class InvalidInputType(ConversionError):
    """Raised when the input is not a PDF document."""

    code = "INVALID_INPUT_TYPE"


class InputTooLarge(ConversionError):
    code = "SIZE_LIMIT"


class PasswordProtected(ConversionError):
    code = "PASSWORD_PROTECTED"


class CorruptOrUnreadable(ConversionError):
    code = "CORRUPT_OR_UNREADABLE"


class EmptySelection(ConversionError):
    """Raised when a page range resolves to no pages."""

    code = "EMPTY_SELECTION"


class ConversionSystemError(ConversionError):
    """Raised when rendering, encoding or packaging fails mid-run."""

    code = "SYSTEM_ERROR"


class ConversionCancelled(ConversionError):
    code = "CANCELED"


__all__ = [
    "ConversionError",
    "InvalidInputType",
    "InputTooLarge",
    "PasswordProtected",
    "CorruptOrUnreadable",
    "EmptySelection",
    "ConversionSystemError",
    "ConversionCancelled",
]
