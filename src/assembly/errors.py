from __future__ import annotations


class ExtractionError(Exception):
    """Document-level failure; row and page problems never raise."""


class NoPagesError(ExtractionError):
    pass


class TokenInputError(ExtractionError):
    """A pre-decoded token file that cannot be read as positioned tokens."""
