"""
Stage 1: Token classification.

Tags each positioned text fragment with a semantic kind (date, session marker, value,
special tag, noise). Pure functions of the text plus the caller's numeric domain;
classification ambiguity becomes noise, never an error.
"""

from .classify_tokens import classify, classify_page, classify_token, coerce_value, session_code
from .config import DEFAULT_BOILERPLATE, ClassifyConfig
from .dates import date_form, find_date, normalize_dashes, to_iso_date

__all__ = [
    "ClassifyConfig",
    "DEFAULT_BOILERPLATE",
    "classify",
    "classify_page",
    "classify_token",
    "coerce_value",
    "session_code",
    "date_form",
    "find_date",
    "normalize_dashes",
    "to_iso_date",
]
