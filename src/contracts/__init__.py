"""
Canonical contracts shared by every extraction stage.

These models are the schema boundary between stages:
- Token / Cell: decoder output and its classified form
- Column / Pane: page-local layout structures
- DrawRow / SkipRecord: assembler output and diagnostics

Stage code should consume/produce these contract objects (not ad-hoc dicts).
"""

from .draws import AttemptSummary, DrawExtractionResult, DrawRow, PageSummary, SkipReason, SkipRecord
from .layout import Column, Pane
from .tokens import KIND_PRIORITY, Cell, CellKind, Token, ValueDomain

__all__ = [
    "Token",
    "Cell",
    "CellKind",
    "KIND_PRIORITY",
    "ValueDomain",
    "Column",
    "Pane",
    "DrawRow",
    "SkipReason",
    "SkipRecord",
    "AttemptSummary",
    "PageSummary",
    "DrawExtractionResult",
]
