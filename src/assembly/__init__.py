"""
Stages 4-6: Row assembly, adaptive tolerance search, merge.

- panes -> DrawRows / SkipRecords (ordered value strategies, special-tag exclusion)
- per page: bounded retry over a tolerance ladder, best-scoring attempt kept
- per document: dedupe by (date, session), ascending by date, era filter

`extract_draws` is the document-level entrypoint.
"""

from .assemble import PageAssembly, assemble_page, assemble_rows, pane_tolerance
from .config import DEFAULT_LADDER, AssemblyConfig, ExtractionConfig, SearchConfig, ToleranceParams
from .errors import ExtractionError, NoPagesError, TokenInputError
from .merge import filter_era, merge_rows, split_by_session
from .module import extract_draws, failed_result
from .strategies import VALUE_STRATEGIES, find_values
from .tolerance_search import Attempting, Continue, Done, Scored, ToleranceSearch, build_page, score_attempt

__all__ = [
    "AssemblyConfig",
    "Attempting",
    "Continue",
    "DEFAULT_LADDER",
    "Done",
    "ExtractionConfig",
    "ExtractionError",
    "NoPagesError",
    "PageAssembly",
    "Scored",
    "SearchConfig",
    "ToleranceParams",
    "ToleranceSearch",
    "TokenInputError",
    "VALUE_STRATEGIES",
    "assemble_page",
    "assemble_rows",
    "build_page",
    "extract_draws",
    "failed_result",
    "filter_era",
    "find_values",
    "merge_rows",
    "pane_tolerance",
    "score_attempt",
    "split_by_session",
]
