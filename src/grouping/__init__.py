"""
Stages 2-3: Column clustering and pane partitioning.

- cells -> columns (adaptive X merge epsilon, majority-kind labeling)
- columns -> panes (date anchors, k-means fallback, conservative single-pane default)

Geometry only; columns and panes are page-local value objects.
"""

from .columns import cluster_columns, merge_epsilon
from .config import ColumnConfig, PaneConfig
from .panes import kmeans_1d, split_panes

__all__ = ["ColumnConfig", "PaneConfig", "cluster_columns", "merge_epsilon", "kmeans_1d", "split_panes"]
