"""Card-sorting session data: value types, configuration and readers.

The analysis code under ``sort_analysis`` consumes the immutable records
defined in :mod:`card_sort.models`. Session data is always obtained through an
explicit :class:`card_sort.sources.SessionSource` so that callers decide where
sessions come from (exported JSON payloads, the tool's SQLite database, or
in-memory fixtures).
"""

from card_sort.models import Card, Category, Cluster, Session

__all__ = ["Card", "Category", "Cluster", "Session"]
