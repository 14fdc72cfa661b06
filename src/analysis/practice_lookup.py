"""Practice lookup by ODS code, name or postcode."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from loguru import logger

from src.acquisition.practice_loader import PracticeRecordStore, Record
from src.modeling.qof_schema import PRACTICE_DETAIL_FIELDS, SEARCHABLE_FIELDS

DEFAULT_MAX_RESULTS = 10
DEFAULT_MIN_TERM_LENGTH = 2


class SearchTermError(ValueError):
    """Raised when a search is issued without a term."""


def should_search(term: Optional[str], min_length: int = DEFAULT_MIN_TERM_LENGTH) -> bool:
    """Caller-side policy: only issue searches for terms of ``min_length`` or more."""
    return bool(term) and len(term) >= min_length


def _field_text(record: Record, field: str) -> str:
    value = record.get(field)
    if value is None:
        return ""
    return str(value).lower()


class PracticeLookup:
    """Exact and substring lookups over a :class:`PracticeRecordStore`."""

    def __init__(self, store: PracticeRecordStore, max_results: int = DEFAULT_MAX_RESULTS):
        self.store = store
        self.max_results = max_results

    def find_by_code(self, code: str) -> Optional[Record]:
        """Return the practice with exactly ``code``, or None."""
        record = self.store.get(code)
        if record is None:
            logger.debug(f"No practice with code {code!r}")
        return record

    def search(self, term: str, limit: Optional[int] = None) -> List[Record]:
        """
        Case-insensitive substring search on practice code, name and postcode.

        Args:
            term: Non-empty search text
            limit: Maximum results (defaults to ``max_results``)

        Returns:
            Matching records in store order
        """
        if not term:
            raise SearchTermError("Search query is required")

        limit = self.max_results if limit is None else limit
        needle = term.lower()

        results = []
        for record in self.store:
            if len(results) >= limit:
                break
            if any(needle in _field_text(record, field) for field in SEARCHABLE_FIELDS):
                results.append(record)

        logger.debug(f"Search {term!r} matched {len(results)} practices")
        return results


def summarise_practice(record: Record) -> Dict[str, Any]:
    """Identity card for a practice (name, code, ICB, PCN, list size)."""
    return {key: record.get(label) for key, label in PRACTICE_DETAIL_FIELDS.items()}
