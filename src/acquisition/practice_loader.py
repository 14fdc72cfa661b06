"""
Practice Dataset Loader

Loads the QOF practice spreadsheet export into an in-memory record store.
Cell values are kept verbatim; parsing happens downstream in the projection
engine.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

import pandas as pd
from loguru import logger

from src.modeling.qof_schema import PRACTICE_CODE, SEARCHABLE_FIELDS, expected_columns

Record = Dict[str, Any]


class LoadError(RuntimeError):
    """Raised when the practice dataset cannot be read or holds no rows."""


def load_practice_records(source: Union[str, Path]) -> List[Record]:
    """
    Read a delimited practice file into an ordered list of records.

    Args:
        source: Path to the CSV export (header row required)

    Returns:
        List of dicts keyed by the exact column labels of the file
    """
    source = Path(source)
    logger.info(f"Loading practice data from {source}")

    if not source.exists():
        raise LoadError(f"Practice data file not found: {source}")

    try:
        # Header labels are deliberately not stripped: several published
        # labels carry trailing spaces.
        df = pd.read_csv(
            source,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            encoding="utf-8-sig",
        )
    except (OSError, UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise LoadError(f"Could not parse practice data {source}: {exc}") from exc

    if df.empty:
        raise LoadError(f"Practice data file has no rows: {source}")

    _check_field_presence(df.columns)

    records = df.to_dict(orient="records")
    records = _drop_duplicate_codes(records)

    logger.info(f"Loaded {len(records):,} practices ({len(df.columns)} columns)")
    return records


def _check_field_presence(columns) -> None:
    """Warn about missing identifying or schema columns (best effort only)."""
    available = set(columns)

    missing_identity = [col for col in SEARCHABLE_FIELDS if col not in available]
    if missing_identity:
        logger.warning(f"Practice data missing identifying columns: {missing_identity}")

    missing_schema = [col for col in expected_columns() if col not in available]
    if missing_schema:
        logger.warning(
            f"{len(missing_schema)} expected columns absent; those figures will read as 0"
        )
        logger.debug(f"Absent columns: {missing_schema}")


def _drop_duplicate_codes(records: List[Record]) -> List[Record]:
    seen = set()
    unique = []
    duplicates = 0

    for record in records:
        code = record.get(PRACTICE_CODE)
        if code in seen:
            duplicates += 1
            continue
        if code is not None:
            seen.add(code)
        unique.append(record)

    if duplicates:
        logger.warning(f"Dropped {duplicates:,} rows with a repeated {PRACTICE_CODE}")

    return unique


class PracticeRecordStore:
    """
    Immutable, ordered collection of practice records indexed by code.
    """

    def __init__(self, records: List[Record]):
        self._records = list(records)
        self._by_code: Dict[str, Record] = {}
        for record in self._records:
            code = record.get(PRACTICE_CODE)
            if code is not None and code not in self._by_code:
                self._by_code[str(code)] = record

    @classmethod
    def from_file(cls, source: Union[str, Path]) -> "PracticeRecordStore":
        return cls(load_practice_records(source))

    @property
    def records(self) -> List[Record]:
        return list(self._records)

    def get(self, code: str) -> Optional[Record]:
        return self._by_code.get(code)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self._records)


class PracticeDataCache:
    """
    Lazily loads the practice dataset once and serves it for the process lifetime.

    There is no refresh or invalidation path. A failed load is not cached, so
    the next caller simply tries again.
    """

    def __init__(self, source: Optional[Union[str, Path]] = None):
        self.source = source
        self._store: Optional[PracticeRecordStore] = None
        self._lock = threading.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._store is not None

    def _resolve_source(self) -> Path:
        if self.source is not None:
            return Path(self.source)
        from config.config import get_dataset_path
        return get_dataset_path()

    def get_store(self) -> PracticeRecordStore:
        if self._store is not None:
            return self._store

        with self._lock:
            if self._store is None:
                self._store = PracticeRecordStore.from_file(self._resolve_source())
                logger.info("Practice data cached")
        return self._store


_default_cache: Optional[PracticeDataCache] = None
_default_cache_lock = threading.Lock()


def get_default_cache() -> PracticeDataCache:
    """Process-wide cache bound to the configured dataset path."""
    global _default_cache
    with _default_cache_lock:
        if _default_cache is None:
            _default_cache = PracticeDataCache()
    return _default_cache
