"""Tests for the practice record store and lazy dataset cache."""

import pytest

from conftest import make_record, write_practice_csv
from src.acquisition.practice_loader import (
    LoadError,
    PracticeDataCache,
    PracticeRecordStore,
    load_practice_records,
)


def test_load_preserves_values_verbatim(practice_csv):
    records = load_practice_records(practice_csv)

    assert len(records) == 3
    first = records[0]
    assert first['PRACTICE_CODE'] == "X12345"
    assert first['Earnings in 2023/24 CHOL003'] == "£1,234.50"
    assert first['CHOL003 2023/24 Achievement'] == "65.5%"
    assert first['Practice List Size'] == "10,250"


def test_load_keeps_trailing_space_labels(practice_csv):
    records = load_practice_records(practice_csv)

    assert records[0]['SUB ICB CHOL Prevalence '] == "11.0%"
    assert 'SUB ICB CHOL Prevalence' not in records[0]
    assert records[0]['SUB ICB HYP Prevalence'] == "14.2%"


def test_load_keeps_row_order(practice_csv):
    codes = [r['PRACTICE_CODE'] for r in load_practice_records(practice_csv)]
    assert codes == ["X12345", "Y22222", "Z33333"]


def test_blank_cells_stay_empty_strings(tmp_path):
    path = write_practice_csv(
        tmp_path / "data.csv",
        [make_record(**{'Total Earnings with full target achievement_2': ""})],
    )
    records = load_practice_records(path)
    assert records[0]['Total Earnings with full target achievement_2'] == ""


def test_missing_file_raises_load_error(tmp_path):
    with pytest.raises(LoadError):
        load_practice_records(tmp_path / "missing.csv")


def test_empty_file_raises_load_error(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_text("", encoding="utf-8")
    with pytest.raises(LoadError):
        load_practice_records(path)


def test_header_only_file_raises_load_error(tmp_path):
    path = tmp_path / "header.csv"
    path.write_text("PRACTICE_CODE,PRACTICE_NAME,POST_CODE\n", encoding="utf-8")
    with pytest.raises(LoadError):
        load_practice_records(path)


def test_repeated_practice_code_keeps_first_row(tmp_path):
    path = write_practice_csv(tmp_path / "dupes.csv", [
        make_record(code="A00001", name="First"),
        make_record(code="A00001", name="Second"),
        make_record(code="B00002", name="Other"),
    ])
    records = load_practice_records(path)

    assert [r['PRACTICE_NAME'] for r in records] == ["First", "Other"]


def test_missing_columns_do_not_fail(tmp_path):
    path = tmp_path / "minimal.csv"
    path.write_text("PRACTICE_CODE,PRACTICE_NAME\nA1,Alpha\n", encoding="utf-8")

    records = load_practice_records(path)
    assert records == [{'PRACTICE_CODE': "A1", 'PRACTICE_NAME': "Alpha"}]


def test_store_finds_every_record_by_code(practice_csv):
    store = PracticeRecordStore.from_file(practice_csv)

    assert len(store) == 3
    for record in store:
        assert store.get(record['PRACTICE_CODE']) is record
    assert store.get("NOPE") is None


def test_cache_loads_lazily_once(practice_csv, monkeypatch):
    cache = PracticeDataCache(practice_csv)
    assert not cache.is_loaded

    calls = []
    original = PracticeRecordStore.from_file

    def counting_from_file(source):
        calls.append(source)
        return original(source)

    monkeypatch.setattr(PracticeRecordStore, "from_file", staticmethod(counting_from_file))

    first = cache.get_store()
    second = cache.get_store()

    assert cache.is_loaded
    assert first is second
    assert len(calls) == 1


def test_cache_does_not_keep_a_failed_load(tmp_path, practice_records):
    path = tmp_path / "late.csv"
    cache = PracticeDataCache(path)

    with pytest.raises(LoadError):
        cache.get_store()
    assert not cache.is_loaded

    write_practice_csv(path, practice_records)
    assert len(cache.get_store()) == 3
