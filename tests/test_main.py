"""Tests for the command line entry point."""

import json

import pytest

import main as cli


@pytest.fixture(autouse=True)
def no_project_dirs(monkeypatch):
    monkeypatch.setattr(cli, "ensure_directories", lambda: None)


def test_search_prints_matches(practice_csv, capsys):
    code = cli.main(['search', 'surgery', '--data-file', str(practice_csv)])

    assert code == 0
    assert capsys.readouterr().out.strip() == "Y22222 | Riverside Surgery | AB1 2CD"


def test_search_rejects_short_terms(practice_csv):
    assert cli.main(['search', 'a', '--data-file', str(practice_csv)]) == 2


def test_search_reports_load_failure(tmp_path):
    assert cli.main(['search', 'ab', '--data-file', str(tmp_path / "missing.csv")]) == 1


def test_report_writes_dataset_and_html(practice_csv, tmp_path):
    out = tmp_path / "out"
    code = cli.main([
        'report', 'X12345',
        '--data-file', str(practice_csv),
        '--prevalence', '2',
        '--output-dir', str(out),
        '--no-charts',
    ])

    assert code == 0
    dataset = json.loads((out / "dashboard" / "X12345_dashboard.json").read_text(encoding="utf-8"))
    assert dataset['prevalenceControl']['level'] == 2
    assert (out / "reports" / "X12345_report.html").exists()
    assert not (out / "figures").exists()


def test_report_unknown_practice_fails(practice_csv, tmp_path):
    code = cli.main([
        'report', 'NOPE', '--data-file', str(practice_csv), '--output-dir', str(tmp_path), '--no-charts',
    ])
    assert code == 1


def test_report_rejects_out_of_range_prevalence(practice_csv):
    with pytest.raises(SystemExit):
        cli.main(['report', 'X12345', '--data-file', str(practice_csv), '--prevalence', '5'])


def test_report_rejects_disabled_prevalence_level(practice_csv, tmp_path, monkeypatch):
    monkeypatch.setattr(cli, "get_prevalence_params", lambda: {'levels': [0, 1], 'default_level': 1})

    code = cli.main([
        'report', 'X12345', '--data-file', str(practice_csv),
        '--prevalence', '3', '--output-dir', str(tmp_path), '--no-charts',
    ])

    assert code == 2
    assert not (tmp_path / "dashboard").exists()
