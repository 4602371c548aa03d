"""Tests for navtrack CLI commands."""
from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from navtrack.cli import app
from navtrack.config import settings

from tests.csv_samples import ALGECIRAS_SCENARIO, DENSE_TRACK

runner = CliRunner()


@pytest.fixture(autouse=True)
def builtin_ports(tmp_path, monkeypatch):
    """Point the CLI at a missing catalog file so it uses the built-in ports."""
    monkeypatch.setattr(settings, "PORTS_CONFIG", str(tmp_path / "no-ports.yaml"))


@pytest.fixture
def dense_file(tmp_path):
    path = tmp_path / "dense.csv"
    path.write_text(DENSE_TRACK, encoding="utf-8")
    return path


@pytest.fixture
def scenario_file(tmp_path):
    path = tmp_path / "scenario.csv"
    path.write_text(ALGECIRAS_SCENARIO, encoding="utf-8")
    return path


def _json(result):
    """Parse the JSON document printed by a command."""
    text = result.stdout
    return json.loads(text[text.index("{"):])


# ---------------------------------------------------------------------------
# analyze
# ---------------------------------------------------------------------------


def test_analyze_json_with_wide_gap(scenario_file):
    """--max-gap keeps five-minute sampling in one interval."""
    result = runner.invoke(app, ["analyze", str(scenario_file), "--json", "--max-gap", "600"])
    assert result.exit_code == 0, result.output
    body = _json(result)
    berth = body["data"]["intervals"][0]
    assert berth["duration"] == "00:05:00"
    assert berth["sampleCount"] == 2
    assert berth["startPort"]["name"] == "Algeciras"


def test_analyze_table(dense_file):
    result = runner.invoke(app, ["analyze", str(dense_file)])
    assert result.exit_code == 0, result.output
    assert "Intervals (3)" in result.output
    assert "6 rows from 1 files" in result.output


def test_analyze_missing_file_reported(dense_file, tmp_path):
    result = runner.invoke(app, ["analyze", str(dense_file), str(tmp_path / "absent.csv"), "--json"])
    assert result.exit_code == 0
    body = _json(result)
    assert body["meta"]["errors"][0].startswith("Could not read absent.csv")


def test_analyze_no_valid_rows_exits_1(tmp_path):
    bad = tmp_path / "bad.csv"
    bad.write_text("foo,bar\n1,2", encoding="utf-8")
    result = runner.invoke(app, ["analyze", str(bad)])
    assert result.exit_code == 1
    assert "no valid rows could be read" in result.output
    assert "File has no valid data: bad.csv" in result.output


def test_analyze_json_failure_exits_1(tmp_path):
    bad = tmp_path / "bad.csv"
    bad.write_text("foo,bar\n1,2", encoding="utf-8")
    result = runner.invoke(app, ["analyze", str(bad), "--json"])
    assert result.exit_code == 1
    assert _json(result)["success"] is False


def test_analyze_tab_delimiter(tmp_path):
    path = tmp_path / "tabs.tsv"
    path.write_text(DENSE_TRACK.replace(",", "\t"), encoding="utf-8")
    result = runner.invoke(app, ["analyze", str(path), "--delimiter", "tab", "--json"])
    assert result.exit_code == 0, result.output
    assert _json(result)["data"]["summary"]["totalRows"] == 6


# ---------------------------------------------------------------------------
# journeys / routes / activities
# ---------------------------------------------------------------------------


def test_journeys(dense_file):
    result = runner.invoke(app, ["journeys", str(dense_file)])
    assert result.exit_code == 0, result.output
    assert "Journeys (1)" in result.output
    assert "Algeciras" in result.output


def test_routes_none_found(dense_file):
    result = runner.invoke(app, ["routes", str(dense_file)])
    assert result.exit_code == 0, result.output
    assert "No routes found" in result.output


def test_activities(dense_file):
    result = runner.invoke(app, ["activities", str(dense_file)])
    assert result.exit_code == 0, result.output
    assert "Activity breakdown" in result.output


# ---------------------------------------------------------------------------
# raw
# ---------------------------------------------------------------------------


def test_raw_with_limit(scenario_file):
    result = runner.invoke(app, ["raw", str(scenario_file), "--limit", "2"])
    assert result.exit_code == 0, result.output
    body = _json(result)
    assert len(body["data"]) == 2
    assert body["meta"]["totalRows"] == 3
    assert body["data"][0]["closestPort"]["name"] == "Algeciras"


# ---------------------------------------------------------------------------
# ports
# ---------------------------------------------------------------------------


def test_ports_catalog():
    result = runner.invoke(app, ["ports"])
    assert result.exit_code == 0, result.output
    assert "Ports (3)" in result.output
    assert "Ceuta" in result.output


def test_ports_nearest():
    result = runner.invoke(app, ["ports", "--lat", "35.8895", "--lon", "-5.3075"])
    assert result.exit_code == 0, result.output
    assert "Nearest: Ceuta" in result.output


def test_ports_requires_both_coordinates():
    result = runner.invoke(app, ["ports", "--lat", "35.8"])
    assert result.exit_code == 1
    assert "Provide both --lat and --lon" in result.output


def test_ports_invalid_catalog(tmp_path):
    path = tmp_path / "ports.yaml"
    path.write_text("ports:\n  - {name: Nowhere, lat: 123.0, lon: 0.0}\n", encoding="utf-8")
    result = runner.invoke(app, ["--ports", str(path), "ports"])
    assert result.exit_code == 1
    assert "Invalid port catalog" in result.output


def test_ports_option_leaves_settings_untouched(tmp_path):
    path = tmp_path / "ports.yaml"
    path.write_text("ports:\n  - {name: Gibraltar, lat: 36.14, lon: -5.35}\n", encoding="utf-8")
    before = settings.PORTS_CONFIG
    result = runner.invoke(app, ["--ports", str(path), "ports"])
    assert result.exit_code == 0, result.output
    assert "Ports (1)" in result.output
    assert "Gibraltar" in result.output
    assert settings.PORTS_CONFIG == before


def test_ports_option_feeds_analysis(tmp_path, dense_file):
    path = tmp_path / "ports.yaml"
    path.write_text("ports:\n  - {name: Gibraltar, lat: 36.1287, lon: -5.44}\n", encoding="utf-8")
    result = runner.invoke(app, ["--ports", str(path), "analyze", str(dense_file), "--json"])
    assert result.exit_code == 0, result.output
    first = _json(result)["data"]["intervals"][0]
    assert first["startPort"]["name"] == "Gibraltar"
