"""
Tests for the Typer command line interface.
"""

import json

import pytest
from typer.testing import CliRunner

from availability_engine import __version__
from availability_engine.cli.app import app

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path):
    records = [
        {"id": "s1", "userId": "u1", "dayOfWeek": 1, "startTime": "09:00", "endTime": "12:00", "timezone": "UTC", "isActive": True},
        {"id": "s2", "userId": "u2", "dayOfWeek": 1, "startTime": "10:00", "endTime": "13:00", "timezone": "UTC", "isActive": True},
        {"id": "s3", "userId": "u3", "dayOfWeek": 3, "startTime": "09:00", "endTime": "10:00", "timezone": "UTC", "isActive": True},
        {"id": "s4", "userId": "u1", "dayOfWeek": 2, "startTime": "08:00", "endTime": "09:00", "timezone": "UTC", "isActive": False},
    ]
    (tmp_path / "availability.json").write_text(json.dumps(records), encoding="utf-8")
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "store:\n"
        "  backend: file\n"
        "  data_file: availability.json\n"
        "reference_date: 2024-01-10\n",
        encoding="utf-8",
    )
    return str(config_path)


def _invoke_json(*args):
    result = runner.invoke(app, [*args, "--json"])
    return result, json.loads(result.stdout)


def test_overlap_json(config_file):
    result, payload = _invoke_json("overlap", "u1", "u2", "--config", config_file)

    assert result.exit_code == 0
    assert payload == {
        "success": True,
        "data": [
            {"dayOfWeek": 1, "startTime": "10:00", "endTime": "12:00", "duration": 120, "timezone": "UTC", "utcOffset": "+00:00"}
        ],
    }


def test_overlap_table(config_file):
    result = runner.invoke(app, ["overlap", "u1", "u2", "--config", config_file])

    assert result.exit_code == 0
    assert "Monday" in result.stdout
    assert "120 minute(s)" in result.stdout


def test_overlap_none(config_file):
    result = runner.invoke(app, ["overlap", "u1", "u3", "--config", config_file])

    assert result.exit_code == 0
    assert "No overlapping availability" in result.stdout


def test_matches_defaults_to_all_users(config_file):
    result, payload = _invoke_json("matches", "u1", "--min-overlap", "60", "--config", config_file)

    assert result.exit_code == 0
    assert [match["userId"] for match in payload["data"]] == ["u2"]
    assert payload["data"][0]["totalOverlapMinutes"] == 120


def test_matches_explicit_candidates(config_file):
    result, payload = _invoke_json("matches", "u1", "u3", "--config", config_file)

    assert result.exit_code == 0
    assert payload["data"] == []


def test_matches_table_lists_windows(config_file):
    result = runner.invoke(app, ["matches", "u1", "--min-overlap", "60", "--config", config_file])

    assert result.exit_code == 0
    assert "Monday | 10:00 – 12:00 (UTC UTC+00:00, 120 min)" in result.stdout


def test_list_json(config_file):
    result, payload = _invoke_json("list", "u1", "--config", config_file)

    assert result.exit_code == 0
    assert [(s["id"], s["isActive"]) for s in payload["data"]] == [("s1", True), ("s4", False)]


def test_list_filters(config_file):
    result, payload = _invoke_json("list", "u1", "--inactive", "--day", "2", "--config", config_file)

    assert result.exit_code == 0
    assert [s["id"] for s in payload["data"]] == ["s4"]


def test_list_table(config_file):
    result = runner.invoke(app, ["list", "u1", "--active", "--config", config_file])

    assert result.exit_code == 0
    assert "Monday" in result.stdout
    assert "Tuesday" not in result.stdout


def test_list_invalid_day(config_file):
    result, payload = _invoke_json("list", "u1", "--day", "9", "--config", config_file)

    assert result.exit_code == 1
    assert payload["error"]["code"] == "INVALID_TIME_FORMAT"


def test_slots(config_file):
    result, payload = _invoke_json("slots", "u1", "1", "--duration", "60", "--config", config_file)

    assert result.exit_code == 0
    assert [(s["startTime"], s["endTime"]) for s in payload["data"]] == [
        ("09:00", "10:00"),
        ("10:00", "11:00"),
        ("11:00", "12:00"),
    ]


def test_check(config_file):
    result, payload = _invoke_json("check", "u1", "1", "09:30", "--config", config_file)

    assert result.exit_code == 0
    assert payload["data"] == {"userId": "u1", "isAvailable": True}


def test_check_with_timezone(config_file):
    result, payload = _invoke_json("check", "u1", "1", "12:30", "--timezone", "Europe/Berlin", "--config", config_file)

    assert result.exit_code == 0
    assert payload["data"]["isAvailable"] is True


def test_summary(config_file):
    result, payload = _invoke_json("summary", "u1", "--config", config_file)

    assert result.exit_code == 0
    assert payload["data"]["totalWeeklyHours"] == 3
    assert payload["data"]["totalSlots"] == 1


def test_unknown_user_error_envelope(config_file):
    result, payload = _invoke_json("summary", "ghost", "--config", config_file)

    assert result.exit_code == 1
    assert payload["success"] is False
    assert payload["error"]["code"] == "USER_NOT_FOUND"
    assert "ghost" in payload["error"]["message"]
    assert payload["error"]["requestId"]
    assert payload["error"]["timestamp"]


def test_invalid_time_error_envelope(config_file):
    result, payload = _invoke_json("check", "u1", "1", "9:99", "--config", config_file)

    assert result.exit_code == 1
    assert payload["error"]["code"] == "INVALID_TIME_FORMAT"


def test_invalid_duration_plain_output(config_file):
    result = runner.invoke(app, ["slots", "u1", "1", "--duration", "10", "--config", config_file])

    assert result.exit_code == 1
    assert "Error" in result.stdout


def test_missing_config_file(tmp_path):
    result = runner.invoke(app, ["summary", "u1", "--config", str(tmp_path / "missing.yaml")])

    assert result.exit_code == 1
    assert "Config file not found" in result.stdout


def test_users(config_file):
    result = runner.invoke(app, ["users", "--config", config_file])

    assert result.exit_code == 0
    for user_id in ("u1", "u2", "u3"):
        assert user_id in result.stdout


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.stdout
