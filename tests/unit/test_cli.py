"""Unit tests for the CLI entrypoint.

Tests cover: implicit ``compile`` routing, report and JSON output, exit
codes for compile failures, missing files and malformed JSON, stdin input,
``--timezone`` / ``--reference`` / ``--max-duration-hours`` handling,
config errors, and the ``prompt`` subcommand.
"""

from __future__ import annotations

import io
import json
from pathlib import Path
from unittest.mock import patch

import pytest

from nlcal.__main__ import main
from nlcal.config import ConfigError, Settings

_CANDIDATE = {
    "summary": "Team meeting",
    "start": "2025-06-02T14:00:00",
    "end": "2025-06-02T15:00:00",
    "timeZone": "America/New_York",
}


def _write(tmp_path: Path, data: object, name: str = "reply.json") -> Path:
    path = tmp_path / name
    path.write_text(data if isinstance(data, str) else json.dumps(data))
    return path


@pytest.fixture(autouse=True)
def _default_settings(clean_env: None) -> None:
    """Run every CLI test against default settings."""


class TestCompileCommand:
    """Unit tests for ``nlcal compile``."""

    def test_valid_file_exit_zero(self, tmp_path: Path, capsys) -> None:
        path = _write(tmp_path, _CANDIDATE)

        exit_code = main(["compile", str(path)])

        assert exit_code == 0
        assert "Summary: Team meeting" in capsys.readouterr().out

    def test_implicit_compile_subcommand(self, tmp_path: Path, capsys) -> None:
        path = _write(tmp_path, _CANDIDATE)

        assert main([str(path)]) == 0
        assert "Summary: Team meeting" in capsys.readouterr().out

    def test_json_output(self, tmp_path: Path, capsys) -> None:
        path = _write(tmp_path, _CANDIDATE)

        exit_code = main([str(path), "--json"])

        data = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert data["status"] == "done"
        assert data["event"]["start"]["dateTime"] == "2025-06-02T14:00:00-04:00"

    def test_compile_failure_exit_one(self, tmp_path: Path, capsys) -> None:
        path = _write(tmp_path, dict(_CANDIDATE, summary=""))

        exit_code = main(["compile", str(path), "--json"])

        data = json.loads(capsys.readouterr().out)
        assert exit_code == 1
        assert data["error"]["code"] == "EmptySummary"
        assert data["error"]["stage"] == "validated"

    def test_missing_file(self, tmp_path: Path, capsys) -> None:
        exit_code = main(["compile", str(tmp_path / "nope.json")])

        assert exit_code == 1
        assert "File not found" in capsys.readouterr().err

    def test_directory_instead_of_file(self, tmp_path: Path, capsys) -> None:
        assert main(["compile", str(tmp_path)]) == 1
        assert "Not a file" in capsys.readouterr().err

    def test_malformed_json(self, tmp_path: Path, capsys) -> None:
        path = _write(tmp_path, "not json at all")

        assert main(["compile", str(path)]) == 1
        assert "Invalid JSON" in capsys.readouterr().err

    def test_reads_stdin(self, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps(_CANDIDATE)))

        assert main(["compile", "-", "--json"]) == 0
        assert json.loads(capsys.readouterr().out)["status"] == "done"

    def test_timezone_option_used_for_zoneless_candidate(self, tmp_path: Path, capsys) -> None:
        candidate = {k: v for k, v in _CANDIDATE.items() if k != "timeZone"}
        path = _write(tmp_path, candidate)

        main(["compile", str(path), "--timezone", "Asia/Tokyo", "--json"])

        event = json.loads(capsys.readouterr().out)["event"]
        assert event["start"] == {"dateTime": "2025-06-02T14:00:00+09:00", "timeZone": "Asia/Tokyo"}

    def test_unknown_timezone_option(self, tmp_path: Path, capsys) -> None:
        path = _write(tmp_path, _CANDIDATE)

        assert main(["compile", str(path), "--timezone", "Nowhere/Land"]) == 1
        assert "Unknown time zone" in capsys.readouterr().err

    def test_bad_reference_option(self, tmp_path: Path, capsys) -> None:
        path = _write(tmp_path, _CANDIDATE)

        assert main(["compile", str(path), "--reference", "yesterday"]) == 1
        assert "Invalid --reference" in capsys.readouterr().err

    def test_reference_anchors_bare_times(self, tmp_path: Path, capsys) -> None:
        path = _write(tmp_path, dict(_CANDIDATE, start="09:00", end="10:00"))

        main([str(path), "--reference", "2025-07-04T08:00:00", "--json"])

        event = json.loads(capsys.readouterr().out)["event"]
        assert event["start"]["dateTime"] == "2025-07-04T09:00:00-04:00"

    def test_max_duration_option(self, tmp_path: Path, capsys) -> None:
        path = _write(tmp_path, _CANDIDATE)

        main([str(path), "--max-duration-hours", "0.5", "--json"])

        warnings = json.loads(capsys.readouterr().out)["warnings"]
        assert [w["code"] for w in warnings] == ["EXCESSIVE_DURATION"]

    def test_non_positive_max_duration_option(self, tmp_path: Path, capsys) -> None:
        path = _write(tmp_path, _CANDIDATE)

        assert main([str(path), "--max-duration-hours", "0"]) == 1
        assert "must be positive" in capsys.readouterr().err

    @pytest.mark.parametrize("value", ["nan", "inf", "1e300"])
    def test_unusable_max_duration_option(self, tmp_path: Path, capsys, value: str) -> None:
        path = _write(tmp_path, _CANDIDATE)

        assert main([str(path), "--max-duration-hours", value]) == 1
        assert capsys.readouterr().err.startswith("Error: --max-duration-hours")

    def test_far_future_candidate_reports_failure(self, tmp_path: Path, capsys) -> None:
        path = _write(tmp_path, dict(_CANDIDATE, start="9999-12-31T22:00:00"))

        assert main([str(path), "--json"]) == 1
        assert json.loads(capsys.readouterr().out)["error"]["stage"] == "time_resolved"

    def test_max_duration_from_settings(self, tmp_path: Path, capsys) -> None:
        path = _write(tmp_path, _CANDIDATE)

        with patch(
            "nlcal.__main__.load_settings",
            return_value=Settings(max_event_duration_hours=0.25),
        ):
            main([str(path), "--json"])

        assert json.loads(capsys.readouterr().out)["warnings"]

    def test_verbose_enables_debug(self, tmp_path: Path) -> None:
        path = _write(tmp_path, _CANDIDATE)

        with patch("nlcal.__main__.setup_logging") as mock_setup:
            main([str(path), "-v"])

        mock_setup.assert_called_once_with("DEBUG")

    def test_log_level_from_settings(self, tmp_path: Path) -> None:
        path = _write(tmp_path, _CANDIDATE)

        with (
            patch("nlcal.__main__.load_settings", return_value=Settings(log_level="WARNING")),
            patch("nlcal.__main__.setup_logging") as mock_setup,
        ):
            main([str(path)])

        mock_setup.assert_called_once_with("WARNING")

    def test_config_error(self, tmp_path: Path, capsys) -> None:
        path = _write(tmp_path, _CANDIDATE)

        with patch("nlcal.__main__.load_settings", side_effect=ConfigError("bad env")):
            exit_code = main([str(path)])

        assert exit_code == 1
        assert "bad env" in capsys.readouterr().err

    def test_missing_argument_is_usage_error(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 2


class TestPromptCommand:
    """Unit tests for ``nlcal prompt``."""

    def test_prints_prompt(self, capsys) -> None:
        exit_code = main(
            [
                "prompt",
                "Add daily standup at 9am",
                "--reference",
                "2025-06-01T12:00:00+00:00",
                "--timezone",
                "Europe/Paris",
            ]
        )

        out = capsys.readouterr().out
        assert exit_code == 0
        assert '"Add daily standup at 9am"' in out
        assert "2025-06-01T14:00:00+02:00 (Europe/Paris)" in out

    def test_unknown_timezone(self, capsys) -> None:
        assert main(["prompt", "lunch", "--timezone", "Nowhere/Land"]) == 1
        assert "Unknown time zone" in capsys.readouterr().err
