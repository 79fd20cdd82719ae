"""Tests for the run.py command line entry point."""

import sys
from unittest.mock import MagicMock, patch

import pytest

import run


def _run_main(argv, success=True, valid=True):
    orchestrator = MagicMock()
    orchestrator.seed_strategy = "batch"
    orchestrator.should_publish = True
    orchestrator.output_manager.retention_days = 0
    orchestrator.validate_config.return_value = valid
    orchestrator.run.return_value = {"success": success}

    with patch.object(sys, "argv", ["run.py"] + argv), \
         patch("run.SeedOrchestrator", return_value=orchestrator):
        run.main()
    return orchestrator


def test_list_argument_runs_list_mode():
    orchestrator = _run_main(["list"])
    orchestrator.run.assert_called_once_with("list")


@pytest.mark.parametrize("argv", [[], ["seed"], ["anything"]])
def test_other_arguments_run_seed_mode(argv):
    orchestrator = _run_main(argv)
    orchestrator.run.assert_called_once_with("seed")


def test_cli_overrides():
    orchestrator = _run_main(["--strategy", "bulk", "--no-publish"])
    assert orchestrator.seed_strategy == "bulk"
    assert orchestrator.should_publish is False


def test_failed_run_exits_nonzero():
    with pytest.raises(SystemExit) as exc_info:
        _run_main([], success=False)
    assert exc_info.value.code == 1


def test_invalid_config_exits_before_run():
    with pytest.raises(SystemExit) as exc_info:
        _run_main([], valid=False)
    assert exc_info.value.code == 1


def test_debug_flag_enables_request_logging():
    with patch("run.logging.basicConfig") as basic_config:
        orchestrator = _run_main(["--debug"])
    basic_config.assert_called_once()
    assert orchestrator.debug is True


def test_version_from_installed_package():
    with patch("run.metadata.version", return_value="1.2.3"):
        assert run.get_version() == "1.2.3"


def test_version_falls_back_to_version_file(tmp_path):
    version_file = tmp_path / "VERSION"
    version_file.write_text("0.9.0\n")
    with patch("run.metadata.version", side_effect=run.metadata.PackageNotFoundError), \
         patch("run.VERSION_FILE", version_file):
        assert run.get_version() == "0.9.0"
