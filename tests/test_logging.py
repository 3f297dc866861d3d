"""Tests for cpp2cs.logging."""

from __future__ import annotations

from pathlib import Path

from cpp2cs.logging import configure_logging, get_logger


def test_verbose_console_output_names_the_component(capsys) -> None:
    configure_logging(verbose=True)

    get_logger("header").debug("Skipping unparseable line: %s", "int;")

    assert "[cpp2cs] DEBUG header: Skipping unparseable line: int;" in capsys.readouterr().err


def test_default_console_output_hides_debug(capsys) -> None:
    configure_logging()

    logger = get_logger("source")
    logger.debug("hidden")
    logger.info("Parsing source: Sample.cpp")

    err = capsys.readouterr().err
    assert "hidden" not in err
    assert "[cpp2cs] INFO Parsing source: Sample.cpp" in err


def test_log_file_receives_debug_records(tmp_path: Path, capsys) -> None:
    log_file = tmp_path / "cpp2cs.log"
    configure_logging(log_file=log_file)

    get_logger("reconcile").debug("Matched CSample::Save")

    assert "DEBUG reconcile: Matched CSample::Save" in log_file.read_text(encoding="utf-8")
    assert "Matched" not in capsys.readouterr().err


def test_repeated_configuration_does_not_stack_handlers() -> None:
    configure_logging()
    logger = configure_logging(verbose=True)

    assert len(logger.handlers) == 1
