"""Unit tests for femtologging integration helpers."""

from __future__ import annotations

import pytest

from prtriage.logging import (
    configure_logging,
    format_log_message,
    log_debug,
    log_exception,
    log_info,
    log_warning,
    normalize_log_level,
)


class _FakeLogger:
    """Collects log calls for assertions."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, object | None, bool]] = []

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str:
        self.calls.append((level, message, exc_info, stack_info))
        return message


@pytest.mark.parametrize(
    ("raw", "expected", "invalid"),
    [
        ("debug", "DEBUG", False),
        (" Warn ", "WARN", False),
        (None, "INFO", True),
        ("loud", "INFO", True),
    ],
)
def test_normalize_log_level(raw: str | None, expected: str, invalid: bool) -> None:  # noqa: FBT001
    """Levels are upper-cased and unknown values fall back to INFO."""
    assert normalize_log_level(raw) == (expected, invalid)


def test_format_log_message_without_args_keeps_percent_signs() -> None:
    """A template without arguments is returned verbatim."""
    assert format_log_message("100% done") == "100% done"
    assert format_log_message("%s of %d", "two", 3) == "two of 3"


def test_helpers_emit_levels() -> None:
    """Each helper emits its level with a pre-formatted message."""
    logger = _FakeLogger()
    error = RuntimeError("boom")

    log_debug(logger, "d %s", 1)
    log_info(logger, "i %s", 2)
    log_warning(logger, "w %s", 3, exc_info=error)
    log_exception(logger, "failed", error)

    assert logger.calls == [
        ("DEBUG", "d 1", None, False),
        ("INFO", "i 2", None, False),
        ("WARNING", "w 3", error, False),
        ("ERROR", "failed", error, False),
    ]


def test_configure_logging_passes_level(monkeypatch: pytest.MonkeyPatch) -> None:
    """configure_logging hands the normalized level to basicConfig."""
    captured: dict[str, object] = {}

    def fake_basic_config(**kwargs: object) -> None:
        captured.update(kwargs)

    monkeypatch.setattr("prtriage.logging.basicConfig", fake_basic_config)

    assert configure_logging("error", force=True) == ("ERROR", False)
    assert captured == {"level": "ERROR", "force": True}
