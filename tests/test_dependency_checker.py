"""Tests for external tool probing."""

from __future__ import annotations

import subprocess

from local_whisper.common import dependency_checker
from local_whisper.common.config import TranscribeConfig
from local_whisper.common.dependency_checker import (
    check_dependencies,
    format_dependency_report,
)
from local_whisper.common.models import BinaryStatus, DependencyStatus


def _fake_run(outcomes: dict[str, object], calls: list[list[str]]):
    """subprocess.run stand-in keyed by the probed executable."""

    def fake_run(args, **kwargs):
        calls.append(list(args))
        outcome = outcomes.get(args[0], 0)
        if isinstance(outcome, BaseException):
            raise outcome
        return subprocess.CompletedProcess(args, outcome, stdout="", stderr="")

    return fake_run


def test_all_present(monkeypatch) -> None:
    calls: list[list[str]] = []
    monkeypatch.setattr(dependency_checker.subprocess, "run", _fake_run({}, calls))

    status = check_dependencies(TranscribeConfig(whisper_cmd="/opt/whisper"))

    assert status == DependencyStatus(
        ffmpeg_present=True,
        whisper=BinaryStatus.found("/opt/whisper"),
        python_present=True,
    )
    assert status.ready
    assert ["/opt/whisper", "--help"] in calls


def test_failures_become_absent(monkeypatch) -> None:
    calls: list[list[str]] = []
    outcomes = {
        "ffmpeg": FileNotFoundError("ffmpeg"),
        "/opt/whisper": 1,
        "python3": subprocess.TimeoutExpired("python3", 1),
    }
    monkeypatch.setattr(dependency_checker.subprocess, "run", _fake_run(outcomes, calls))

    status = check_dependencies(TranscribeConfig(whisper_cmd="/opt/whisper"))

    assert status.ffmpeg_present is False
    assert status.whisper == BinaryStatus.absent()
    assert status.python_present is False
    assert status.missing_required() == ["ffmpeg", "whisper"]


def test_unlocated_whisper_is_not_executed(monkeypatch) -> None:
    calls: list[list[str]] = []
    monkeypatch.setattr(dependency_checker.subprocess, "run", _fake_run({}, calls))
    monkeypatch.setattr(dependency_checker, "find_whisper_binary", lambda _config: None)

    status = check_dependencies(TranscribeConfig())

    assert status.whisper.present is False
    assert status.whisper.path is None
    assert [call[0] for call in calls] == ["ffmpeg", "python3"]


def test_status_is_fresh_each_call(monkeypatch) -> None:
    calls: list[list[str]] = []
    outcomes: dict[str, object] = {}
    monkeypatch.setattr(dependency_checker.subprocess, "run", _fake_run(outcomes, calls))
    config = TranscribeConfig(whisper_cmd="/opt/whisper")

    assert check_dependencies(config).ffmpeg_present is True
    outcomes["ffmpeg"] = 127
    assert check_dependencies(config).ffmpeg_present is False


def test_format_dependency_report() -> None:
    report = format_dependency_report(
        DependencyStatus(
            ffmpeg_present=True,
            whisper=BinaryStatus.absent(),
            python_present=True,
        )
    )

    assert "ffmpeg:   OK" in report
    assert "whisper:  MISSING (not found)" in report
    assert "python3:  OK" in report


def test_format_dependency_report_shows_whisper_path() -> None:
    report = format_dependency_report(
        DependencyStatus(ffmpeg_present=False, whisper=BinaryStatus.found("/usr/bin/whisper"))
    )

    assert "whisper:  OK (/usr/bin/whisper)" in report
    assert "ffmpeg:   MISSING" in report
