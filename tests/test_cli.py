"""Tests for the command line entry point."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from local_whisper import __main__ as cli
from local_whisper.common.errors import TranscriptionFailedError
from local_whisper.common.models import BinaryStatus, DependencyStatus, TranscriptionResult


@pytest.fixture
def cli_env(tmp_path: Path, monkeypatch) -> Path:
    """Isolate the CLI: private config/lock paths, no logging or handler side effects."""
    for name in ("WHISPER_MODEL", "WHISPER_LANGUAGE", "WHISPER_CMD"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: None)
    monkeypatch.setattr(cli, "install_release_handlers", lambda lock: None)

    lock_path = tmp_path / "whisper.lock"
    config_path = tmp_path / "config.yaml"
    config_path.write_text(f"transcribe:\n  lock_path: {lock_path}\n")
    return config_path


def _lock_path(config_path: Path) -> Path:
    return config_path.parent / "whisper.lock"


class TestParseArgs:
    def _options(self, argv: list[str]):
        return cli.options_from_args(cli.build_parser().parse_args(argv))

    def test_audio_path_only(self) -> None:
        options = self._options(["voice.ogg"])
        assert options.audio_path == Path("voice.ogg")
        assert options.smart_model is True
        assert options.model is None
        assert options.force is False

    def test_model_disables_smart_selection(self) -> None:
        options = self._options(["audio.wav", "--model", "large"])
        assert options.model == "large"
        assert options.smart_model is False

    def test_model_must_be_known(self) -> None:
        with pytest.raises(SystemExit):
            self._options(["audio.wav", "--model", "huge"])

    @pytest.mark.parametrize("flag", ["--language", "--lang", "-l"])
    def test_language_aliases(self, flag: str) -> None:
        assert self._options(["audio.mp3", flag, "de"]).language == "de"

    @pytest.mark.parametrize("flag", ["--output-dir", "--output", "-o"])
    def test_output_dir_aliases(self, flag: str) -> None:
        assert self._options(["audio.ogg", flag, "/tmp/out"]).output_dir == Path("/tmp/out")

    def test_multiple_flags(self) -> None:
        options = self._options(
            ["voice.ogg", "--model", "medium", "--language", "es", "--output-dir", "./out"]
        )
        assert options.audio_path == Path("voice.ogg")
        assert options.model == "medium"
        assert options.language == "es"
        assert options.output_dir == Path("./out")

    def test_smart_model_flags(self) -> None:
        assert self._options(["a.ogg", "--no-smart-model"]).smart_model is False
        assert self._options(["a.ogg", "--smart-model"]).smart_model is True

    def test_smart_model_flags_are_exclusive(self) -> None:
        with pytest.raises(SystemExit):
            self._options(["a.ogg", "--smart-model", "--no-smart-model"])

    @pytest.mark.parametrize("flag", ["--force", "-f"])
    def test_force(self, flag: str) -> None:
        assert self._options(["a.ogg", flag]).force is True


def test_help_mentions_environment_and_smart_selection(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.build_parser().parse_args(["--help"])

    assert excinfo.value.code == 0
    output = capsys.readouterr().out
    for text in ("--model", "--language", "--output-dir", "WHISPER_MODEL", "WHISPER_LANGUAGE", "smart"):
        assert text in output


def test_version_exits_zero(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.build_parser().parse_args(["--version"])

    assert excinfo.value.code == 0
    assert "local-whisper" in capsys.readouterr().out


def test_check_prints_status_and_skips_lock(cli_env: Path, monkeypatch, capsys) -> None:
    status = DependencyStatus(
        ffmpeg_present=True, whisper=BinaryStatus.absent(), python_present=True
    )
    monkeypatch.setattr(cli, "check_dependencies", lambda _config: status)

    assert cli.main(["--check", "--config", str(cli_env)]) == 0

    output = capsys.readouterr().out
    assert "whisper:  MISSING" in output
    assert "pip install openai-whisper" in output
    assert not _lock_path(cli_env).exists()


def test_missing_audio_path_prints_usage(cli_env: Path, capsys) -> None:
    assert cli.main(["--config", str(cli_env)]) == 1

    assert "usage:" in capsys.readouterr().out
    assert not _lock_path(cli_env).exists()


def test_lock_held_by_live_process(cli_env: Path, monkeypatch, capsys) -> None:
    lock_path = _lock_path(cli_env)
    holder = os.getppid()
    lock_path.write_text(str(holder))
    monkeypatch.setattr(
        cli, "transcribe", lambda *a, **k: pytest.fail("must not transcribe")
    )

    assert cli.main(["voice.ogg", "--config", str(cli_env)]) == 1

    assert f"PID: {holder}" in capsys.readouterr().err
    assert lock_path.read_text() == str(holder)


def test_successful_run(cli_env: Path, tmp_path: Path, monkeypatch, capsys) -> None:
    audio = tmp_path / "voice.ogg"
    audio.write_bytes(b"\0" * 1024)
    seen = {}

    def fake_transcribe(options, config):
        seen["options"] = options
        seen["lock_held"] = _lock_path(cli_env).read_text() == str(os.getpid())
        return TranscriptionResult(
            text="hello world\n",
            artifact_path=tmp_path / "voice.txt",
            model="large",
            language="auto",
        )

    monkeypatch.setattr(cli, "ensure_dependencies", lambda config: None)
    monkeypatch.setattr(cli, "transcribe", fake_transcribe)

    assert cli.main([str(audio), "--config", str(cli_env)]) == 0

    output = capsys.readouterr().out
    assert "hello world" in output
    assert "Model used: large" in output
    assert seen["lock_held"] is True
    assert seen["options"].audio_path == audio
    assert not _lock_path(cli_env).exists()


def test_transcription_failure_exits_one(cli_env: Path, monkeypatch, capsys) -> None:
    def failing_transcribe(options, config):
        raise TranscriptionFailedError("model not found")

    monkeypatch.setattr(cli, "ensure_dependencies", lambda config: None)
    monkeypatch.setattr(cli, "transcribe", failing_transcribe)

    assert cli.main(["voice.ogg", "--config", str(cli_env)]) == 1

    assert "Whisper transcription failed: model not found" in capsys.readouterr().err
    assert not _lock_path(cli_env).exists()


def test_missing_dependencies_show_instructions(cli_env: Path, monkeypatch, capsys) -> None:
    status = DependencyStatus(
        ffmpeg_present=False, whisper=BinaryStatus.absent(), python_present=True
    )
    monkeypatch.setattr(cli, "check_dependencies", lambda _config: status)
    monkeypatch.setattr(
        "local_whisper.common.orchestrator.check_dependencies", lambda _config: status
    )

    assert cli.main(["voice.ogg", "--config", str(cli_env)]) == 1

    captured = capsys.readouterr()
    assert "Missing dependencies: ffmpeg, whisper" in captured.err
    assert "ffmpeg:   MISSING" in captured.out
    assert "Installation instructions" in captured.out
    assert not _lock_path(cli_env).exists()


def test_invalid_config_exits_one(tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: None)
    monkeypatch.setenv("WHISPER_MODEL", "enormous")

    assert cli.main(["voice.ogg", "--config", str(tmp_path / "missing.yaml")]) == 1

    assert "Invalid default model" in capsys.readouterr().err


def test_unwritable_lock_location_exits_one(tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: None)
    monkeypatch.setattr(cli, "install_release_handlers", lambda lock: None)
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("")
    config_path = tmp_path / "config.yaml"
    config_path.write_text(f"transcribe:\n  lock_path: {blocker / 'whisper.lock'}\n")

    assert cli.main(["voice.ogg", "--config", str(config_path)]) == 1

    assert "Error: Cannot create lock directory" in capsys.readouterr().err


def test_mistyped_lock_path_exits_one(tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: None)
    config_path = tmp_path / "config.yaml"
    config_path.write_text("transcribe:\n  lock_path: 5\n")

    assert cli.main(["voice.ogg", "--config", str(config_path)]) == 1

    assert "lock_path must be a path" in capsys.readouterr().err
