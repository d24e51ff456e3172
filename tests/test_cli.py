"""Tests for the command-line interface."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from aicmd.cli import _cd_target, apply_overrides, create_parser, run_cli, run_line, run_suggest
from aicmd.config.schema import Config
from aicmd.errors import CredentialError, NetworkError


class TestParser:
    """Argument parsing."""

    def test_default_mode(self) -> None:
        parsed = create_parser().parse_args([])
        assert parsed.mode is None
        assert parsed.verbose == 0

    def test_suggest_text(self) -> None:
        parsed = create_parser().parse_args(["--provider", "gemini", "suggest", "list", "files"])
        assert parsed.mode == "suggest"
        assert parsed.text == ["list", "files"]
        assert parsed.provider == "gemini"

    def test_edit_initial(self) -> None:
        parsed = create_parser().parse_args(["-v", "edit", "--initial", "git st"])
        assert parsed.mode == "edit"
        assert parsed.initial == "git st"
        assert parsed.verbose == 1

    def test_overrides(self) -> None:
        parsed = create_parser().parse_args(
            ["-v", "--provider", "OpenAI", "--model", "gpt-4.1", "suggest", "x"]
        )
        config = apply_overrides(Config(), parsed)
        assert config.llm.provider == "OpenAI"
        assert config.llm.model_for("openai") == "gpt-4.1"
        assert config.logging.debug is True


class TestSuggest:
    """One-shot suggest mode."""

    @pytest.mark.asyncio
    async def test_prints_sanitized_suggestion(self, capsys: pytest.CaptureFixture[str]) -> None:
        with patch(
            "aicmd.llm.dispatcher.RequestDispatcher.dispatch",
            new_callable=AsyncMock,
            return_value="\x1b[1mls -la\x1b[0m\n",
        ) as mock_dispatch:
            status = await run_suggest(Config(), "list files")

        assert status == 0
        assert capsys.readouterr().out == "ls -la\n"
        mock_dispatch.assert_awaited_once_with("list files")

    @pytest.mark.asyncio
    async def test_unknown_provider(self, capsys: pytest.CaptureFixture[str]) -> None:
        config = Config()
        config.llm.provider = "skynet"
        assert await run_suggest(config, "x") == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "unknown provider" in captured.err

    @pytest.mark.asyncio
    async def test_missing_key_prints_remediation(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        error = CredentialError(
            "ANTHROPIC_API_KEY not set", provider="anthropic", remediation="export IT"
        )
        with patch(
            "aicmd.llm.dispatcher.RequestDispatcher.dispatch",
            new_callable=AsyncMock,
            side_effect=error,
        ):
            assert await run_suggest(Config(), "x") == 1
        err = capsys.readouterr().err
        assert "ANTHROPIC_API_KEY not set" in err
        assert "export IT" in err

    @pytest.mark.asyncio
    async def test_provider_failure(self, capsys: pytest.CaptureFixture[str]) -> None:
        with patch(
            "aicmd.llm.dispatcher.RequestDispatcher.dispatch",
            new_callable=AsyncMock,
            side_effect=NetworkError("anthropic: 529 overloaded"),
        ):
            assert await run_suggest(Config(), "x") == 1
        assert "529 overloaded" in capsys.readouterr().err

    def test_run_cli_suggest(self, capsys: pytest.CaptureFixture[str], tmp_path: Path) -> None:
        with patch(
            "aicmd.llm.dispatcher.RequestDispatcher.dispatch",
            new_callable=AsyncMock,
            return_value="du -sh *",
        ):
            status = run_cli(["--config", str(tmp_path / "none.yaml"), "suggest", "sizes"])
        assert status == 0
        assert capsys.readouterr().out == "du -sh *\n"


class TestRunLine:
    """Running accepted lines."""

    @pytest.mark.parametrize(
        ("line", "expected"),
        [
            ("cd /tmp", "/tmp"),
            ("cd", "~"),
            ("cd 'my dir'", "my dir"),
            ("cd /tmp && ls", None),
            ("ls", None),
            ("cd 'unbalanced", None),
        ],
    )
    def test_cd_target(self, line: str, expected: str | None) -> None:
        assert _cd_target(line) == expected

    @pytest.mark.asyncio
    async def test_cd_changes_directory(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / "sub").mkdir()
        assert await run_line("cd sub") == 0
        assert Path(os.getcwd()) == (tmp_path / "sub").resolve()

    @pytest.mark.asyncio
    async def test_runs_with_shell(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SHELL", "/bin/sh")
        assert await run_line("exit 3") == 3
