"""Tests for the command line interface."""
import os
import subprocess
import sys

import pytest
from typer.testing import CliRunner

from streamchat.cli.app import app

runner = CliRunner()


@pytest.fixture
def use_provider(monkeypatch):
    """Route the CLI's provider factory to a scripted provider."""
    def install(provider):
        monkeypatch.setattr("streamchat.cli.app.get_llm", lambda config, console=None: provider)
        return provider

    return install


@pytest.fixture
def memory_archive(monkeypatch):
    monkeypatch.setenv("STREAMCHAT_ARCHIVE", "memory")


class TestAskCommand:
    """Tests for `streamchat ask`."""

    def test_streams_answer(self, use_provider, hello_provider):
        provider = use_provider(hello_provider)

        result = runner.invoke(app, ["ask", "hi"])

        assert result.exit_code == 0
        assert "Hello" in result.output
        assert provider.calls[0]["messages"][-1].content == "hi"
        assert provider.closed

    def test_system_option_reaches_prompt(self, use_provider, hello_provider):
        provider = use_provider(hello_provider)

        result = runner.invoke(app, ["ask", "hi", "--system", "Answer in French"])

        assert result.exit_code == 0
        assert provider.calls[0]["system"].endswith("Answer in French")

    def test_blank_question_fails(self, use_provider, hello_provider):
        provider = use_provider(hello_provider)

        result = runner.invoke(app, ["ask", "   "])

        assert result.exit_code == 1
        assert "question is empty" in result.output
        assert provider.calls == []

    def test_missing_key_reports_error(self, monkeypatch, no_api_key):
        monkeypatch.setattr("streamchat.cli.app.get_llm", lambda config, console=None: None)

        result = runner.invoke(app, ["ask", "hi"])

        assert result.exit_code == 1
        assert "Missing API key" in result.output

    def test_expected_failure_prints_no_traceback(self, tmp_path):
        """Run the real entry point so stderr is what a user would see."""
        env = {**os.environ, "ANTHROPIC_API_KEY": ""}

        completed = subprocess.run(
            [sys.executable, "-m", "streamchat.cli.app", "ask", "hi"],
            cwd=tmp_path,
            env=env,
            capture_output=True,
            text=True,
            timeout=60,
        )

        assert completed.returncode == 1
        assert "Missing API key" in completed.stdout
        assert "Traceback" not in completed.stderr
        assert "Submission failed" not in completed.stderr


class TestChatCommand:
    """Tests for the interactive `streamchat chat` loop."""

    def test_one_turn_then_quit(self, use_provider, hello_provider, memory_archive):
        provider = use_provider(hello_provider)

        result = runner.invoke(app, ["chat"], input="hi\nquit\n")

        assert result.exit_code == 0
        assert "Hello" in result.output
        assert "Goodbye" in result.output
        assert provider.closed


class TestHealthCommand:
    """Tests for `streamchat health`."""

    def test_missing_key_is_unhealthy(self, no_api_key, memory_archive):
        result = runner.invoke(app, ["health"])

        assert result.exit_code == 1
        assert "NOT SET" in result.output
        assert "Archive (memory): OK" in result.output

    def test_healthy_with_key(self, monkeypatch, memory_archive):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")

        result = runner.invoke(app, ["health"])

        assert result.exit_code == 0
        assert "API key: SET" in result.output
