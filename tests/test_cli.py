"""Tests for the command-line interface, using click's CliRunner."""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from kelvin_submit.cli import main
from kelvin_submit.errors import BrowserError, SubmissionError
from kelvin_submit.types import SubmitRejected


@pytest.fixture
def runner():
    return CliRunner()


class TestSubmitCommand:
    def test_passes_options_to_workflow(self, runner):
        with patch("kelvin_submit.cli.run") as run:
            result = runner.invoke(
                main,
                ["kelvin", "submit", "42", "--token", "secret", "--kelvin-url", "http://k/", "--no-open"],
                env={"KELVIN_LOG": ""},
            )

        assert result.exit_code == 0, result.output
        config = run.call_args[0][0]
        assert config.assignment_id == 42
        assert config.token == "secret"
        assert config.kelvin_url == "http://k"
        assert config.no_open is True

    def test_token_from_environment(self, runner):
        with patch("kelvin_submit.cli.run") as run:
            result = runner.invoke(main, ["kelvin", "submit", "1"], env={"KELVIN_API_TOKEN": "from-env"})

        assert result.exit_code == 0, result.output
        config = run.call_args[0][0]
        assert config.token == "from-env"
        assert config.kelvin_url == "https://kelvin.cs.vsb.cz"
        assert config.no_open is False

    def test_missing_token(self, runner):
        with patch("kelvin_submit.cli.run") as run:
            result = runner.invoke(main, ["kelvin", "submit", "1"], env={"KELVIN_API_TOKEN": None})

        assert result.exit_code == 1
        assert "missing API token" in result.output
        run.assert_not_called()

    def test_negative_assignment_is_usage_error(self, runner):
        result = runner.invoke(main, ["kelvin", "submit", "--token", "t", "--", "-1"])
        assert result.exit_code == 2

    def test_config_file(self, runner, tmp_path):
        path = tmp_path / "kelvin.yaml"
        path.write_text("token: file-token\nno_open: true\n")
        with patch("kelvin_submit.cli.run") as run:
            result = runner.invoke(
                main, ["kelvin", "submit", "3", "--config", str(path)], env={"KELVIN_API_TOKEN": None}
            )

        assert result.exit_code == 0, result.output
        config = run.call_args[0][0]
        assert config.token == "file-token"
        assert config.no_open is True

    def test_rejected_submit_exits_zero(self, runner):
        with patch("kelvin_submit.cli.run", return_value=SubmitRejected(status_code=403)):
            result = runner.invoke(main, ["kelvin", "submit", "1", "--token", "t"])

        assert result.exit_code == 0

    def test_fatal_error_exits_nonzero_with_context(self, runner):
        error = SubmissionError("sending submit to Kelvin")
        error.__cause__ = ConnectionError("connection refused")
        with patch("kelvin_submit.cli.run", side_effect=error):
            result = runner.invoke(main, ["kelvin", "submit", "1", "--token", "t"])

        assert result.exit_code == 1
        assert "sending submit to Kelvin: connection refused" in result.output

    def test_browser_error_exits_nonzero(self, runner):
        with patch("kelvin_submit.cli.run", side_effect=BrowserError("opening browser")):
            result = runner.invoke(main, ["kelvin", "submit", "1", "--token", "t"])

        assert result.exit_code == 1
        assert "opening browser" in result.output

    def test_invalid_log_env(self, runner):
        with patch("kelvin_submit.cli.run") as run:
            result = runner.invoke(main, ["kelvin", "submit", "1", "--token", "t"], env={"KELVIN_LOG": "loud"})

        assert result.exit_code == 1
        assert "unknown log level" in result.output
        run.assert_not_called()
