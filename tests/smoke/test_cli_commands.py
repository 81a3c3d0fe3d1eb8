"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
They don't validate correctness deeply - just that commands work.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import subprocess
import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner

from curtiz import cli
from curtiz.errors import WriteConflictError
from curtiz.study.store import ContentFile

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

# Project root
PROJECT_ROOT = Path(__file__).parent.parent.parent

MODEL = "2019-01-01T00:00:00.000Z; 3.000e+00, 3.000e+00, 2.500e-01"

runner = CliRunner()


def run_cli_command(command: str, timeout: int = 30) -> tuple[int, str, str]:
    """Run `python -m curtiz.cli <command>` and return exit code, stdout, stderr."""
    result = subprocess.run(
        f"{sys.executable} -m curtiz.cli {command}",
        shell=True,
        cwd=PROJECT_ROOT,
        capture_output=True,
        text=True,
        timeout=timeout,
    )
    return result.returncode, result.stdout, result.stderr


@pytest.fixture
def unparsed_file(tmp_path, yamada_text):
    path = tmp_path / "new.md"
    path.write_text(yamada_text, encoding="utf-8")
    return path


@pytest.fixture
def parsed_file(tmp_path, yamada_parsed_text):
    path = tmp_path / "parsed.md"
    path.write_text(yamada_parsed_text, encoding="utf-8")
    return path


@pytest.fixture
def learned_file(tmp_path, yamada_parsed_text):
    header, rest = yamada_parsed_text.split("\n", 1)
    clozes = "".join(
        f"- ◊cloze {c}\n  - ◊Ebisu1 _ {MODEL}\n" for c in ("は", "に", "ほめられた")
    )
    path = tmp_path / "learned.md"
    path.write_text(f"{header}\n{clozes}- ◊Ebisu1 reading {MODEL}\n", encoding="utf-8")
    return path


class TestCLIHelp:
    """Test that help commands work."""

    def test_main_help(self):
        """Main help should display without errors."""
        code, stdout, stderr = run_cli_command("--help")

        assert code == 0, f"Help failed: {stderr}"
        assert "quiz" in stdout and "schedule" in stdout

    @pytest.mark.parametrize("command", ["parse", "learn", "quiz", "schedule"])
    def test_command_help(self, command):
        result = runner.invoke(cli.app, [command, "--help"])
        assert result.exit_code == 0

    def test_missing_file_is_rejected(self, tmp_path):
        result = runner.invoke(cli.app, ["schedule", str(tmp_path / "nope.md")])
        assert result.exit_code != 0


class TestCLIParse:
    def test_parse_writes_clozes(self, monkeypatch, segmenter, unparsed_file, yamada_parsed_text):
        monkeypatch.setattr(cli, "get_segmenter", lambda config: segmenter)

        result = runner.invoke(cli.app, ["parse", str(unparsed_file)])

        assert result.exit_code == 0, result.output
        assert unparsed_file.read_text(encoding="utf-8") == yamada_parsed_text

    def test_segmentation_failure_is_reported(self, monkeypatch, make_segmenter, unparsed_file, yamada_text):
        monkeypatch.setattr(cli, "get_segmenter", lambda config: make_segmenter({}))

        result = runner.invoke(cli.app, ["parse", str(unparsed_file)])

        assert result.exit_code == 0
        assert "⚠" in result.output
        assert unparsed_file.read_text(encoding="utf-8") == yamada_text

    def test_malformed_file_fails(self, tmp_path):
        path = tmp_path / "bad.md"
        path.write_text("# ◊sent only :: two\n", encoding="utf-8")

        result = runner.invoke(cli.app, ["parse", str(path)])

        assert result.exit_code == 1
        assert "✗" in result.output


class TestCLILearn:
    def test_learn_writes_models(self, parsed_file):
        result = runner.invoke(cli.app, ["learn", str(parsed_file)], input="2\n")

        assert result.exit_code == 0, result.output
        assert "Learned 4 quizzes" in result.output
        text = parsed_file.read_text(encoding="utf-8")
        assert text.count("◊Ebisu1") == 4
        assert "5.000e-01" in text

    def test_learn_segments_new_sentences_first(self, monkeypatch, segmenter, unparsed_file):
        monkeypatch.setattr(cli, "get_segmenter", lambda config: segmenter)

        result = runner.invoke(cli.app, ["learn", str(unparsed_file)], input="\n")

        assert result.exit_code == 0, result.output
        assert "Learned 4 quizzes" in result.output
        text = unparsed_file.read_text(encoding="utf-8")
        assert text.startswith("# ◊sent やまだはせんせいにほめられた :: ")
        assert text.count("- ◊cloze ") == 3
        assert text.count("◊Ebisu1") == 4

    def test_unsegmented_sentence_is_not_learned(self, monkeypatch, make_segmenter, unparsed_file, yamada_text):
        monkeypatch.setattr(cli, "get_segmenter", lambda config: make_segmenter({}))

        result = runner.invoke(cli.app, ["learn", str(unparsed_file)], input="\n")

        assert result.exit_code == 0
        assert "⚠" in result.output
        assert "Nothing left to learn" in result.output
        assert unparsed_file.read_text(encoding="utf-8") == yamada_text

    def test_nothing_to_learn(self, learned_file):
        result = runner.invoke(cli.app, ["learn", str(learned_file)])

        assert result.exit_code == 0
        assert "Nothing left to learn" in result.output

    def test_write_conflict_is_not_fatal(self, monkeypatch, parsed_file):
        def conflict(self, config=None):
            raise WriteConflictError(self.path, 1, 2)

        monkeypatch.setattr(ContentFile, "save", conflict)
        result = runner.invoke(cli.app, ["learn", str(parsed_file)], input="\n")

        assert result.exit_code == 0
        assert "not saved" in result.output


class TestCLIQuiz:
    def test_quiz_grades_and_saves(self, learned_file):
        before = learned_file.read_text(encoding="utf-8")

        # Every model is identical, so the first quiz (は) is the weakest
        result = runner.invoke(cli.app, ["quiz", str(learned_file)], input="は\n")

        assert result.exit_code == 0, result.output
        assert "Correct" in result.output
        assert learned_file.read_text(encoding="utf-8") != before

    def test_wrong_answer_shows_expected(self, learned_file):
        result = runner.invoke(cli.app, ["quiz", str(learned_file)], input="が\n")

        assert result.exit_code == 0, result.output
        assert "Incorrect" in result.output
        assert "Expected" in result.output

    def test_nothing_learned(self, parsed_file):
        result = runner.invoke(cli.app, ["quiz", str(parsed_file)])

        assert result.exit_code == 0
        assert "Nothing learned yet" in result.output


class TestCLISchedule:
    def test_schedule_table(self, learned_file):
        result = runner.invoke(cli.app, ["schedule", str(learned_file)])

        assert result.exit_code == 0, result.output
        assert "Review Schedule" in result.output
        assert "reading" in result.output

    def test_schedule_limit(self, learned_file):
        result = runner.invoke(cli.app, ["schedule", "--limit", "1", str(learned_file)])
        assert result.exit_code == 0

    def test_empty_schedule(self, parsed_file):
        result = runner.invoke(cli.app, ["schedule", str(parsed_file)])

        assert result.exit_code == 0
        assert "Nothing learned yet" in result.output
