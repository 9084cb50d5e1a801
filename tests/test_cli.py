"""Tests for CLI commands."""

import json

import pytest
from typer.testing import CliRunner

from asr_correct import __version__
from asr_correct.cli import app
from asr_correct.logging import LogConfig, configure_logging
from asr_correct.store import SENTENCES_FILE, VOCABULARY_FILE


runner = CliRunner()


@pytest.fixture(autouse=True)
def reset_logging():
    """Detach log handlers bound to the runner's streams."""
    yield
    configure_logging(LogConfig())


@pytest.fixture
def corpus_dir(tmp_path):
    """Corpus directory with two sentences and a vocabulary."""
    directory = tmp_path / "corpus"
    directory.mkdir()
    (directory / SENTENCES_FILE).write_text("<s> i like cats </s>\n<s> please open the door </s>\n")
    (directory / VOCABULARY_FILE).write_text("i\ncats\nplease\nthe\ndoor\n")
    return directory


class TestVersion:
    """Tests for '--version' option."""

    def test_version(self):
        """Test version output."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output


class TestTokenizeCommand:
    """Tests for 'asr-correct tokenize' command."""

    def test_tokenize(self):
        """Test tokens are listed with their index."""
        result = runner.invoke(app, ["tokenize", "Hello,  world!!"])

        assert result.exit_code == 0
        lines = [line.split() for line in result.output.splitlines()]
        assert lines == [["0", "Hello"], ["1", "world"]]

    def test_tokenize_keeps_apostrophes(self):
        """Test contractions stay one token."""
        result = runner.invoke(app, ["tokenize", "don't stop"])

        assert result.exit_code == 0
        assert "don't" in result.output


class TestAlignCommand:
    """Tests for 'asr-correct align' command."""

    def test_align_words(self):
        """Test distance and edit table."""
        result = runner.invoke(app, ["align", "i lik cats", "i like cats", "--no-matrix"])

        assert result.exit_code == 0
        assert "Distance: 1" in result.output
        assert "substitution" in result.output
        assert "lik" in result.output

    def test_align_characters(self):
        """Test character alignment."""
        result = runner.invoke(app, ["align", "--chars", "kitten", "sitting", "--no-matrix"])

        assert result.exit_code == 0
        assert "Distance: 3" in result.output

    def test_align_matrix(self):
        """Test the matrix is printed by default."""
        result = runner.invoke(app, ["align", "a b", "b"])

        assert result.exit_code == 0
        assert "Edit operations" in result.output
        assert any(line.split() == ["0", "1", "2"] for line in result.output.splitlines())

    def test_align_blank_source(self):
        """Test a blank line aligns as an empty sequence."""
        result = runner.invoke(app, ["align", "", "a b", "--no-matrix"])

        assert result.exit_code == 0
        assert "Distance: 2" in result.output
        assert result.output.count("insertion") == 2
        assert "substitution" not in result.output


class TestCorrectCommand:
    """Tests for 'asr-correct correct' command."""

    def test_correct(self, corpus_dir):
        """Test a hypothesis is corrected against the corpus."""
        result = runner.invoke(app, ["correct", "i lik cats", "--corpus", str(corpus_dir)])

        assert result.exit_code == 0
        assert "i like cats" in result.output
        assert "reference #0" in result.output

    def test_correct_json(self, corpus_dir):
        """Test JSON output."""
        result = runner.invoke(
            app, ["correct", "please opn the door", "-d", str(corpus_dir), "--json"]
        )

        assert result.exit_code == 0
        data = json.loads(result.output.strip())
        assert data["text"] == "please open the door"
        assert data["reference_index"] == 1
        assert data["corrections"][0]["original"] == "opn"

    def test_correct_stdin(self, corpus_dir):
        """Test hypotheses read from stdin, one per line."""
        result = runner.invoke(
            app,
            ["correct", "-", "-d", str(corpus_dir), "--json"],
            input="i lik cats\nplease opn the door\n",
        )

        assert result.exit_code == 0
        texts = [json.loads(line)["text"] for line in result.output.strip().splitlines()]
        assert texts == ["i like cats", "please open the door"]

    def test_unrelated_hypothesis_unchanged(self, corpus_dir):
        """Test rejected hypotheses are printed as given."""
        result = runner.invoke(
            app, ["correct", "completely different words", "-d", str(corpus_dir)]
        )

        assert result.exit_code == 0
        assert result.output.strip() == "completely different words"

    def test_threshold_option(self, corpus_dir):
        """Test a zero threshold only accepts exact matches."""
        result = runner.invoke(
            app, ["correct", "i lik cats", "-d", str(corpus_dir), "--threshold", "0"]
        )

        assert result.exit_code == 0
        assert result.output.strip() == "i lik cats"

    def test_config_file(self, corpus_dir, tmp_path):
        """Test settings read from a configuration file."""
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"rejection_threshold": 0.0}))

        result = runner.invoke(
            app, ["--config", str(config_path), "correct", "i lik cats", "-d", str(corpus_dir)]
        )

        assert result.exit_code == 0
        assert result.output.strip() == "i lik cats"

    def test_missing_corpus(self, tmp_path):
        """Test a missing corpus directory fails with a resource error."""
        result = runner.invoke(app, ["correct", "i lik cats", "-d", str(tmp_path / "missing")])

        assert result.exit_code == 1
        assert "[resource]" in result.output

    def test_invalid_threshold(self, corpus_dir):
        """Test a negative threshold fails with a configuration error."""
        result = runner.invoke(
            app, ["correct", "i lik cats", "-d", str(corpus_dir), "--threshold", "-1"]
        )

        assert result.exit_code == 1
        assert "[configuration]" in result.output

    def test_undecodable_vocabulary(self, corpus_dir):
        """Test an undecodable vocabulary file fails with a resource error."""
        (corpus_dir / VOCABULARY_FILE).write_bytes(b"i\n\xff\xfe cats\n")

        result = runner.invoke(app, ["correct", "i lik cats", "-d", str(corpus_dir)])

        assert result.exit_code == 1
        assert "[resource]" in result.output
