"""Tests for the CLI main module."""

import json
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from mini_html_parser.cli.main import (
    CLIConfig,
    HTMLProcessor,
    ProgressTracker,
    create_argument_parser,
    format_results,
    main,
)
from mini_html_parser.shared import ParserConfig


@pytest.fixture
def html_tree(tmp_path):
    """A small directory of HTML files, one of them malformed."""
    (tmp_path / "good.html").write_text("<html><body><p>ok</p></body></html>")
    (tmp_path / "bad.htm").write_text("<p>hi</div>")
    (tmp_path / "notes.txt").write_text("not html")
    nested = tmp_path / "nested"
    nested.mkdir()
    (nested / "deep.html").write_text("<div></div>")
    return tmp_path


class TestCLIConfig:
    """Test CLI configuration management."""

    def test_default_config(self):
        """Test default configuration values."""
        config = CLIConfig()
        assert config.parser_config == ParserConfig.balanced()
        assert config.max_workers is None
        assert config.output_format == "json"

    def test_config_from_file(self):
        """Test loading configuration from file."""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
            json.dump({
                "parser_preset": "lenient",
                "parser": {"max_depth": 50},
                "max_workers": 4,
                "output_format": "csv",
            }, f)
            config_path = Path(f.name)

        try:
            config = CLIConfig.from_file(config_path)
            assert config.parser_config.allow_text_root is True
            assert config.parser_config.max_depth == 50
            assert config.max_workers == 4
            assert config.output_format == "csv"
        finally:
            config_path.unlink()

    def test_config_from_nonexistent_file(self):
        """Test handling non-existent config file."""
        config = CLIConfig.from_file(Path("nonexistent.json"))
        assert config.output_format == "json"

    def test_config_with_invalid_values(self, tmp_path, capsys):
        """Test invalid configuration is reported and ignored."""
        config_path = tmp_path / "config.json"
        config_path.write_text('{"parser": {"max_depth": 0}}')

        config = CLIConfig.from_file(config_path)

        assert config.parser_config == ParserConfig.balanced()
        assert "Could not load config file" in capsys.readouterr().err


class TestProgressTracker:
    """Test progress tracking functionality."""

    def test_progress_update(self):
        """Test progress update functionality."""
        tracker = ProgressTracker(10, "Test")
        tracker.update(5)
        assert tracker.completed == 5
        tracker.update()
        assert tracker.completed == 6

    @patch("builtins.print")
    def test_progress_display(self, mock_print):
        """Test progress display output."""
        tracker = ProgressTracker(2, "Test")
        tracker.update(2)
        mock_print.assert_called()


class TestHTMLProcessor:
    """Test batch processing."""

    def test_process_single_file(self, html_tree):
        """Test the summary of one successful file."""
        processor = HTMLProcessor(CLIConfig())
        result = processor.process_single_file(html_tree / "good.html")

        assert result["success"] is True
        assert result["root_tag"] == "html"
        assert result["element_count"] == 3
        assert result["failure_kind"] is None

    def test_process_single_failed_file(self, html_tree):
        """Test the summary of a malformed file."""
        processor = HTMLProcessor(CLIConfig())
        result = processor.process_single_file(html_tree / "bad.htm")

        assert result["success"] is False
        assert result["failure_kind"] == "mismatched-closing-tag"
        assert result["diagnostics"][0]["severity"] == "ERROR"

    def test_find_html_files(self, html_tree):
        """Test HTML discovery with and without recursion."""
        processor = HTMLProcessor(CLIConfig())

        flat = {p.name for p in processor.find_html_files(html_tree, recursive=False)}
        deep = {p.name for p in processor.find_html_files(html_tree, recursive=True)}

        assert flat == {"good.html", "bad.htm"}
        assert deep == {"good.html", "bad.htm", "deep.html"}
        assert list(processor.find_html_files(html_tree / "notes.txt")) == []

    def test_batch_process_single_worker(self, html_tree):
        """Test sequential batch processing."""
        config = CLIConfig()
        config.max_workers = 1
        results = HTMLProcessor(config).batch_process([html_tree], recursive=True)

        assert len(results) == 3
        assert sum(1 for r in results if r["success"]) == 2

    def test_batch_process_nothing(self, tmp_path):
        """Test a directory without HTML files."""
        assert HTMLProcessor(CLIConfig()).batch_process([tmp_path]) == []


class TestFormatResults:
    """Test output formatting."""

    RESULTS = [
        {"file": "a.html", "success": True, "failure_kind": None, "root_tag": "p",
         "element_count": 1, "node_count": 2, "processing_time_ms": 1.5,
         "diagnostics": []},
        {"file": "b.html", "success": False, "failure_kind": "trailing-input",
         "root_tag": None, "element_count": 0, "node_count": 0,
         "processing_time_ms": 0.5,
         "diagnostics": [{"severity": "ERROR", "message": "Unexpected content",
                          "component": "document_parser"}]},
    ]

    def test_json(self):
        """Test JSON output round-trips."""
        assert json.loads(format_results(self.RESULTS, "json")) == self.RESULTS

    def test_csv(self):
        """Test CSV output."""
        lines = format_results(self.RESULTS, "csv").splitlines()
        assert lines[0] == "file,success,failure_kind,elements,nodes,time_ms,errors"
        assert lines[1] == "a.html,True,,1,2,1.5,0"
        assert lines[2] == "b.html,False,trailing-input,0,0,0.5,1"

    def test_text(self):
        """Test human-readable output."""
        text = format_results(self.RESULTS, "text")
        assert "Processed 2 files, 1 successful" in text
        assert "Error: Unexpected content" in text

    def test_empty(self):
        """Test empty results."""
        assert format_results([], "csv") == ""
        assert format_results([], "text") == "No results to display."


class TestArgumentParser:
    """Test argument parsing."""

    def test_parse_command(self):
        """Test parse command options."""
        args = create_argument_parser().parse_args(
            ["parse", "a.html", "-r", "--format", "csv", "--preset", "strict", "-w", "2"]
        )
        assert args.command == "parse"
        assert args.paths == [Path("a.html")]
        assert args.recursive is True
        assert args.format == "csv"
        assert args.preset == "strict"
        assert args.workers == 2

    def test_find_command(self):
        """Test find command options."""
        args = create_argument_parser().parse_args(
            ["find", "a.html", "--tag", "p", "--attr", "class=x"]
        )
        assert args.tag == "p"
        assert args.attr == "class=x"

    def test_invalid_preset(self):
        """Test unknown presets are rejected by argparse."""
        with pytest.raises(SystemExit):
            create_argument_parser().parse_args(["parse", "a.html", "--preset", "wild"])


class TestMain:
    """Test the CLI entry point."""

    def test_no_command(self, capsys):
        """Test help is printed without a command."""
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out

    def test_parse_success(self, html_tree, capsys):
        """Test parse exits 0 when every file parses."""
        exit_code = main(["parse", str(html_tree / "good.html")])

        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        assert output[0]["root_tag"] == "html"

    def test_parse_failure_exit_code(self, html_tree, capsys):
        """Test parse exits 1 when a file fails."""
        assert main(["parse", str(html_tree / "bad.htm"), "--format", "text"]) == 1
        assert "FAIL" in capsys.readouterr().out

    def test_parse_no_files(self, tmp_path, capsys):
        """Test parse exits 1 when nothing was found."""
        assert main(["parse", str(tmp_path)]) == 1
        assert "No HTML files found" in capsys.readouterr().err

    def test_parse_output_file(self, html_tree, tmp_path):
        """Test writing results to a file."""
        output = tmp_path / "out.csv"
        main(["parse", str(html_tree / "good.html"), "-f", "csv", "-o", str(output)])
        assert output.read_text().startswith("file,success")

    def test_parse_with_profile(self, html_tree, capsys):
        """Test the profiling report goes to stderr."""
        main(["parse", str(html_tree / "good.html"), "--profile"])
        assert "Profiled 1 parse(s)" in capsys.readouterr().err

    def test_dump(self, tmp_path, capsys):
        """Test dump prints the tree."""
        path = tmp_path / "page.html"
        path.write_text('<div id="m">\n  <p>Hello   world</p>\n</div>\n')

        assert main(["dump", str(path)]) == 0
        assert capsys.readouterr().out == (
            "#Element div\n"
            '  id="m"\n'
            "\t#Element p\n"
            '\t\t#Text "Hello world"\n'
        )

    def test_dump_error(self, html_tree, capsys):
        """Test dump reports the error and exits non-zero."""
        assert main(["dump", str(html_tree / "bad.htm")]) == 1
        assert "Mismatched closing tag" in capsys.readouterr().err

    def test_dump_missing_file(self, tmp_path, capsys):
        """Test dump on a missing file."""
        assert main(["dump", str(tmp_path / "missing.html")]) == 1
        assert "File not found" in capsys.readouterr().err

    def test_find(self, tmp_path, capsys):
        """Test find prints the first matching subtree."""
        path = tmp_path / "page.html"
        path.write_text('<ul><li>a</li><li class="x">b</li></ul>')

        assert main(["find", str(path), "--tag", "li", "--attr", "class=x"]) == 0
        assert capsys.readouterr().out == '#Element li\n  class="x"\n\t#Text "b"\n'

    def test_find_no_match(self, html_tree, capsys):
        """Test find exits 1 without a match."""
        assert main(["find", str(html_tree / "good.html"), "--tag", "table"]) == 1
        assert "No matching element" in capsys.readouterr().err

    def test_find_requires_criteria(self, html_tree, capsys):
        """Test find needs a tag or attribute."""
        assert main(["find", str(html_tree / "good.html")]) == 1

    def test_keyboard_interrupt(self, html_tree, capsys):
        """Test interruption exits with 130."""
        with patch("mini_html_parser.cli.main.cmd_parse", side_effect=KeyboardInterrupt):
            exit_code = main(["parse", str(html_tree)])
        assert exit_code == 130
