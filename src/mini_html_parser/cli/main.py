"""Main CLI entry point for the mini-html command-line tool.

Provides batch parsing summaries, a debug dump of a single document and a
node search over a single document.
"""

import argparse
import json
import logging
import sys
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from mini_html_parser.api import MiniHTMLParser, parse_file
from mini_html_parser.shared import (
    ConfigError,
    ParserConfig,
    configure_logging,
    get_logger,
)
from mini_html_parser.tree import ElementNode, Node, by_attribute, by_tag, dump_tree
from mini_html_parser.tools.profiling import PerformanceProfiler
from mini_html_parser.tree.traversal import NodePredicate

HTML_SUFFIXES = {".html", ".htm"}
PRESETS = ["strict", "balanced", "lenient"]
MAX_ERRORS_SHOWN = 3


class CLIConfig:
    """Configuration management for CLI operations."""

    def __init__(self):
        self.parser_config = ParserConfig.balanced()
        self.max_workers = None  # Use system default
        self.output_format = "json"

    @classmethod
    def from_file(cls, config_path: Path) -> "CLIConfig":
        """Load CLI configuration from a JSON file.

        Recognised keys are ``parser_preset``, ``parser`` (a mapping of
        ``ParserConfig`` fields applied on top of the preset), ``max_workers``
        and ``output_format``. An unreadable file is reported and ignored.
        """
        config = cls()
        if not config_path.exists():
            return config
        try:
            with config_path.open() as f:
                data = json.load(f)
            if "parser_preset" in data:
                config.parser_config = ParserConfig.from_preset(data["parser_preset"])
            if "parser" in data:
                config.parser_config = config.parser_config.override(**data["parser"])
            config.max_workers = data.get("max_workers", config.max_workers)
            config.output_format = data.get("output_format", config.output_format)
        except (OSError, ValueError, TypeError, ConfigError) as e:
            print(f"Warning: Could not load config file: {e}", file=sys.stderr)
        return config


class ProgressTracker:
    """Progress tracking for long-running operations."""

    def __init__(self, total: int, description: str = "Processing"):
        self.total = total
        self.completed = 0
        self.description = description
        self.start_time = time.time()
        self.last_update = 0.0

    def update(self, increment: int = 1):
        """Update progress and display if needed."""
        self.completed += increment
        current_time = time.time()

        # Update every second or on completion
        if current_time - self.last_update >= 1.0 or self.completed >= self.total:
            self._display_progress()
            self.last_update = current_time

    def _display_progress(self):
        if self.total == 0:
            return

        percentage = (self.completed / self.total) * 100
        elapsed = time.time() - self.start_time

        eta_str = ""
        if self.completed > 0 and elapsed > 0:
            rate = self.completed / elapsed
            eta = (self.total - self.completed) / rate
            if eta > 0:
                eta_str = f", ETA: {eta:.0f}s"

        progress_bar = "=" * int(percentage // 2)
        progress_bar += " " * (50 - len(progress_bar))

        print(f"\r{self.description}: [{progress_bar}] "
              f"{percentage:.1f}% ({self.completed}/{self.total}){eta_str}",
              end="", file=sys.stderr)

        if self.completed >= self.total:
            print(file=sys.stderr)


class HTMLProcessor:
    """Core batch processing logic for CLI operations."""

    def __init__(self, config: CLIConfig):
        self.config = config
        self.parser = MiniHTMLParser(config=config.parser_config)
        self.logger = get_logger(__name__, None, "cli_processor")

    def process_single_file(self, file_path: Path) -> Dict[str, Any]:
        """Parse one file and summarise the outcome."""
        result = self.parser.parse(file_path)
        summary = {
            "file": str(file_path),
            "success": result.success,
            "failure_kind": result.failure_kind.value if result.failure_kind else None,
            "root_tag": result.root.tag if isinstance(result.root, ElementNode) else None,
            "element_count": result.element_count,
            "node_count": result.node_count,
            "processing_time_ms": result.performance.processing_time_ms,
            "diagnostics": [
                {
                    "severity": diag.severity.name,
                    "message": diag.message,
                    "component": diag.component,
                } for diag in result.diagnostics
            ],
        }
        result.release()
        return summary

    def find_html_files(self, path: Path, recursive: bool = True) -> Iterator[Path]:
        """Yield HTML files under ``path``, or ``path`` itself if it is one."""
        if path.is_file():
            if path.suffix.lower() in HTML_SUFFIXES:
                yield path
        elif path.is_dir():
            candidates = path.rglob("*") if recursive else path.glob("*")
            for candidate in sorted(candidates):
                if candidate.is_file() and candidate.suffix.lower() in HTML_SUFFIXES:
                    yield candidate
        else:
            self.logger.warning("Path does not exist", extra={"path": str(path)})

    def batch_process(self, paths: List[Path], recursive: bool = True) -> List[Dict[str, Any]]:
        """Process multiple HTML files, in a process pool when there are several."""
        all_files: List[Path] = []
        for path in paths:
            all_files.extend(self.find_html_files(path, recursive))

        if not all_files:
            return []

        results = []
        progress = ProgressTracker(len(all_files), "Processing HTML files")

        if len(all_files) == 1 or self.config.max_workers == 1:
            for file_path in all_files:
                results.append(self.process_single_file(file_path))
                progress.update()
        else:
            with ProcessPoolExecutor(max_workers=self.config.max_workers) as executor:
                future_to_file = {
                    executor.submit(self.process_single_file, file_path): file_path
                    for file_path in all_files
                }
                for future in as_completed(future_to_file):
                    results.append(future.result())
                    progress.update()

            # Completion order is arbitrary
            results.sort(key=lambda r: r["file"])

        return results


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="mini-html",
        description="Minimal non-validating HTML parser"
    )

    parser.add_argument("--version", action="version", version="0.1.0")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Parse command
    parse_parser = subparsers.add_parser("parse", help="Parse HTML files and summarise")
    parse_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="HTML files or directories to parse"
    )
    parse_parser.add_argument(
        "--recursive", "-r",
        action="store_true",
        help="Recursively process directories"
    )
    parse_parser.add_argument(
        "--format", "-f",
        choices=["json", "csv", "text"],
        default="json",
        help="Output format (default: json)"
    )
    parse_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )
    parse_parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Configuration file path"
    )
    parse_parser.add_argument(
        "--preset",
        choices=PRESETS,
        help="Parser configuration preset"
    )
    parse_parser.add_argument(
        "--workers", "-w",
        type=int,
        help="Number of parallel workers"
    )
    parse_parser.add_argument(
        "--profile",
        action="store_true",
        help="Print a profiling report after processing"
    )

    # Dump command
    dump_parser = subparsers.add_parser("dump", help="Print the parse tree of a file")
    dump_parser.add_argument("file", type=Path, help="HTML file to dump")
    dump_parser.add_argument(
        "--preset",
        choices=PRESETS,
        default="balanced",
        help="Parser configuration preset"
    )

    # Find command
    find_parser = subparsers.add_parser("find", help="Print the first matching element")
    find_parser.add_argument("file", type=Path, help="HTML file to search")
    find_parser.add_argument("--tag", "-t", help="Tag name to match")
    find_parser.add_argument(
        "--attr", "-a",
        metavar="NAME[=VALUE]",
        help="Attribute that must be present, optionally with a value"
    )
    find_parser.add_argument(
        "--preset",
        choices=PRESETS,
        default="balanced",
        help="Parser configuration preset"
    )

    # Global options
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    return parser


def format_results(results: List[Dict[str, Any]], format_type: str) -> str:
    """Format processing results for output."""
    if format_type == "csv":
        if not results:
            return ""

        lines = ["file,success,failure_kind,elements,nodes,time_ms,errors"]
        for result in results:
            error_count = len([d for d in result.get("diagnostics", [])
                               if d.get("severity") in ["ERROR", "CRITICAL"]])
            lines.append(
                f"{result['file']},{result['success']},{result.get('failure_kind') or ''},"
                f"{result.get('element_count', 0)},{result.get('node_count', 0)},"
                f"{result.get('processing_time_ms', 0):.1f},{error_count}"
            )
        return "\n".join(lines)

    if format_type == "text":
        if not results:
            return "No results to display."

        successful = sum(1 for r in results if r.get("success", False))
        lines = [f"Processed {len(results)} files, {successful} successful", "-" * 60]

        for result in results:
            status = "OK  " if result.get("success", False) else "FAIL"
            lines.append(f"{status} {result['file']}")
            if result.get("success", False):
                lines.append(
                    f"   Root: <{result.get('root_tag') or '#text'}>, "
                    f"Elements: {result.get('element_count', 0)}, "
                    f"Time: {result.get('processing_time_ms', 0):.1f}ms"
                )

            errors = [d for d in result.get("diagnostics", [])
                      if d.get("severity") in ["ERROR", "CRITICAL"]]
            for error in errors[:MAX_ERRORS_SHOWN]:
                lines.append(f"   Error: {error.get('message', '')}")
            if len(errors) > MAX_ERRORS_SHOWN:
                lines.append(f"   ... and {len(errors) - MAX_ERRORS_SHOWN} more errors")

            lines.append("")

        return "\n".join(lines)

    return json.dumps(results, indent=2)


def _error_message(result) -> str:
    if result.error is not None:
        return str(result.error)
    errors = [d.message for d in result.diagnostics
              if d.severity.name in ("ERROR", "CRITICAL")]
    return errors[0] if errors else "Parse failed"


def _attribute_predicate(spec: str) -> NodePredicate:
    name, sep, value = spec.partition("=")
    return by_attribute(name, value if sep else None)


def cmd_parse(args: argparse.Namespace) -> int:
    """Handle parse command."""
    config = CLIConfig()
    if args.config:
        config = CLIConfig.from_file(args.config)

    if args.preset:
        config.parser_config = ParserConfig.from_preset(args.preset)
    if not (args.verbose or args.quiet):
        logging.getLogger("mini_html_parser").setLevel(config.parser_config.logging_level)
    if args.workers:
        config.max_workers = args.workers
    config.output_format = args.format

    processor = HTMLProcessor(config)
    results = processor.batch_process(args.paths, args.recursive)

    formatted_output = format_results(results, args.format)

    if args.output:
        try:
            args.output.write_text(formatted_output)
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            return 1
        print(f"Results written to {args.output}", file=sys.stderr)
    else:
        print(formatted_output)

    if args.profile:
        profiler = PerformanceProfiler(config=config.parser_config)
        for entry in results:
            path = Path(entry["file"])
            try:
                profiler.profile_parse(path.read_bytes(), session_id=str(path))
            except OSError as e:
                print(f"Could not profile {path}: {e}", file=sys.stderr)
        print(profiler.generate_report().format_text(), file=sys.stderr)

    if not results:
        print("No HTML files found", file=sys.stderr)
        return 1

    successful = sum(1 for r in results if r.get("success", False))
    return 0 if successful == len(results) else 1


def cmd_dump(args: argparse.Namespace) -> int:
    """Handle dump command: print the tree, or the error on failure."""
    result = parse_file(args.file, config=ParserConfig.from_preset(args.preset))
    if not result.success:
        print(f"Error: {_error_message(result)}", file=sys.stderr)
        return 1

    sys.stdout.write(result.dump())
    result.release()
    return 0


def cmd_find(args: argparse.Namespace) -> int:
    """Handle find command: print the first node matching every criterion."""
    if not args.tag and not args.attr:
        print("find requires --tag and/or --attr", file=sys.stderr)
        return 1

    predicates: List[NodePredicate] = []
    if args.tag:
        predicates.append(by_tag(args.tag))
    if args.attr:
        predicates.append(_attribute_predicate(args.attr))

    def matches(node: Node) -> bool:
        return all(predicate(node) for predicate in predicates)

    result = parse_file(args.file, config=ParserConfig.from_preset(args.preset))
    if not result.success:
        print(f"Error: {_error_message(result)}", file=sys.stderr)
        return 1

    found = result.find_first(matches)
    if found is None:
        print("No matching element", file=sys.stderr)
        result.release()
        return 1

    sys.stdout.write(dump_tree(found))
    result.release()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.verbose:
        configure_logging(logging.DEBUG)
    elif args.quiet:
        configure_logging(logging.ERROR)

    handlers = {
        "parse": cmd_parse,
        "dump": cmd_dump,
        "find": cmd_find,
    }

    try:
        return handlers[args.command](args)
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
