"""CLI interface for Premiere Hunter."""

from __future__ import annotations

import contextlib
import functools
import json
import logging
import signal
import sys
import threading
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any, NoReturn

import click

from premiere_hunter.core.aggregate import ScanAggregate
from premiere_hunter.core.assets import AssetLister
from premiere_hunter.core.engine import FileOperation, ScanCoordinator
from premiere_hunter.core.enumerator import Enumerator
from premiere_hunter.core.filters import FileFilter
from premiere_hunter.core.matcher import StreamMatcher, make_search_operation
from premiere_hunter.models.config import DEFAULT_SNIPPET_CHARS, SearchConfig
from premiere_hunter.models.events import MatchEvent, ProgressEvent, SummaryEvent
from premiere_hunter.settings import ConfigError, Overrides, Settings, resolve_config
from premiere_hunter.utils import bytes_to_human, format_elapsed

log = logging.getLogger(__name__)

EXIT_CONFIG_ERROR = 1
EXIT_INTERRUPTED = 130


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _fail(message: str) -> NoReturn:
    click.echo(f"Error: {message}", err=True)
    sys.exit(EXIT_CONFIG_ERROR)


def _split_paths(values: tuple[str, ...]) -> list[Path]:
    """Accept both ``-p a -p b`` and ``-p a,b``."""
    return [Path(part.strip()) for value in values for part in value.split(",") if part.strip()]


def _split_list(values: tuple[str, ...]) -> list[str]:
    return [part.strip() for value in values for part in value.split(",") if part.strip()]


@contextlib.contextmanager
def _interrupt_guard() -> Iterator[threading.Event]:
    """Turn Ctrl+C into an abort event for the duration of a scan."""
    abort = threading.Event()

    def _handler(signum: int, frame: Any) -> None:
        if not abort.is_set():
            click.echo("\nReceived Ctrl+C, stopping early (letting active files finish)...", err=True)
        abort.set()

    installed = False
    try:
        previous = signal.signal(signal.SIGINT, _handler)
        installed = True
    except ValueError:
        # Not on the main thread; scan without interrupt support.
        log.warning("Could not install Ctrl+C handler")
    try:
        yield abort
    finally:
        if installed:
            signal.signal(signal.SIGINT, previous)


def scan_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by ``search`` and ``assets``."""
    options = [
        click.option("--paths", "-p", multiple=True, help="Directories to search (comma-separated or repeated)"),
        click.option("--auto-drives", is_flag=True, help="Also search common drives (C:\\ and D:\\ on Windows)"),
        click.option("--threads", "-t", type=click.IntRange(min=1), default=None, help="Worker threads (default: CPU count)"),
        click.option("--config", "-c", "config_path", type=click.Path(path_type=Path), default=None, help="Path to YAML (or JSON) config file"),
        click.option("--ext", "extensions", multiple=True, help="File extensions to search (default: prproj)"),
        click.option("--exclude", "exclude_dirs", multiple=True, help="Directory names to skip"),
        click.option("--follow-links/--no-follow-links", default=None, help="Follow symbolic links"),
        click.option("--max-size-mb", type=click.IntRange(min=0), default=None, help="Skip files larger than this (0 = no limit)"),
        click.option("--show-errors", is_flag=True, help="List files that could not be read"),
        click.option("--json", "as_json", is_flag=True, help="Output as JSON"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _build_overrides(search_text: str | None, opts: dict[str, Any], **extra: Any) -> Overrides:
    return Overrides(
        search_text=search_text,
        paths=_split_paths(opts["paths"]),
        auto_drives=opts["auto_drives"],
        threads=opts["threads"],
        extensions=_split_list(opts["extensions"]) or None,
        exclude_dirs=_split_list(opts["exclude_dirs"]),
        follow_links=opts["follow_links"],
        max_file_size_mb=opts["max_size_mb"],
        **extra,
    )


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
def main(verbose: int) -> None:
    """Premiere Hunter: fast parallel search inside Premiere Pro project files."""
    _setup_logging(verbose)


# ── search ───────────────────────────────────────────────────────────────

@main.command()
@click.argument("search_text", required=False)
@click.option("--show-snippets", is_flag=True, help="Print text around each match")
@click.option("--snippet-chars", type=click.IntRange(min=0), default=DEFAULT_SNIPPET_CHARS, show_default=True,
              help="Max characters per snippet")
@scan_options
def search(search_text: str | None, show_snippets: bool, snippet_chars: int, **opts: Any) -> None:
    """Search project files for SEARCH_TEXT (case-insensitive)."""
    try:
        settings = Settings(opts["config_path"])
        if not search_text and not settings.get("search_text"):
            search_text = click.prompt(
                "No search text provided via CLI or config. Please enter the text to search for",
                default="",
                show_default=False,
            ).strip()
        overrides = _build_overrides(search_text or None, opts, show_snippets=show_snippets, snippet_chars=snippet_chars)
        config = resolve_config(settings, overrides)
    except ConfigError as e:
        _fail(str(e))

    snippet_chars = (config.snippet_chars or DEFAULT_SNIPPET_CHARS) if config.show_snippets else 0
    operation = make_search_operation(StreamMatcher(), config.search_text, snippet_chars)
    _run_scan(config, operation, mode="search", show_errors=opts["show_errors"], as_json=opts["as_json"])


# ── assets ───────────────────────────────────────────────────────────────

@main.command()
@click.argument("filter_text", required=False)
@scan_options
def assets(filter_text: str | None, **opts: Any) -> None:
    """List media assets used by each project, optionally filtered by FILTER_TEXT."""
    try:
        settings = Settings(opts["config_path"])
        overrides = _build_overrides(filter_text, opts)
        config = resolve_config(settings, overrides, require_search_text=False)
    except ConfigError as e:
        _fail(str(e))

    operation = AssetLister(config.search_text or None)
    _run_scan(config, operation, mode="assets", show_errors=opts["show_errors"], as_json=opts["as_json"])


# ── scan plumbing ────────────────────────────────────────────────────────

class ConsoleReport:
    """Renders coordinator events on the terminal.

    The coordinator serializes callbacks, so no locking is needed here.
    """

    def __init__(self, mode: str, quiet: bool = False) -> None:
        self.mode = mode
        self.quiet = quiet
        self.bar: Any = None
        self.matches: list[MatchEvent] = []
        self.summary: SummaryEvent | None = None

    @property
    def total_assets(self) -> int:
        return sum(len(m.outcome.assets) for m in self.matches)

    def on_match(self, event: MatchEvent) -> None:
        self.matches.append(event)
        if self.quiet:
            return
        if self.mode == "assets":
            click.echo(f"\nProject: {event.path}")
            for asset in event.outcome.assets:
                click.echo(f"  - {asset}")
            return
        click.echo(f"\n{click.style('✓', fg='green')} MATCH: {click.style(str(event.path), bold=True)}")
        if event.outcome.snippet:
            click.echo(f"    {event.outcome.snippet}")

    def on_progress(self, event: ProgressEvent) -> None:
        if self.bar is not None:
            self.bar.update(event.processed - self.bar.pos)

    def on_summary(self, event: SummaryEvent) -> None:
        self.summary = event


def _print_header(config: SearchConfig, mode: str) -> None:
    if mode == "assets":
        click.echo("Listing assets used in Premiere project files")
        if config.search_text:
            click.echo(f"Asset filter (case-insensitive): '{config.search_text}'")
    else:
        click.echo(f"Searching for: '{config.search_text}'")
    click.echo(f"Search paths ({config.roots_origin}): {[str(r) for r in config.roots]}")
    click.echo(f"Extensions: {sorted(config.extensions)}")
    if config.exclude_dirs:
        click.echo(f"Excluding directories: {sorted(config.exclude_dirs)}")
    if config.max_file_size:
        click.echo(f"Max file size: {bytes_to_human(config.max_file_size)}")
    click.echo("Scanning for files...\n")


def _run_scan(
    config: SearchConfig,
    operation: FileOperation,
    *,
    mode: str,
    show_errors: bool,
    as_json: bool,
) -> None:
    if not as_json:
        _print_header(config, mode)

    enumerator = Enumerator(FileFilter.from_config(config))
    report = ConsoleReport(mode, quiet=as_json)

    with _interrupt_guard() as abort:
        candidates = enumerator.enumerate(config.roots, abort=abort)
        total = len(candidates)

        if abort.is_set():
            if as_json:
                click.echo(json.dumps({"status": "interrupted", "files_discovered": total}, indent=2))
            else:
                click.echo(f"\nSearch interrupted by user before processing. Files discovered: {total}")
            sys.exit(EXIT_INTERRUPTED)

        if not as_json:
            click.echo(f"Found {total:,} files to search\n")
            if total == 0:
                click.echo("No files found.")
                return

        coordinator = ScanCoordinator(config.threads)
        run = functools.partial(
            coordinator.run,
            candidates,
            operation,
            on_match=report.on_match,
            on_summary=report.on_summary,
            abort=abort,
        )
        if as_json:
            aggregate = run()
        else:
            with click.progressbar(length=total, label="Searching", show_pos=True, show_percent=True) as bar:
                report.bar = bar
                aggregate = run(on_progress=report.on_progress)
            report.bar = None

    if as_json:
        _print_json(report, aggregate, mode)
    else:
        _print_summary(report, aggregate, mode, show_errors)

    if aggregate.interrupted:
        sys.exit(EXIT_INTERRUPTED)


def _print_summary(report: ConsoleReport, aggregate: ScanAggregate, mode: str, show_errors: bool) -> None:
    summary = report.summary
    rule = "=" * 60
    click.echo(f"\n{rule}")
    if aggregate.interrupted:
        click.echo(click.style("Search interrupted by user (partial results):", fg="yellow"))
    else:
        click.echo(click.style("Search complete!", fg="green", bold=True))
    click.echo(f"Files processed: {aggregate.processed:,}")
    if mode == "assets":
        click.echo(f"Projects with listed assets: {aggregate.matched:,}")
        click.echo(f"Total assets listed: {report.total_assets:,}")
    else:
        click.echo(f"Matches found: {aggregate.matched:,}")
    if aggregate.errored:
        click.echo(click.style(f"Files skipped (errors): {aggregate.errored:,}", fg="yellow"))
    if summary is not None:
        click.echo(f"Elapsed: {format_elapsed(summary.elapsed)}")
    click.echo(rule)

    if show_errors and aggregate.errored:
        click.echo("\nUnreadable files:")
        for path, reason in aggregate.errors:
            click.echo(f"  {click.style('✗', fg='red')} {path}: {reason}")


def _print_json(report: ConsoleReport, aggregate: ScanAggregate, mode: str) -> None:
    data: dict[str, Any] = {
        "status": "interrupted" if aggregate.interrupted else "complete",
        "mode": mode,
        "files_total": aggregate.total,
        "files_processed": aggregate.processed,
        "matches_found": aggregate.matched,
        "files_errored": aggregate.errored,
        "elapsed_seconds": round(report.summary.elapsed, 3) if report.summary else 0.0,
        "errors": [{"path": str(p), "reason": r} for p, r in aggregate.errors],
    }
    if mode == "assets":
        data["projects"] = [
            {"path": str(m.path), "assets": list(m.outcome.assets)} for m in report.matches
        ]
        data["total_assets"] = report.total_assets
    else:
        data["matches"] = [
            {"path": str(m.path), "snippet": m.outcome.snippet} if m.outcome.snippet else {"path": str(m.path)}
            for m in report.matches
        ]
    click.echo(json.dumps(data, indent=2))
