"""observed-deaths CLI entry points.
This module exposes the render, rankings, and fetch commands.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
from datetime import date
from typing import Any, Sequence

from core.types import RankedTable, RenderOptions, RenderRunResult
from store.mortality_sdk import MortalityClient


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="observed-deaths",
        description="Weekly mortality radial plots and rankings",
    )
    parser.add_argument("--cache-dir", help="Override MORTALITY_CACHE_DIR for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_render_command(subparsers)
    _add_rankings_command(subparsers)
    _add_fetch_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the observed-deaths CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    client = _build_client(args.cache_dir)
    if args.command == "render":
        return _run_render_command(client, args)
    if args.command == "rankings":
        return _run_rankings_command(client, args)
    if args.command == "fetch":
        return _run_fetch_command(client, args)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_client(cache_dir: str | None) -> MortalityClient:
    """Build SDK client with optional cache-dir override."""
    client = MortalityClient()
    if cache_dir:
        client = client.with_cache_dir(cache_dir)
    return client


def _build_render_options(args: argparse.Namespace, render_images: bool) -> RenderOptions:
    return RenderOptions(
        source_uri=args.source,
        output_dir=args.output_dir,
        census_path=args.census,
        settings_path=args.settings,
        as_of=args.as_of,
        refresh=args.refresh,
        render_images=render_images,
        trim_window=args.trim_window,
    )


def _run_render_command(client: MortalityClient, args: argparse.Namespace) -> int:
    """Handle render command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    if args.workers is not None:
        client = client.with_worker_count(args.workers)
    result = client.render(_build_render_options(args, render_images=True))
    print(f"image_count={len(result.image_paths)}")
    for region, reason in sorted(result.skipped_regions.items()):
        print(f"skipped={region}\t{reason}")
    for report_path in result.report_paths:
        print(f"report={report_path}")
    return 0


def _run_rankings_command(client: MortalityClient, args: argparse.Namespace) -> int:
    """Handle rankings command."""
    result = client.rankings(_build_render_options(args, render_images=False))
    _print_rankings(result)
    return 0


def _run_fetch_command(client: MortalityClient, args: argparse.Namespace) -> int:
    """Handle fetch command."""
    source_path = client.fetch(args.source, refresh=args.refresh)
    print(f"source_path={source_path}")
    return 0


def _print_rankings(result: RenderRunResult) -> None:
    snapshot = result.snapshot
    print(f"as_of={snapshot.as_of.isoformat()}")
    for rank, row in enumerate(snapshot.rows, start=1):
        print(f"{rank}\t{row.region}\t{row.count}\t{row.population}\t{row.rate:.2f}")
    if snapshot.excluded is not None:
        excluded = snapshot.excluded
        print(f"-\t{excluded.region}\t{excluded.count}\t{excluded.population}\t{excluded.rate:.2f}")
    _print_ranked_table("excess_deaths", result.excess_ranking, "{:.0f}")
    _print_ranked_table("excess_deaths_per_capita", result.excess_per_capita_ranking, "{:.2f}")
    for report_path in result.report_paths:
        print(f"report={report_path}")


def _print_ranked_table(title: str, table: RankedTable, value_format: str) -> None:
    print(f"table={title}")
    for rank, entry in enumerate(table.entries, start=1):
        print(f"{rank}\t{entry.region}\t{value_format.format(entry.value)}")
    if table.excluded is not None:
        print(f"-\t{table.excluded.region}\t{value_format.format(table.excluded.value)}")


def _parse_positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as error:
        raise argparse.ArgumentTypeError(f"Invalid value '{value}': expected an integer.") from error
    if parsed < 1:
        raise argparse.ArgumentTypeError(f"Invalid value {parsed}: expected a positive integer.")
    return parsed


def _parse_as_of(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as error:
        raise argparse.ArgumentTypeError(
            f"Invalid --as-of '{value}': expected YYYY-MM-DD."
        ) from error


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    """Register flags shared by render and rankings."""
    parser.add_argument("--source", help="Mortality export CSV path or http(s) URL")
    parser.add_argument("--census", help="Census CSV path, bundled 2020 table if omitted")
    parser.add_argument("--output-dir", help="Override MORTALITY_OUTPUT_DIR for this command")
    parser.add_argument("--settings", help="Optional YAML run-settings file")
    parser.add_argument(
        "--as-of",
        type=_parse_as_of,
        help="Reference day YYYY-MM-DD for incomplete data, today if omitted",
    )
    parser.add_argument("--trim-window", type=_parse_positive_int, help="Override the reporting-lag window")
    parser.add_argument("--refresh", action="store_true", help="Download even if cached copy is fresh")


def _add_render_command(subparsers: Any) -> None:
    """Register render subcommand."""
    parser = subparsers.add_parser("render", help="Render region images and write reports")
    _add_source_arguments(parser)
    parser.add_argument("--workers", type=_parse_positive_int, help="Override MORTALITY_WORKERS for this command")


def _add_rankings_command(subparsers: Any) -> None:
    """Register rankings subcommand."""
    parser = subparsers.add_parser(
        "rankings",
        help="Print per-capita and excess-death rankings without images",
    )
    _add_source_arguments(parser)


def _add_fetch_command(subparsers: Any) -> None:
    """Register fetch subcommand."""
    parser = subparsers.add_parser("fetch", help="Download or reuse the cached source export")
    parser.add_argument("--source", help="Export URL, configured default if omitted")
    parser.add_argument("--refresh", action="store_true", help="Download even if cached copy is fresh")
