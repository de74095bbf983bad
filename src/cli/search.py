# =============================================================================
# src/cli/search.py - CLI Search Command
# =============================================================================
#
# One-shot event search from the command line.  Builds the same provider,
# cache and orchestrator as the web app (src.main.build_search_components)
# and runs a single request through it:
#
#   python -m src.cli.search --lat 40.7128 --lon -74.0060 --radius 10 --category party
#   python -m src.cli.search --location "Austin, TX" --keyword jazz --json
#   python -m src.cli.search --lat 34.05 --lon -118.24 --from 2025-10-24 --to 2025-10-26
#
# Output modes:
#   - Text (default): numbered event list plus per-source stats
#   - JSON (--json): the camelCase {events, sourceStats, meta} payload
#
# --json implies --quiet: logs go to stderr at WARNING+ so stdout holds
# only the report.  Exit code 0 when the search ran, 1 when every source
# failed, 2 on invalid arguments.
# =============================================================================

"""Standalone CLI for running one event search.

Usage::

    python -m src.cli.search --lat 40.71 --lon -74.0 --radius 10 --category party
    python -m src.cli.search --location "Chicago, IL" --json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from datetime import date
from pathlib import Path

from pydantic import ValidationError

from src.models.event import PartySubcategory
from src.models.search import SearchRequest, SearchResponse


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def _format_text_output(response: SearchResponse) -> str:
    """Render *response* as a human-readable report."""
    meta = response.meta
    lines = [
        f"Query: {meta.query_used or '(none)'}",
        (
            f"Events: {len(response.events)} of {meta.total_events} "
            f"(page {meta.page}, limit {meta.limit}"
            f"{', more available' if meta.has_more else ''})"
        ),
    ]
    for name, stat in response.source_stats.items():
        status = f"error: {stat.error}" if stat.error else "ok"
        lines.append(f"Source {name}: {stat.count} events, {status}")
    if meta.cache_hit:
        lines.append("Served from cache")
    lines.append("")

    if not response.events:
        lines.append("No events found.")

    for index, event in enumerate(response.events, start=1):
        label = event.category
        if event.is_party_event and event.party_subcategory is not None:
            label = f"party/{event.party_subcategory.value}"
        lines.append(f"{index:>3}. {event.title} [{label}]")
        lines.append(f"     {event.date} {event.time}")
        where = event.venue_name or event.location_text
        if event.distance_miles is not None:
            where = f"{where} ({event.distance_miles:.1f} mi)"
        lines.append(f"     {where}")
        if event.price:
            lines.append(f"     {event.price}")
        if event.ticket_url:
            lines.append(f"     {event.ticket_url}")

    lines.append("")
    lines.append(f"Completed in {meta.execution_time_ms:.0f} ms")
    return "\n".join(lines)


def _format_json_output(response: SearchResponse) -> str:
    return json.dumps(response.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Request construction
# ---------------------------------------------------------------------------


def _request_from_args(args: argparse.Namespace) -> SearchRequest:
    """Build a :class:`SearchRequest` from parsed CLI arguments.

    Raises
    ------
    pydantic.ValidationError
        When an argument is structurally invalid (e.g. ``--page 0``).
    """
    return SearchRequest(
        keyword=args.keyword,
        location=args.location,
        latitude=args.lat,
        longitude=args.lon,
        radius=args.radius,
        date_from=args.date_from,
        date_to=args.date_to,
        categories=args.categories or [],
        party_subcategory=args.subcategory,
        page=args.page,
        limit=args.limit,
        exclude_ids=args.exclude_ids or [],
    )


def _all_sources_failed(response: SearchResponse) -> bool:
    stats = response.source_stats.values()
    return bool(stats) and not response.events and all(stat.error for stat in stats)


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


async def _run(args: argparse.Namespace, quiet: bool) -> int:
    """Run one search and print the report.  Returns the process exit code."""
    try:
        request = _request_from_args(args)
    except ValidationError as exc:
        print(f"Error: invalid search arguments: {exc}", file=sys.stderr)
        return 2

    # Deferred import: src.main reads settings and config on import.
    import httpx

    from src.main import build_search_components, config, settings
    from src.utils.logging import configure_logging

    configure_logging(
        log_level="WARNING" if quiet else settings.log_level,
        stream=sys.stderr,
    )

    async with httpx.AsyncClient(timeout=float(config["retriever"]["timeout_seconds"])) as client:
        components = build_search_components(settings, config, client)
        response: SearchResponse = await components["orchestrator"].search(request)

    text = _format_json_output(response) if args.json_output else _format_text_output(response)
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        print(f"Results written to: {args.output}", file=sys.stderr)
    else:
        print(text)

    return 1 if _all_sources_failed(response) else 0


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the search CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m src.cli.search",
        description="Search nearby events and print a report.",
    )
    parser.add_argument("--keyword", "-k", default=None, help="Free-text keyword.")
    parser.add_argument("--location", "-l", default=None, help='Place name, e.g. "Austin, TX".')
    parser.add_argument("--lat", type=float, default=None, help="Search origin latitude.")
    parser.add_argument("--lon", type=float, default=None, help="Search origin longitude.")
    parser.add_argument("--radius", "-r", type=float, default=None, help="Radius in miles (1-500).")
    parser.add_argument(
        "--from",
        dest="date_from",
        type=date.fromisoformat,
        default=None,
        help="First day (YYYY-MM-DD).",
    )
    parser.add_argument(
        "--to",
        dest="date_to",
        type=date.fromisoformat,
        default=None,
        help="Last day (YYYY-MM-DD).",
    )
    parser.add_argument(
        "--category", "-c",
        dest="categories",
        action="append",
        help="Category filter; repeatable.  'party' enables party filtering.",
    )
    parser.add_argument(
        "--subcategory",
        type=PartySubcategory,
        choices=list(PartySubcategory),
        default=None,
        metavar="{" + ",".join(s.value for s in PartySubcategory) + "}",
        help="Party subcategory; used with --category party.",
    )
    parser.add_argument("--page", type=int, default=1)
    parser.add_argument("--limit", type=int, default=20)
    parser.add_argument(
        "--exclude",
        dest="exclude_ids",
        action="append",
        help="Event id to leave out; repeatable.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output the raw JSON response.",
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Write results to a file instead of stdout.",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress log output below WARNING.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the search tool."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    # JSON mode implies quiet: log lines never mix into the JSON output.
    quiet = args.quiet or args.json_output
    sys.exit(asyncio.run(_run(args, quiet)))


if __name__ == "__main__":
    main()
