"""Unit tests for the search CLI (src.cli.search)."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pydantic import ValidationError

from src.cli.search import (
    _all_sources_failed,
    _build_parser,
    _format_json_output,
    _format_text_output,
    _request_from_args,
    _run,
    main,
)
from src.models.event import PartySubcategory
from src.models.search import SearchMeta, SearchResponse, SourceStat
from tests.factories import make_event


# ======================================================================
# Shared helpers
# ======================================================================


def _response(events: list | None = None, error: str | None = None, **meta) -> SearchResponse:
    events = events if events is not None else []
    meta_fields = {
        "timestamp": "2025-10-20T12:00:00Z",
        "total_events": len(events),
        "page": 1,
        "limit": 20,
        "query_used": "events near 40.712800,-74.006000",
        "execution_time_ms": 12.3,
    }
    meta_fields.update(meta)
    return SearchResponse(
        events=events,
        source_stats={"rapidapi": SourceStat(count=len(events), error=error)},
        meta=SearchMeta(**meta_fields),
    )


def _party_event():
    return make_event(
        "rapidapi_evt1",
        title="Friday Night Club Bash",
        category="party",
        is_party_event=True,
        party_subcategory=PartySubcategory.NIGHTCLUB,
        venue_name="Output",
        date="Friday, October 24, 2025",
        time="8:00 PM",
        distance_miles=0.94,
        price="$25",
        ticket_url="https://tickets.example.com/evt1",
    )


# ======================================================================
# Argument parsing
# ======================================================================


class TestParser:
    def test_full_argument_set(self) -> None:
        args = _build_parser().parse_args(
            [
                "--lat", "40.7128", "--lon", "-74.006", "-r", "10",
                "-c", "party", "-c", "music", "--subcategory", "rooftop",
                "--from", "2025-10-24", "--to", "2025-10-26",
                "--page", "2", "--limit", "5", "--exclude", "rapidapi_1", "--json",
            ]
        )
        request = _request_from_args(args)

        assert request.latitude == 40.7128
        assert request.radius == 10
        assert request.categories == ["party", "music"]
        assert request.party_subcategory is PartySubcategory.ROOFTOP
        assert request.date_from == date(2025, 10, 24)
        assert request.date_to == date(2025, 10, 26)
        assert (request.page, request.limit) == (2, 5)
        assert request.exclude_ids == ["rapidapi_1"]
        assert args.json_output is True

    def test_defaults(self) -> None:
        request = _request_from_args(_build_parser().parse_args(["--location", "Austin, TX"]))
        assert request.location == "Austin, TX"
        assert request.limit == 20
        assert request.categories == []
        assert request.exclude_ids == []

    def test_bad_date_is_an_argparse_error(self) -> None:
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["--from", "next friday"])

    def test_bad_subcategory_is_an_argparse_error(self) -> None:
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["--subcategory", "karaoke"])

    def test_structurally_invalid_values_raise(self) -> None:
        with pytest.raises(ValidationError):
            _request_from_args(_build_parser().parse_args(["--page", "0"]))


# ======================================================================
# Formatting
# ======================================================================


class TestFormatting:
    def test_text_report(self) -> None:
        text = _format_text_output(_response([_party_event()]))

        assert "Query: events near 40.712800,-74.006000" in text
        assert "Events: 1 of 1 (page 1, limit 20)" in text
        assert "Source rapidapi: 1 events, ok" in text
        assert "  1. Friday Night Club Bash [party/nightclub]" in text
        assert "Friday, October 24, 2025 8:00 PM" in text
        assert "Output (0.9 mi)" in text
        assert "$25" in text
        assert "Completed in 12 ms" in text

    def test_text_report_with_error_and_no_events(self) -> None:
        text = _format_text_output(_response(error="Provider returned HTTP 500"))
        assert "Source rapidapi: 0 events, error: Provider returned HTTP 500" in text
        assert "No events found." in text

    def test_cache_hit_and_more_pages_are_mentioned(self) -> None:
        text = _format_text_output(_response([_party_event()], total_events=30, has_more=True, cache_hit=True))
        assert "more available" in text
        assert "Served from cache" in text

    def test_json_output_is_camel_case(self) -> None:
        data = json.loads(_format_json_output(_response([_party_event()])))
        assert set(data) == {"events", "sourceStats", "meta"}
        assert data["events"][0]["partySubcategory"] == "nightclub"
        assert data["meta"]["queryUsed"].startswith("events near")

    def test_all_sources_failed(self) -> None:
        assert _all_sources_failed(_response(error="boom")) is True
        assert _all_sources_failed(_response()) is False
        assert _all_sources_failed(_response([_party_event()], error="boom")) is False


# ======================================================================
# Runner
# ======================================================================


class TestRun:
    @pytest.mark.asyncio
    async def test_prints_report_and_returns_zero(self, capsys: pytest.CaptureFixture[str]) -> None:
        orchestrator = MagicMock()
        orchestrator.search = AsyncMock(return_value=_response([_party_event()]))
        args = _build_parser().parse_args(["--lat", "40.7", "--lon", "-74.0", "--json"])

        with patch("src.main.build_search_components", return_value={"orchestrator": orchestrator}):
            code = await _run(args, quiet=True)

        assert code == 0
        request = orchestrator.search.await_args.args[0]
        assert request.latitude == 40.7
        assert json.loads(capsys.readouterr().out)["events"][0]["id"] == "rapidapi_evt1"

    @pytest.mark.asyncio
    async def test_all_sources_failing_exits_one(self) -> None:
        orchestrator = MagicMock()
        orchestrator.search = AsyncMock(return_value=_response(error="Provider returned HTTP 500"))
        args = _build_parser().parse_args(["--location", "Austin, TX"])

        with patch("src.main.build_search_components", return_value={"orchestrator": orchestrator}):
            assert await _run(args, quiet=True) == 1

    @pytest.mark.asyncio
    async def test_writes_output_file(self, tmp_path: Path) -> None:
        orchestrator = MagicMock()
        orchestrator.search = AsyncMock(return_value=_response([_party_event()]))
        target = tmp_path / "events.txt"
        args = _build_parser().parse_args(["--location", "Austin, TX", "-o", str(target)])

        with patch("src.main.build_search_components", return_value={"orchestrator": orchestrator}):
            await _run(args, quiet=True)

        assert "Friday Night Club Bash" in target.read_text(encoding="utf-8")

    @pytest.mark.asyncio
    async def test_invalid_arguments_exit_two(self, capsys: pytest.CaptureFixture[str]) -> None:
        args = _build_parser().parse_args(["--limit", "0"])
        assert await _run(args, quiet=True) == 2
        assert "invalid search arguments" in capsys.readouterr().err


class TestMain:
    def test_json_implies_quiet(self) -> None:
        with patch("src.cli.search._run", new_callable=AsyncMock, return_value=0) as run:
            with pytest.raises(SystemExit) as exc_info:
                main(["--location", "Austin, TX", "--json"])

        assert exc_info.value.code == 0
        assert run.await_args.args[1] is True
