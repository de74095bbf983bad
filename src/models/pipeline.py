"""Search pipeline phase model.

Each search request walks a small state machine:

    IDLE -> CACHE_CHECK -> CACHE_HIT -> RESPOND
                        -> CACHE_MISS -> FETCHING
                              -> NORMALIZING -> CLASSIFYING -> FILTERING
                                 -> SORTING -> PAGINATING -> CACHE_PUT -> RESPOND
                              -> FALLBACK -> RESPOND

The orchestrator records the phases it passes through in
``SearchMeta.phases`` and logs each transition, so a response can be
traced without reading server logs.
"""

from __future__ import annotations

from enum import Enum


class SearchPhase(str, Enum):  # noqa: UP042
    """Phases of one search request."""

    IDLE = "IDLE"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    CACHE_CHECK = "CACHE_CHECK"
    CACHE_HIT = "CACHE_HIT"
    CACHE_MISS = "CACHE_MISS"
    FETCHING = "FETCHING"
    NORMALIZING = "NORMALIZING"
    CLASSIFYING = "CLASSIFYING"
    FILTERING = "FILTERING"
    SORTING = "SORTING"
    PAGINATING = "PAGINATING"
    CACHE_PUT = "CACHE_PUT"
    FALLBACK = "FALLBACK"
    RESPOND = "RESPOND"

