"""Raw provider record -> canonical :class:`~src.models.event.Event`.

The normalizer accepts two shapes:

* **Provider records** from the real-time events search API
  (``event_id``, ``name``, ``start_time_utc``, ``venue{...}``,
  ``ticket_links[...]``...).
* **Canonical event dicts** (``id``, ``title``, ``rawDate``...), which is
  what the fallback backend returns.  These are re-validated and
  re-classified; ``id``, ``coordinates`` and ``rawDate`` pass through
  unchanged, so normalizing an already-normalized event is a no-op for
  those fields.

# ─── FALLBACK RULES ───────────────────────────────────────────────────
#
#   id            event_id -> synthesized hash of title/date/venue
#                 (None only when both id and title are missing)
#   title         name -> "Untitled Event"
#   locationText  full_address -> "city, state, country" -> venue name
#                 -> "Location not specified"
#   coordinates   venue latitude/longitude when both finite and in range,
#                 otherwise omitted (never invented here)
#   rawDate       start_time_utc -> start_time -> date_human_readable
#   imageUrl      thumbnail -> image -> placeholder
#   sourceUrl     link -> first info link -> first ticket link
#   ticketUrl     first ticket link -> sourceUrl
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import hashlib
from datetime import datetime
from typing import Any, Callable, Iterable

import structlog

from src.models.event import (
    LOCATION_FALLBACK,
    PLACEHOLDER_IMAGE_URL,
    Coordinates,
    Event,
    PartySubcategory,
)
from src.services.classifier import ClassificationResult, PartyClassifier
from src.utils.dates import format_display_date, format_display_time, parse_timestamp, to_iso
from src.utils.geo import finite_float, is_valid_coordinate
from src.utils.logging import get_logger

UNTITLED_EVENT = "Untitled Event"

_CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£", "CAD": "CA$", "AUD": "A$"}


class EventNormalizer:
    """Maps heterogeneous raw records into canonical events.

    Parameters
    ----------
    classifier:
        Party classifier applied to every record.
    provider:
        Provider tag used to namespace ids (``"<provider>_<id>"``).
    placeholder_image:
        Image URL used when a record has none.
    now:
        Clock used to fill the year of partial human-readable dates.
    """

    def __init__(
        self,
        classifier: PartyClassifier,
        provider: str = "rapidapi",
        placeholder_image: str = PLACEHOLDER_IMAGE_URL,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self._classifier = classifier
        self._provider = provider
        self._placeholder_image = placeholder_image
        self._now = now
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def provider(self) -> str:
        return self._provider

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def normalize(self, raw: dict[str, Any]) -> Event | None:
        """Normalize one record; ``None`` when it has neither id nor title."""
        if not isinstance(raw, dict):
            return None
        if _is_canonical(raw):
            return self._normalize_canonical(raw)
        return self._normalize_provider_record(raw)

    def normalize_batch(self, raws: Iterable[dict[str, Any]]) -> list[Event]:
        """Normalize many records, dropping failures and duplicate ids.

        A record that raises is logged and skipped; it never aborts the
        batch.  When two records share an id the first one wins.
        """
        events: list[Event] = []
        seen: set[str] = set()
        dropped = 0

        for raw in raws:
            try:
                event = self.normalize(raw)
            except Exception as exc:
                dropped += 1
                self._logger.warning(
                    "normalize_record_failed",
                    error=str(exc),
                    record=str(raw)[:200],
                )
                continue

            if event is None:
                dropped += 1
                continue
            if event.id in seen:
                self._logger.debug("normalize_duplicate_id", event_id=event.id)
                continue

            seen.add(event.id)
            events.append(event)

        if dropped:
            self._logger.info("normalize_records_dropped", dropped=dropped, kept=len(events))
        return events

    # ------------------------------------------------------------------
    # Provider records
    # ------------------------------------------------------------------

    def _normalize_provider_record(self, raw: dict[str, Any]) -> Event | None:
        provider_id = _clean_str(raw.get("event_id") or raw.get("id"))
        title = _clean_str(raw.get("name") or raw.get("title"))
        if not provider_id and not title:
            self._logger.debug("normalize_record_skipped", reason="missing id and title")
            return None

        venue = raw.get("venue") if isinstance(raw.get("venue"), dict) else {}
        venue_hints = _venue_hints(venue)

        start = self._parse_start(raw)
        end = parse_timestamp(raw.get("end_time_utc") or raw.get("end_time"), now=self._reference())
        tz_name = _clean_str(venue.get("timezone"))

        description = _clean_str(raw.get("description"))
        title = title or UNTITLED_EVENT
        verdict = self._classifier.classify(title, description, venue_hints)
        category = self._classifier.final_category(
            verdict,
            self._classifier.category_for(venue_hints, _clean_str(raw.get("category"))),
        )

        ticket_link = _first_link(raw.get("ticket_links"))
        source_url = (
            _clean_str(raw.get("link"))
            or _first_link(raw.get("info_links"))
            or ticket_link
            or None
        )

        return Event(
            id=self._namespaced_id(provider_id) if provider_id else self._synthesized_id(title, raw, venue),
            title=title,
            description=description,
            venue_name=_clean_str(venue.get("name")),
            location_text=_location_text(venue, raw),
            coordinates=_coordinates(venue.get("latitude"), venue.get("longitude")),
            date=format_display_date(start, tz_name),
            time=format_display_time(start, tz_name),
            raw_date=to_iso(start) if start else None,
            end_date=to_iso(end) if end else None,
            category=category,
            party_subcategory=verdict.subcategory,
            is_party_event=verdict.is_party,
            price=_format_price(raw),
            image_url=_clean_str(raw.get("thumbnail") or raw.get("image")) or self._placeholder_image,
            source_url=source_url,
            ticket_url=ticket_link or source_url,
            provider=self._provider,
            venue_type=venue_hints[0] if venue_hints else None,
        )

    def _parse_start(self, raw: dict[str, Any]) -> datetime | None:
        reference = self._reference()
        for field in ("start_time_utc", "start_time", "date_human_readable"):
            parsed = parse_timestamp(raw.get(field), now=reference)
            if parsed is not None:
                return parsed
        return None

    # ------------------------------------------------------------------
    # Canonical dicts (fallback backend output)
    # ------------------------------------------------------------------

    def _normalize_canonical(self, raw: dict[str, Any]) -> Event | None:
        event_id = _clean_str(raw.get("id"))
        title = _clean_str(raw.get("title"))
        if not event_id and not title:
            return None

        provider = _clean_str(raw.get("provider")) or self._provider
        description = _clean_str(raw.get("description"))
        venue_type = _clean_str(_pick(raw, "venue_type", "venueType"))
        hints = [venue_type] if venue_type else []

        verdict = self._classifier.classify(title, description, hints)
        claimed_party = _pick(raw, "is_party_event", "isPartyEvent") is True or raw.get("category") == "party"
        if claimed_party and not verdict.is_party:
            verdict = ClassificationResult(
                is_party=True,
                subcategory=PartySubcategory.GENERAL,
            )
        claimed_sub = _subcategory(_pick(raw, "party_subcategory", "partySubcategory"))
        if verdict.is_party and claimed_sub is not None:
            verdict = ClassificationResult(is_party=True, subcategory=claimed_sub)

        raw_category = _clean_str(raw.get("category"))
        mapped = raw_category if raw_category and raw_category != "party" else self._classifier.category_for(hints)
        category = self._classifier.final_category(verdict, mapped)

        start = parse_timestamp(_pick(raw, "raw_date", "rawDate"), now=self._reference())
        end = parse_timestamp(_pick(raw, "end_date", "endDate"), now=self._reference())

        coordinates = raw.get("coordinates")
        if isinstance(coordinates, dict):
            coordinates = _coordinates(coordinates.get("lat"), coordinates.get("lon"))
        elif isinstance(coordinates, (list, tuple)) and len(coordinates) == 2:
            coordinates = _coordinates(coordinates[1], coordinates[0])
        else:
            coordinates = None

        source_url = _clean_str(_pick(raw, "source_url", "sourceUrl")) or None
        return Event(
            id=event_id or self._synthesized_id(title, raw, {}),
            title=title or UNTITLED_EVENT,
            description=description,
            venue_name=_clean_str(_pick(raw, "venue_name", "venueName")),
            location_text=_clean_str(_pick(raw, "location_text", "locationText")) or LOCATION_FALLBACK,
            coordinates=coordinates,
            date=(_clean_str(raw.get("date")) if start else "") or format_display_date(start),
            time=(_clean_str(raw.get("time")) if start else "") or format_display_time(start),
            raw_date=to_iso(start) if start else None,
            end_date=to_iso(end) if end else None,
            category=category,
            party_subcategory=verdict.subcategory,
            is_party_event=verdict.is_party,
            price=_clean_str(raw.get("price")) or None,
            image_url=_clean_str(_pick(raw, "image_url", "imageUrl")) or self._placeholder_image,
            source_url=source_url,
            ticket_url=_clean_str(_pick(raw, "ticket_url", "ticketUrl")) or source_url,
            provider=provider,
            venue_type=venue_type or None,
        )

    # ------------------------------------------------------------------
    # Ids
    # ------------------------------------------------------------------

    def _namespaced_id(self, provider_id: str) -> str:
        prefix = f"{self._provider}_"
        if provider_id.startswith(prefix):
            return provider_id
        return f"{prefix}{provider_id}"

    def _synthesized_id(self, title: str, raw: dict[str, Any], venue: dict[str, Any]) -> str:
        # Stable across fetches so the same untitled-id record dedups and
        # can be excluded on the next page.
        basis = "|".join(
            str(part or "")
            for part in (
                title,
                raw.get("start_time_utc") or raw.get("start_time") or raw.get("date_human_readable") or raw.get("rawDate"),
                venue.get("name") or raw.get("venueName"),
                venue.get("full_address") or raw.get("locationText"),
            )
        )
        digest = hashlib.sha1(basis.encode("utf-8")).hexdigest()[:16]
        return f"{self._provider}_gen{digest}"

    def _reference(self) -> datetime | None:
        return self._now() if self._now else None


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def _is_canonical(raw: dict[str, Any]) -> bool:
    return "title" in raw and "event_id" not in raw and "name" not in raw


def _pick(raw: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def _clean_str(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        value = str(value)
    return value.strip()


def _subcategory(value: Any) -> PartySubcategory | None:
    if isinstance(value, PartySubcategory):
        return value
    try:
        return PartySubcategory(str(value).lower()) if value else None
    except ValueError:
        return None


def _venue_hints(venue: dict[str, Any]) -> list[str]:
    hints: list[str] = []
    subtype = _clean_str(venue.get("subtype"))
    if subtype:
        hints.append(subtype)
    subtypes = venue.get("subtypes")
    if isinstance(subtypes, list):
        for item in subtypes:
            text = _clean_str(item)
            if text and text not in hints:
                hints.append(text)
    return hints


def _location_text(venue: dict[str, Any], raw: dict[str, Any]) -> str:
    full_address = _clean_str(venue.get("full_address") or venue.get("address"))
    if full_address:
        return full_address
    parts = [_clean_str(venue.get(key)) for key in ("city", "state", "country")]
    joined = ", ".join(part for part in parts if part)
    if joined:
        return joined
    return _clean_str(venue.get("name")) or _clean_str(raw.get("location")) or LOCATION_FALLBACK


def _coordinates(lat_value: Any, lon_value: Any) -> Coordinates | None:
    lat = finite_float(lat_value)
    lon = finite_float(lon_value)
    if not is_valid_coordinate(lat, lon):
        return None
    return Coordinates(lon=lon, lat=lat)


def _first_link(links: Any) -> str:
    if not isinstance(links, list):
        return ""
    for item in links:
        if isinstance(item, dict):
            link = _clean_str(item.get("link") or item.get("url"))
        else:
            link = _clean_str(item)
        if link:
            return link
    return ""


def _format_price(raw: dict[str, Any]) -> str | None:
    if raw.get("is_free") is True:
        return "Free"

    price = raw.get("price")
    currency = "USD"
    low: Any = raw.get("min_price")
    high: Any = raw.get("max_price")

    if isinstance(price, dict):
        currency = _clean_str(price.get("currency")) or currency
        low = price.get("min", low)
        high = price.get("max", high)
    elif isinstance(price, str) and price.strip():
        return price.strip()
    elif isinstance(price, (int, float)) and not isinstance(price, bool):
        low = price

    low_n = finite_float(low)
    high_n = finite_float(high)
    if low_n is None and high_n is None:
        return None

    symbol = _CURRENCY_SYMBOLS.get(currency.upper(), f"{currency.upper()} ")
    if low_n is not None and high_n is not None and high_n > low_n:
        return f"{symbol}{_money(low_n)} - {symbol}{_money(high_n)}"
    amount = low_n if low_n is not None else high_n
    if amount == 0:
        return "Free"
    return f"{symbol}{_money(amount)}"


def _money(amount: float) -> str:
    return f"{amount:.0f}" if float(amount).is_integer() else f"{amount:.2f}"
