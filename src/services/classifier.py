"""Heuristic party classifier.

Decides whether an event is a party and, if so, which
:class:`~src.models.event.PartySubcategory` it belongs to.  This is
best-effort classification from word lists, not ground truth: a
"Book Club Social" will be called a party.

Matching rules
--------------
* Title and description are lower-cased and searched for the terms of
  ``PARTY_KEYWORDS``.  A term must start at a word start but may run on
  into a longer word, so "partygoers" and "clubhouse" count.  The short
  terms in ``WHOLE_WORD_TERMS`` ("dj", "bar", "rave"...) must stand alone,
  with an optional "s"/"es" plural, so "djembe" and "brave" do not.
  ``_``, ``-`` and spaces are interchangeable inside phrases.
* Venue hints (the provider's venue subtype strings) are searched for the
  smaller ``PARTY_VENUE_TYPES`` set.  Either match makes the event a party.
* The subcategory is the first group in ``SUBCATEGORY_GROUPS`` whose terms
  appear in the text; a party that matches no group is ``GENERAL``.
  Venue hints take part in subcategory matching too, after the text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

from src.config.event_vocabulary import (
    CATEGORY_RULES,
    DEFAULT_CATEGORY,
    PARTY_KEYWORDS,
    PARTY_VENUE_TYPES,
    SUBCATEGORY_GROUPS,
    WHOLE_WORD_TERMS,
)
from src.models.event import PARTY_CATEGORY, PartySubcategory


def _phrase(term: str) -> str:
    words = [re.escape(w) for w in re.split(r"[\s_-]+", term.strip().lower()) if w]
    return r"[\s_-]+".join(words)


def _word_pattern(terms: Iterable[str], *, strict_terms: Iterable[str] = ()) -> re.Pattern[str]:
    """Compile *terms* into one alternation anchored at a word start.

    Terms in *strict_terms* must also end at a word end (plural allowed).
    """
    strict = set(strict_terms)
    ordered = sorted(set(terms), key=len, reverse=True)
    loose = "|".join(_phrase(t) for t in ordered if t not in strict)
    whole = "|".join(_phrase(t) for t in ordered if t in strict)
    parts = []
    if loose:
        parts.append(rf"(?:{loose})")
    if whole:
        parts.append(rf"(?:{whole})(?:s|es)?(?![a-z0-9])")
    return re.compile(rf"(?<![a-z0-9])(?:{'|'.join(parts)})")


_PARTY_TEXT = _word_pattern(PARTY_KEYWORDS, strict_terms=WHOLE_WORD_TERMS)
_PARTY_VENUE = _word_pattern(PARTY_VENUE_TYPES, strict_terms=WHOLE_WORD_TERMS)
_SUBCATEGORY_PATTERNS: tuple[tuple[PartySubcategory, re.Pattern[str]], ...] = tuple(
    (subcategory, _word_pattern(terms, strict_terms=WHOLE_WORD_TERMS))
    for subcategory, terms in SUBCATEGORY_GROUPS
)
_CATEGORY_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = tuple(
    (category, _word_pattern(terms)) for category, terms in CATEGORY_RULES
)


@dataclass(frozen=True)
class ClassificationResult:
    """Outcome of :meth:`PartyClassifier.classify`."""

    is_party: bool
    subcategory: PartySubcategory | None = None


class PartyClassifier:
    """Keyword/venue heuristic for party detection and subcategorisation.

    Stateless and deterministic: identical inputs always produce identical
    results, so one instance can be shared by every request.
    """

    def classify(
        self,
        title: str | None,
        description: str | None,
        venue_hints: Iterable[str] | None = None,
    ) -> ClassificationResult:
        """Classify an event from its text and venue metadata.

        Parameters
        ----------
        title:
            Event title.
        description:
            Event description.
        venue_hints:
            Venue subtype strings from the provider (``"night_club"``,
            ``"Bar"``...).
        """
        text = f"{title or ''} {description or ''}".lower()
        hints = " | ".join(h for h in (venue_hints or ()) if h).lower()

        is_party = bool(_PARTY_TEXT.search(text)) or bool(hints and _PARTY_VENUE.search(hints))
        if not is_party:
            return ClassificationResult(is_party=False)

        return ClassificationResult(is_party=True, subcategory=self.subcategory_for(text, hints))

    @staticmethod
    def subcategory_for(text: str, hints: str = "") -> PartySubcategory:
        """Return the first matching subcategory group, ``GENERAL`` if none match."""
        for source in (text, hints):
            if not source:
                continue
            for subcategory, pattern in _SUBCATEGORY_PATTERNS:
                if pattern.search(source):
                    return subcategory
        return PartySubcategory.GENERAL

    @staticmethod
    def category_for(venue_hints: Iterable[str] | None, raw_category: str | None = None) -> str:
        """Map provider category / venue subtypes to a coarse non-party category.

        Never returns ``"party"``; the final category of a party event is
        decided by :meth:`final_category`.
        """
        candidates = [raw_category or "", *(venue_hints or ())]
        for candidate in candidates:
            lowered = candidate.lower() if candidate else ""
            if not lowered:
                continue
            for category, pattern in _CATEGORY_PATTERNS:
                if pattern.search(lowered):
                    return category
        return DEFAULT_CATEGORY

    @staticmethod
    def final_category(result: ClassificationResult, mapped_category: str) -> str:
        """Combine the classifier verdict with the mapped category.

        Party events are always ``"party"``; everything else keeps the
        mapped category, which can never be ``"party"``.
        """
        if result.is_party:
            return PARTY_CATEGORY
        if mapped_category == PARTY_CATEGORY:
            return DEFAULT_CATEGORY
        return mapped_category
