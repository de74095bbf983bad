"""Unit tests for the heuristic party classifier."""

from __future__ import annotations

import pytest

from src.models.event import PartySubcategory
from src.services.classifier import ClassificationResult, PartyClassifier


class TestPartyDetection:
    def test_club_bash_is_nightclub_party(self, classifier: PartyClassifier) -> None:
        result = classifier.classify("Friday Night Club Bash", "", [])
        assert result == ClassificationResult(is_party=True, subcategory=PartySubcategory.NIGHTCLUB)

    def test_plain_event_is_not_a_party(self, classifier: PartyClassifier) -> None:
        result = classifier.classify("Quarterly Budget Review", "Finance team sync", ["Office"])
        assert result.is_party is False
        assert result.subcategory is None

    def test_venue_type_alone_marks_a_party(self, classifier: PartyClassifier) -> None:
        result = classifier.classify("Thursday Sessions", "", ["Night club"])
        assert result.is_party is True
        assert result.subcategory == PartySubcategory.NIGHTCLUB

    @pytest.mark.parametrize("title", ["Partygoers Unite", "Clubhouse Sessions", "Nightclubbing"])
    def test_inflected_keywords_match(self, classifier: PartyClassifier, title: str) -> None:
        result = classifier.classify(title, "", [])
        assert result.is_party is True

    def test_inflected_nightclub_keeps_its_subcategory(self, classifier: PartyClassifier) -> None:
        assert classifier.classify("Nightclubbing", "", []).subcategory == PartySubcategory.NIGHTCLUB

    @pytest.mark.parametrize(
        "title,description",
        [
            ("Barbecue Cook-Off", "Djembe workshop"),
            ("Brave New Trails", "Gravel ride past the galaxy mural"),
            ("Discount Technology Fair", "Raven watching"),
        ],
    )
    def test_short_terms_need_whole_words(self, classifier: PartyClassifier, title: str, description: str) -> None:
        assert classifier.classify(title, description, []).is_party is False

    def test_terms_do_not_match_inside_words(self, classifier: PartyClassifier) -> None:
        # "dance" inside "attendance", "party" inside "counterparty".
        result = classifier.classify("Attendance Review", "Counterparty settlement", [])
        assert result.is_party is False

    def test_plural_keyword_matches(self, classifier: PartyClassifier) -> None:
        assert classifier.classify("Best Raves in Town", None, None).is_party is True

    def test_deterministic(self, classifier: PartyClassifier) -> None:
        args = ("Sunset Rooftop Social", "DJ sets and cocktails", ["Bar"])
        assert classifier.classify(*args) == classifier.classify(*args)
        assert PartyClassifier().classify(*args) == classifier.classify(*args)


class TestSubcategories:
    @pytest.mark.parametrize(
        "title,expected",
        [
            ("Electric Zoo Festival", PartySubcategory.FESTIVAL),
            ("Bottomless Brunch Party", PartySubcategory.BRUNCH),
            ("Saturday Pool Party", PartySubcategory.DAY_PARTY),
            ("Techno All Night", PartySubcategory.NIGHTCLUB),
            ("Founders Networking Mixer", PartySubcategory.NETWORKING),
            ("Sunset Rooftop Party", PartySubcategory.ROOFTOP),
            ("Halloween Party", PartySubcategory.CELEBRATION),
            ("Immersive Party Experience", PartySubcategory.IMMERSIVE),
            ("Pop-Up Party", PartySubcategory.POPUP),
            ("Happy Hour Social", PartySubcategory.SOCIAL),
            ("Big Party", PartySubcategory.GENERAL),
        ],
    )
    def test_first_matching_group(self, classifier: PartyClassifier, title: str, expected: PartySubcategory) -> None:
        result = classifier.classify(title, "", [])
        assert result.is_party is True
        assert result.subcategory == expected

    def test_festival_wins_over_later_groups(self, classifier: PartyClassifier) -> None:
        result = classifier.classify("Rooftop DJ Festival", "", [])
        assert result.subcategory == PartySubcategory.FESTIVAL

    def test_weekday_names_do_not_trigger_day_party(self, classifier: PartyClassifier) -> None:
        result = classifier.classify("Friday Party", "", [])
        assert result.subcategory == PartySubcategory.GENERAL

    def test_day_party_phrase_tolerates_separators(self, classifier: PartyClassifier) -> None:
        assert classifier.classify("Day-Party at the Pier", "", []).subcategory == PartySubcategory.DAY_PARTY
        assert classifier.classify("Day_Party", "", []).subcategory == PartySubcategory.DAY_PARTY

    def test_venue_hint_decides_when_text_has_no_group(self, classifier: PartyClassifier) -> None:
        result = classifier.classify("Big Party", "", ["Rooftop bar"])
        assert result.subcategory == PartySubcategory.ROOFTOP


class TestCategoryMapping:
    @pytest.mark.parametrize(
        "hints,raw,expected",
        [
            (["Concert hall"], None, "music"),
            (["Stadium"], None, "sports"),
            (["Art gallery"], None, "arts"),
            (["Comedy club"], None, "comedy"),
            (["Kids play space"], None, "family"),
            (["Brewery"], None, "food"),
            ([], "Dance", "dance"),
            (["Office"], None, "other"),
            ([], None, "other"),
        ],
    )
    def test_maps_venue_types(self, hints: list[str], raw: str | None, expected: str) -> None:
        assert PartyClassifier.category_for(hints, raw) == expected

    def test_never_maps_to_party(self) -> None:
        assert PartyClassifier.category_for(["party"], "party") != "party"

    def test_final_category_enforces_party_invariant(self) -> None:
        party = ClassificationResult(is_party=True, subcategory=PartySubcategory.GENERAL)
        not_party = ClassificationResult(is_party=False)
        assert PartyClassifier.final_category(party, "music") == "party"
        assert PartyClassifier.final_category(not_party, "music") == "music"
        assert PartyClassifier.final_category(not_party, "party") == "other"
