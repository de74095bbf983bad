"""Static vocabularies for event classification and query building.

# ─── PURPOSE ──────────────────────────────────────────────────────────
#
# The events provider has no native "party" taxonomy and only a loose
# venue subtype per record.  These hand-curated word lists let the
# classifier decide whether an event is a party (and which kind), let the
# category mapper turn venue subtypes into coarse categories, and let the
# query builder steer the provider's free-text search towards parties.
#
# Everything here is data: tuples and dicts built once at import time.
# Order inside SUBCATEGORY_GROUPS and CATEGORY_RULES is significant; the
# first matching group wins.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from src.models.event import PartySubcategory

# ═════════════════════════════════════════════════════════════════════════
# 1. PARTY DETECTION
# ═════════════════════════════════════════════════════════════════════════
# Terms in title + description that mark a party.  A term matches from a
# word start and may run on into a longer word ("partygoers", "clubhouse").

PARTY_KEYWORDS: tuple[str, ...] = (
    "party",
    "parties",
    "club",
    "clubbing",
    "dj",
    "nightlife",
    "dance",
    "dancing",
    "lounge",
    "rave",
    "festival",
    "celebration",
    "gala",
    "social",
    "mixer",
    "nightclub",
    "disco",
    "bash",
    "soiree",
    "fiesta",
    "brunch",
    "day party",
    "pool party",
    "rooftop",
    "concert",
    "live music",
    "edm",
    "techno",
    "house music",
    "afterparty",
    "after party",
    "vip",
    "bottle service",
    "bar crawl",
    "happy hour",
    "cocktail",
)

# Words in the provider's venue subtype metadata that mark a party venue.
PARTY_VENUE_TYPES: tuple[str, ...] = ("club", "nightclub", "bar", "lounge", "nightlife", "dancing")

# Short terms that prefix unrelated words ("djembe", "barbecue", "raven",
# "galaxy", "discount", "technology").  These only match as whole words,
# plural allowed, wherever they appear in the lists above and below.
WHOLE_WORD_TERMS: frozenset[str] = frozenset(
    {"dj", "bar", "vip", "edm", "rave", "gala", "bash", "disco", "techno"}
)


# ═════════════════════════════════════════════════════════════════════════
# 2. PARTY SUBCATEGORIES (first match wins)
# ═════════════════════════════════════════════════════════════════════════
# Terms match from a word start, like the party keywords.  Day-party terms
# are phrases; a bare "day" would swallow "Day of the Dead Club Night".

SUBCATEGORY_GROUPS: tuple[tuple[PartySubcategory, tuple[str, ...]], ...] = (
    (PartySubcategory.FESTIVAL, ("festival", "carnival", "music fest")),
    (PartySubcategory.BRUNCH, ("brunch", "bottomless", "mimosa")),
    (
        PartySubcategory.DAY_PARTY,
        ("day party", "day-party", "dayparty", "pool party", "daytime", "dayclub"),
    ),
    (
        PartySubcategory.NIGHTCLUB,
        (
            "nightclub",
            "night club",
            "club",
            "nightlife",
            "dj",
            "rave",
            "techno",
            "house music",
            "edm",
            "disco",
            "afterparty",
            "after party",
            "bottle service",
            "vip",
        ),
    ),
    (PartySubcategory.NETWORKING, ("networking", "mixer", "professionals", "meetup", "meet-up")),
    (PartySubcategory.ROOFTOP, ("rooftop", "roof top", "terrace", "skyline")),
    (
        PartySubcategory.CELEBRATION,
        ("celebration", "gala", "birthday", "anniversary", "new year", "halloween", "fiesta", "soiree"),
    ),
    (PartySubcategory.IMMERSIVE, ("immersive", "interactive", "art installation", "projection")),
    (PartySubcategory.POPUP, ("pop-up", "popup", "pop up", "secret location", "warehouse")),
    (PartySubcategory.SOCIAL, ("social", "bar crawl", "pub crawl", "happy hour", "singles", "game night")),
)


# ═════════════════════════════════════════════════════════════════════════
# 3. NON-PARTY CATEGORY MAPPING
# ═════════════════════════════════════════════════════════════════════════
# Word-prefix terms matched against the venue subtype / provider category.
# "party" is never produced here; only the classifier assigns it.

CATEGORY_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("music", ("concert", "music", "festival", "live music venue", "opera", "jazz")),
    ("sports", ("sport", "stadium", "arena", "athletic", "golf")),
    ("arts", ("art", "theater", "theatre", "exhibition", "museum", "gallery", "performing")),
    ("comedy", ("comedy", "comedian")),
    ("family", ("family", "kids", "children", "zoo", "amusement")),
    ("food", ("food", "drink", "restaurant", "brewery", "winery", "cafe")),
    ("dance", ("dance",)),
)
DEFAULT_CATEGORY = "other"


# ═════════════════════════════════════════════════════════════════════════
# 4. QUERY VOCABULARY
# ═════════════════════════════════════════════════════════════════════════

# Appended to every party search, skipping terms already in the query.
PARTY_QUERY_TERMS: tuple[str, ...] = ("nightclub", "dj", "dance", "festival", "celebration")

SUBCATEGORY_QUERY_TERMS: dict[PartySubcategory, str] = {
    PartySubcategory.NIGHTCLUB: "club nightlife",
    PartySubcategory.FESTIVAL: "music festival",
    PartySubcategory.BRUNCH: "brunch daytime",
    PartySubcategory.DAY_PARTY: "pool rooftop daytime",
    PartySubcategory.ROOFTOP: "rooftop bar",
    PartySubcategory.NETWORKING: "networking mixer",
    PartySubcategory.CELEBRATION: "celebration gala",
    PartySubcategory.SOCIAL: "social mixer",
    PartySubcategory.POPUP: "pop-up",
    PartySubcategory.IMMERSIVE: "immersive experience",
    PartySubcategory.GENERAL: "",
}

# Extra words that help the provider's text search for a requested category.
CATEGORY_QUERY_TERMS: dict[str, str] = {
    "music": "concerts",
    "sports": "sports games",
    "arts": "arts theater",
    "comedy": "comedy shows",
    "family": "family events",
    "food": "food festivals",
    "dance": "dance",
}
