"""Local keyword-based damage classifier.

Counts whole-word keyword hits per damage category and returns the category
with the most hits.  Ties go to the category listed first in
:data:`DAMAGE_KEYWORDS`, which orders categories from most to least severe.
Text that matches no keyword is classified as ``OTHER``: it was read, it
just did not describe a recognised kind of damage.
"""

from __future__ import annotations

import re

import structlog

from humane_logistics.core.media import DamageCategory
from humane_logistics.enrichment.base import DamageClassifier

logger = structlog.get_logger(__name__)

DAMAGE_KEYWORDS: dict[DamageCategory, tuple[str, ...]] = {
    DamageCategory.CASUALTIES: (
        "dead", "death", "deaths", "died", "killed", "casualties", "injured",
        "missing", "victims", "fatalities", "toll",
    ),
    DamageCategory.DISPLACEMENT: (
        "evacuated", "evacuation", "evacuees", "displaced", "shelter", "shelters",
        "homeless", "relocated", "refugees",
    ),
    DamageCategory.HOUSING: (
        "house", "houses", "home", "homes", "roof", "roofs", "collapsed",
        "destroyed", "building", "buildings",
    ),
    DamageCategory.INFRASTRUCTURE: (
        "bridge", "bridges", "road", "roads", "power", "electricity", "outage",
        "blackout", "grid", "telecommunications", "water supply", "airport",
    ),
    DamageCategory.FLOOD: (
        "flood", "floods", "flooding", "flooded", "inundated", "submerged",
        "overflow", "deluge",
    ),
    DamageCategory.FIRE: ("fire", "fires", "blaze", "wildfire", "burned", "burning"),
    DamageCategory.LANDSLIDE: ("landslide", "landslides", "mudslide", "mudslides", "rockfall"),
    DamageCategory.ECONOMIC: (
        "crops", "harvest", "farm", "farms", "livestock", "factory", "factories",
        "losses", "economic", "business", "businesses", "supply chain",
    ),
}


def _compile(keywords: tuple[str, ...]) -> re.Pattern[str]:
    alternation = "|".join(re.escape(word) for word in keywords)
    return re.compile(rf"\b(?:{alternation})\b", re.IGNORECASE)


class KeywordDamageClassifier(DamageClassifier):
    """Classify damage by counting keyword hits per category.

    Args:
        keywords: Optional replacement keyword table.  Defaults to
            :data:`DAMAGE_KEYWORDS`.
    """

    engine_name = "keywords"

    def __init__(self, keywords: dict[DamageCategory, tuple[str, ...]] | None = None) -> None:
        table = keywords or DAMAGE_KEYWORDS
        self._patterns: list[tuple[DamageCategory, re.Pattern[str]]] = [
            (category, _compile(words)) for category, words in table.items() if words
        ]

    async def classify(self, text: str) -> DamageCategory:
        best_category = DamageCategory.OTHER
        best_hits = 0
        for category, pattern in self._patterns:
            hits = len(pattern.findall(text))
            if hits > best_hits:
                best_category, best_hits = category, hits
        logger.debug(
            "damage_classifier: classified",
            category=best_category.value,
            hits=best_hits,
        )
        return best_category
