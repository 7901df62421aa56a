"""Tests for the local keyword damage classifier."""

from __future__ import annotations

import pytest

from humane_logistics.core.media import DamageCategory
from humane_logistics.enrichment.classifiers import KeywordDamageClassifier


@pytest.mark.asyncio
class TestKeywordDamageClassifier:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Floodwaters submerged villages as the river flooded again", DamageCategory.FLOOD),
            ("A landslide buried homes; rescuers fear more landslides", DamageCategory.LANDSLIDE),
            ("The death toll rose to 200, with 125 people missing", DamageCategory.CASUALTIES),
            ("The Phong Chau bridge collapsed and roads were cut", DamageCategory.INFRASTRUCTURE),
            ("Thousands evacuated to shelters; many displaced", DamageCategory.DISPLACEMENT),
        ],
    )
    async def test_dominant_category(self, text: str, expected: DamageCategory) -> None:
        assert await KeywordDamageClassifier().classify(text) is expected

    async def test_no_keyword_is_other_not_unknown(self) -> None:
        result = await KeywordDamageClassifier().classify("Officials held a press conference")
        assert result is DamageCategory.OTHER

    async def test_whole_words_only(self) -> None:
        # "fireworks" must not count as a fire keyword.
        result = await KeywordDamageClassifier().classify("Fireworks were cancelled")
        assert result is DamageCategory.OTHER

    async def test_custom_keyword_table(self) -> None:
        classifier = KeywordDamageClassifier({DamageCategory.FIRE: ("smoke",)})
        assert await classifier.classify("Smoke over the city") is DamageCategory.FIRE
