"""Unit tests for the MediaItem entity and DamageCategory."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from humane_logistics.core.media import DamageCategory, MediaItem, MediaKind
from tests.factories.media import AnalyzedNewsItemFactory, NewsItemFactory


class TestNeedsAnalysis:
    def test_fresh_item_needs_analysis(self) -> None:
        assert NewsItemFactory.build().needs_analysis() is True

    def test_fully_analyzed_item_does_not(self) -> None:
        assert AnalyzedNewsItemFactory.build().needs_analysis() is False

    def test_sentiment_only_still_needs_analysis(self) -> None:
        item = NewsItemFactory.build(sentiment=0.3)
        assert item.needs_analysis() is True

    def test_damage_only_still_needs_analysis(self) -> None:
        item = NewsItemFactory.build(damage_type=DamageCategory.FIRE)
        assert item.needs_analysis() is True

    def test_genuinely_neutral_score_reads_as_unscored(self) -> None:
        item = NewsItemFactory.build(sentiment=0.0, damage_type=DamageCategory.FLOOD)
        assert item.needs_analysis() is True

    @pytest.mark.parametrize("raw", ["UNKNOWN", "unknown", "TSUNAMI", None])
    def test_raw_unclassified_values_need_analysis(self, raw: object) -> None:
        item = NewsItemFactory.build(sentiment=0.4, damage_type=raw)
        assert item.needs_analysis() is True

    @pytest.mark.parametrize("raw", ["FLOOD", "Damaged Housing"])
    def test_raw_category_strings_count_as_classified(self, raw: str) -> None:
        item = NewsItemFactory.build(sentiment=0.4, damage_type=raw)
        assert item.needs_analysis() is False


class TestConstructors:
    def test_news_is_unanalyzed_and_keeps_source(self) -> None:
        ts = datetime(2024, 9, 8, 12, tzinfo=timezone.utc)
        item = MediaItem.news("Typhoon Yagi", "Roads closed", "https://a.example/1", ts, "VnExpress")

        assert item.kind is MediaKind.NEWS
        assert item.source == "VnExpress"
        assert item.sentiment == 0.0
        assert item.damage_type is DamageCategory.UNKNOWN

    def test_social_post_has_no_source(self) -> None:
        ts = datetime(2024, 9, 8, 12, tzinfo=timezone.utc)
        item = MediaItem.social_post("Typhoon Yagi", "Stay safe", None, ts)

        assert item.kind is MediaKind.SOCIAL_POST
        assert item.source is None
        assert item.needs_analysis() is True


class TestUrlAndContent:
    @pytest.mark.parametrize(
        "url",
        ["https://news.example.com/a", "http://example.org/path?q=1"],
    )
    def test_valid_urls(self, url: str) -> None:
        assert NewsItemFactory.build(url=url).has_valid_url() is True

    @pytest.mark.parametrize("url", [None, "", "not-a-url", "ftp://example.com/file", "https://"])
    def test_invalid_urls(self, url: str | None) -> None:
        assert NewsItemFactory.build(url=url).has_valid_url() is False

    def test_whitespace_content_is_not_content(self) -> None:
        assert NewsItemFactory.build(content="   \n").has_content() is False

    def test_content_key_is_exact_content(self) -> None:
        a = NewsItemFactory.build(content="Flooding in Hanoi")
        b = NewsItemFactory.build(content="Flooding in Hanoi ")
        assert a.content_key() == "Flooding in Hanoi"
        assert a.content_key() != b.content_key()


class TestDamageCategory:
    def test_display_names(self) -> None:
        assert DamageCategory.FLOOD.display_name == "Flood"
        assert DamageCategory.HOUSING.display_name == "Damaged Housing"
        assert DamageCategory.UNKNOWN.display_name == "Unknown"

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("FLOOD", DamageCategory.FLOOD),
            ("flood", DamageCategory.FLOOD),
            ("Damaged Infrastructure", DamageCategory.INFRASTRUCTURE),
            ("economic disruption", DamageCategory.ECONOMIC),
            ("tsunami", DamageCategory.UNKNOWN),
            (None, DamageCategory.UNKNOWN),
            (42, DamageCategory.UNKNOWN),
        ],
    )
    def test_parse(self, raw: object, expected: DamageCategory) -> None:
        assert DamageCategory.parse(raw) is expected

    def test_every_member_has_display_name(self) -> None:
        for member in DamageCategory:
            assert member.display_name
