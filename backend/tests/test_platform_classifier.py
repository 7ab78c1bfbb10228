"""
Tests for raw platform name classification.
"""

import pytest

from savvy_cart.models.platform import PlatformId
from savvy_cart.services.platform_classifier import classify
from savvy_cart.utils.constants import PLATFORM_ALIASES


class TestClassify:

    @pytest.mark.parametrize("alias, expected", sorted(PLATFORM_ALIASES.items()))
    def test_aliases_ignore_case(self, alias, expected):
        assert classify(alias) == expected
        assert classify(alias.upper()) == expected
        assert classify(alias.title()) == expected

    def test_blinkit_spellings(self):
        assert classify("BLINKIT") == classify("blinkit") == classify("BlinkIt") == PlatformId.BLINKIT

    def test_swiggy_maps_to_instamart(self):
        assert classify("Swiggy") == PlatformId.SWIGGY_INSTAMART

    @pytest.mark.parametrize("platform", list(PlatformId))
    def test_canonical_names(self, platform):
        assert classify(platform.value) == platform

    def test_whitespace_is_normalized(self):
        assert classify("  Swiggy   Instamart ") == PlatformId.SWIGGY_INSTAMART

    def test_near_miss_resolves_to_nearest(self):
        assert classify("Zeptoo") == PlatformId.ZEPTO

    @pytest.mark.parametrize("name", ["BigBasket Now", "Big Basket Now", "BB-Now", "bb now"])
    def test_bb_now_is_not_bigbasket(self, name):
        assert classify(name) == PlatformId.BBNOW

    @pytest.mark.parametrize("name", ["Zepto Cafe", "Swiggy Dineout", "JioMart Express"])
    def test_extra_words_are_not_fuzzy_matched(self, name):
        assert classify(name) is None

    def test_unknown_platform_is_dropped(self):
        assert classify("Amazon Fresh") is None

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_empty_names(self, value):
        assert classify(value) is None
