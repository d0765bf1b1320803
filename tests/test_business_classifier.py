"""
test_business_classifier.py — Tests for services/business_classifier.py

Covers keyword matching per business type, first-match ordering,
case-insensitivity, the general fallback, and injected keyword tables.

Called by: pytest
Depends on: outreach/services/business_classifier.py
"""

import pytest

from outreach.constants import BusinessType
from outreach.services.business_classifier import classify_business_type


class TestKeywordMatch:
    @pytest.mark.parametrize(
        "category,expected",
        [
            ("Tony's Pizza & Pasta", BusinessType.RESTAURANT),
            ("Downtown Coffee House", BusinessType.RESTAURANT),
            ("Vintage Clothing Boutique", BusinessType.RETAIL),
            ("Smith & Jones Attorney at Law", BusinessType.PROFESSIONAL_SERVICES),
            ("Family Dentist", BusinessType.HEALTH_WELLNESS),
            ("Joe's Plumbing", BusinessType.HOME_SERVICES),
            ("Quick Lube Mechanic", BusinessType.AUTOMOTIVE),
            ("Lifestyle Influencer", BusinessType.CREATOR),
        ],
    )
    def test_categories(self, category, expected):
        assert classify_business_type(category) == expected

    def test_case_insensitive(self):
        assert classify_business_type("SUSHI BAR") == BusinessType.RESTAURANT
        assert classify_business_type("sushi bar") == BusinessType.RESTAURANT

    def test_substring_match(self):
        # "landscap" matches landscaping and landscaper
        assert classify_business_type("Green Landscaping Co") == BusinessType.HOME_SERVICES

    def test_first_type_wins(self):
        # "bar" (restaurant) is checked before "wash" (automotive)
        assert classify_business_type("Bar & Car Wash") == BusinessType.RESTAURANT


class TestFallback:
    @pytest.mark.parametrize("category", [None, "", "Widget Holdings LLC", "   "])
    def test_unmatched_is_general(self, category):
        assert classify_business_type(category) == BusinessType.GENERAL

    def test_always_returns_a_business_type(self):
        for category in ["x", "123", "🍕", "a" * 500]:
            assert isinstance(classify_business_type(category), BusinessType)


class TestInjectedKeywords:
    def test_custom_table(self):
        table = {
            BusinessType.CREATOR: ("widget",),
            BusinessType.GENERAL: (),
        }
        assert classify_business_type("Widget Holdings", keywords=table) == BusinessType.CREATOR

    def test_custom_table_order_respected(self):
        table = {
            BusinessType.RETAIL: ("shop",),
            BusinessType.RESTAURANT: ("shop",),
        }
        assert classify_business_type("Donut Shop", keywords=table) == BusinessType.RETAIL

    def test_empty_table_is_general(self):
        assert classify_business_type("Pizza", keywords={}) == BusinessType.GENERAL
