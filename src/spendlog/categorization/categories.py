"""Spending categories written to the sheet's category column."""

from __future__ import annotations

from enum import Enum


class Category(str, Enum):
    """Closed, ordered set of spending buckets.

    Values are the labels shown in the sheet, so renaming one changes what
    gets logged from then on.
    """

    GROCERIES = "🛒 groceries"
    RESTAURANTS = "🍔 restaurants"
    COFFEE = "☕ coffee"
    PETROL = "⛽ petrol"
    TAXI = "🚕 taxi"
    TRANSPORT = "🚌 transport"
    HEALTH = "💊 health"
    BEAUTY = "💇 beauty"
    CLOTHES = "👕 clothes"
    HOME = "🏠 home"
    UTILITIES = "💡 utilities"
    COMMUNICATION = "📱 communication"
    SUBSCRIPTIONS = "📺 subscriptions"
    ENTERTAINMENT = "🎬 entertainment"
    TRAVEL = "✈️ travel"
    TRANSFERS = "💸 transfers"
    OTHER = "❓ other"

    @classmethod
    def lookup(cls, value: str) -> Category:
        """Resolve either a label ("⛽ petrol") or a member name ("PETROL")."""
        try:
            return cls(value)
        except ValueError:
            pass
        try:
            return cls[value.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown category: {value!r}") from None


FALLBACK_CATEGORY = Category.OTHER
