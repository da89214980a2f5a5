"""Transaction categorization.

Rule-based and local (no network calls) so classification stays fast,
auditable and reproducible.
"""

from .categories import FALLBACK_CATEGORY, Category
from .rules import CategoryRule, Classifier, categorize, load_rules

__all__ = [
    "Category",
    "CategoryRule",
    "Classifier",
    "FALLBACK_CATEGORY",
    "categorize",
    "load_rules",
]
