"""Deterministic transaction categorization.

monobank sends an MCC with each statement item, but the spending buckets we
log are coarser and personal, so the category is inferred from the
description text instead.

The rule table is an ordered list of (category, keywords) pairs loaded from
YAML. Evaluation is linear in declaration order and the first rule with any
keyword contained in the description wins. Containment is plain substring
matching, not word matching: "Shell" also matches "Seashells".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Sequence

import yaml

from spendlog.categorization.categories import FALLBACK_CATEGORY, Category
from spendlog.core.exceptions import RuleConfigError

logger = logging.getLogger(__name__)

DEFAULT_RULES_PATH = Path(__file__).parent / "default_rules.yaml"


@dataclass(frozen=True)
class CategoryRule:
    """One row of the rule table."""

    category: Category
    keywords: tuple[str, ...]

    def matches(self, text: str, case_sensitive: bool = False) -> bool:
        if case_sensitive:
            return any(keyword in text for keyword in self.keywords)
        return any(keyword.casefold() in text for keyword in self.keywords)


def parse_rules(data: object) -> list[CategoryRule]:
    """Build the ordered rule list from an already-parsed YAML document.

    Raises:
        RuleConfigError: If the document shape is wrong, a category is not a
            member of ``Category``, or a keyword is empty.
    """
    if not isinstance(data, dict) or not isinstance(data.get("rules"), list):
        raise RuleConfigError("Rule document must be a mapping with a 'rules' list")

    rules: list[CategoryRule] = []
    for position, entry in enumerate(data["rules"]):
        if not isinstance(entry, dict):
            raise RuleConfigError(f"Rule #{position} must be a mapping")

        raw_category = entry.get("category")
        if not isinstance(raw_category, str):
            raise RuleConfigError(f"Rule #{position} has no category")
        try:
            category = Category.lookup(raw_category)
        except ValueError as e:
            raise RuleConfigError(f"Rule #{position}: {e}") from e

        keywords = entry.get("keywords")
        if not isinstance(keywords, list) or not keywords:
            raise RuleConfigError(f"Rule #{position} ({category.name}) has no keywords")
        for keyword in keywords:
            if not isinstance(keyword, str) or not keyword.strip():
                raise RuleConfigError(
                    f"Rule #{position} ({category.name}) has an empty or non-string keyword"
                )

        rules.append(CategoryRule(category=category, keywords=tuple(keywords)))

    return rules


def load_rules(path: Path | str) -> list[CategoryRule]:
    """Load the ordered rule table from a YAML file."""
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise RuleConfigError(f"Cannot read rule file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise RuleConfigError(f"Invalid YAML in rule file {path}: {e}") from e

    rules = parse_rules(data)
    logger.info("Loaded %d category rules from %s", len(rules), path)
    return rules


@lru_cache
def default_rules() -> tuple[CategoryRule, ...]:
    return tuple(load_rules(DEFAULT_RULES_PATH))


class Classifier:
    """Maps a free-text description to exactly one ``Category``."""

    def __init__(
        self,
        rules: Iterable[CategoryRule] | None = None,
        case_sensitive: bool = False,
        fallback: Category = FALLBACK_CATEGORY,
    ):
        self.rules: Sequence[CategoryRule] = (
            tuple(rules) if rules is not None else default_rules()
        )
        self.case_sensitive = case_sensitive
        self.fallback = fallback

    def classify(self, description: str | None) -> Category:
        text = description or ""
        if not self.case_sensitive:
            text = text.casefold()

        for rule in self.rules:
            if rule.matches(text, self.case_sensitive):
                return rule.category

        return self.fallback

    @classmethod
    def from_path(cls, path: Path | str | None, case_sensitive: bool = False) -> Classifier:
        """Classifier over a rule file, or over the packaged defaults when path is None."""
        rules = load_rules(path) if path is not None else None
        return cls(rules, case_sensitive=case_sensitive)


def categorize(description: str | None) -> Category:
    """Infer a category using the packaged default rules (case-insensitive)."""
    return Classifier().classify(description)
