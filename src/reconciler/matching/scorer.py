#!/usr/bin/env python3
"""
Candidate Match Scoring

Combines the similarity primitives into a single [0, 1] confidence that an
order and a transaction describe the same event.

Factors:
- customer name similarity (Levenshtein)
- external identifier similarity (Levenshtein)
- item match (all-or-nothing, case-insensitive)
- price proximity on cents
- date window: +1 inside the grace period, -0.5 if the transaction
  precedes the order, 0 otherwise

Each factor is multiplied by its weight from a WeightProfile. Weights are
normalized by their sum, so any non-negative profile yields a probability.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ..core.errors import ConfigurationError
from .models import Order, Transaction
from .similarity import date_window_bonus, numeric_proximity, string_similarity

DEFAULT_DATE_WINDOW_DAYS = 60

# Date factor values fed to date_window_bonus; scaled by date_weight
DATE_FACTOR_INSIDE_WINDOW = 1.0
DATE_FACTOR_BEFORE_ORDER = -0.5

WEIGHT_KEYS = (
    "customer_name_weight",
    "external_id_weight",
    "item_weight",
    "price_weight",
    "date_weight",
)

# Factor order matches WEIGHT_KEYS and ScoreBreakdown fields
FACTOR_NAMES = ("customer_name", "external_id", "item", "price", "date")

# Accepted spellings for custom weight mappings (JSON payloads use camelCase)
_WEIGHT_ALIASES = {
    "customerNameWeight": "customer_name_weight",
    "externalIdWeight": "external_id_weight",
    "itemWeight": "item_weight",
    "priceWeight": "price_weight",
    "dateWeight": "date_weight",
}


@dataclass(frozen=True)
class WeightProfile:
    """Relative importance of each scoring factor."""

    customer_name_weight: float
    external_id_weight: float
    item_weight: float
    price_weight: float
    date_weight: float
    name: str = "custom"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], name: str = "custom") -> "WeightProfile":
        """
        Build a profile from a mapping of weights.

        Keys may be snake_case (``customer_name_weight``) or camelCase
        (``customerNameWeight``). Unknown keys are rejected so that typos do
        not silently zero out a factor.

        Raises:
            ConfigurationError: Missing, unknown, or non-numeric weights
        """
        normalized_keys: dict[str, Any] = {}
        for key, value in data.items():
            canonical = _WEIGHT_ALIASES.get(key, key)
            if canonical not in WEIGHT_KEYS:
                raise ConfigurationError(f"Unknown weight key: {key!r}")
            normalized_keys[canonical] = value

        missing = [key for key in WEIGHT_KEYS if key not in normalized_keys]
        if missing:
            raise ConfigurationError(f"Weight profile is missing required keys: {', '.join(missing)}")

        try:
            weights = {key: float(normalized_keys[key]) for key in WEIGHT_KEYS}
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Weights must be numbers: {e}") from e

        profile = cls(name=name, **weights)
        profile.validate()
        return profile

    def as_tuple(self) -> tuple[float, float, float, float, float]:
        return (
            self.customer_name_weight,
            self.external_id_weight,
            self.item_weight,
            self.price_weight,
            self.date_weight,
        )

    @property
    def total(self) -> float:
        return sum(self.as_tuple())

    def validate(self) -> None:
        """
        Raises:
            ConfigurationError: Any weight negative or non-finite, or all zero
        """
        for key, value in zip(WEIGHT_KEYS, self.as_tuple()):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(f"{key} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise ConfigurationError(f"{key} must be finite, got {value!r}")
            if value < 0:
                raise ConfigurationError(f"{key} must be non-negative, got {value!r}")

        if self.total <= 0:
            raise ConfigurationError("At least one weight must be positive")

    def normalized(self) -> "WeightProfile":
        """Return a copy whose weights sum to 1.0."""
        self.validate()
        total = self.total
        return WeightProfile(
            customer_name_weight=self.customer_name_weight / total,
            external_id_weight=self.external_id_weight / total,
            item_weight=self.item_weight / total,
            price_weight=self.price_weight / total,
            date_weight=self.date_weight / total,
            name=self.name,
        )

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, **dict(zip(WEIGHT_KEYS, self.as_tuple()))}


# Authoritative, structured bulk data: no name-only shortcut
STRICT_PROFILE = WeightProfile(
    customer_name_weight=0.25,
    external_id_weight=0.25,
    item_weight=0.2,
    price_weight=0.2,
    date_weight=0.1,
    name="strict",
)

# Quick triage when only the customer name is reliably comparable
NAME_ONLY_PROFILE = WeightProfile(
    customer_name_weight=1.0,
    external_id_weight=0.0,
    item_weight=0.0,
    price_weight=0.0,
    date_weight=0.0,
    name="name-only",
)

BUILTIN_PROFILES = {
    "strict": STRICT_PROFILE,
    "name-only": NAME_ONLY_PROFILE,
    "name_only": NAME_ONLY_PROFILE,
}


def resolve_profile(selector: "str | WeightProfile | Mapping[str, Any]") -> WeightProfile:
    """
    Turn a profile selector into a validated WeightProfile.

    Args:
        selector: "strict", "name-only", a WeightProfile, or a mapping of
                  custom weights

    Raises:
        ConfigurationError: Unknown profile name or invalid weights
    """
    if isinstance(selector, WeightProfile):
        selector.validate()
        return selector
    if isinstance(selector, str):
        profile = BUILTIN_PROFILES.get(selector.strip().lower())
        if profile is None:
            raise ConfigurationError(
                f"Unknown weight profile {selector!r}; expected 'strict', 'name-only', or custom weights"
            )
        return profile
    if isinstance(selector, Mapping):
        return WeightProfile.from_dict(selector)
    raise ConfigurationError(f"Unsupported weight profile selector: {type(selector).__name__}")


@dataclass(frozen=True)
class ScoreBreakdown:
    """Raw (unweighted) factor values for one pair, kept for explainability."""

    customer_name: float
    external_id: float
    item: float
    price: float
    date: float

    def as_tuple(self) -> tuple[float, float, float, float, float]:
        return (self.customer_name, self.external_id, self.item, self.price, self.date)

    def to_dict(self) -> dict[str, float]:
        return {
            "customer_name": self.customer_name,
            "external_id": self.external_id,
            "item": self.item,
            "price": self.price,
            "date": self.date,
        }


class MatchScorer:
    """
    Weighted order/transaction scorer.

    Holds only immutable configuration, so one instance can score pairs from
    many threads at once.
    """

    def __init__(
        self,
        weights: "str | WeightProfile | Mapping[str, Any]" = STRICT_PROFILE,
        date_window_days: int = DEFAULT_DATE_WINDOW_DAYS,
    ):
        """
        Initialize the scorer.

        Args:
            weights: Profile selector (see resolve_profile)
            date_window_days: Days after the order date a transaction may land

        Raises:
            ConfigurationError: Invalid weights or negative window
        """
        if isinstance(date_window_days, bool) or not isinstance(date_window_days, int) or date_window_days < 0:
            raise ConfigurationError(f"date_window_days must be a non-negative integer, got {date_window_days!r}")

        self.profile = resolve_profile(weights)
        self.weights = self.profile.normalized()
        self.date_window_days = date_window_days

    def _factor(self, name: str, order: Order, transaction: Transaction) -> float:
        """Raw value of one scoring factor, keyed like ScoreBreakdown fields."""
        if name == "customer_name":
            return string_similarity(order.customer, transaction.customer)
        if name == "external_id":
            return string_similarity(order.external_id, transaction.external_id)
        if name == "item":
            return 1.0 if order.item.strip().lower() == transaction.item.strip().lower() else 0.0
        if name == "price":
            return numeric_proximity(order.price.to_cents(), transaction.price.to_cents())
        return date_window_bonus(
            transaction.date.date if transaction.date else None,
            order.date.date if order.date else None,
            self.date_window_days,
            bonus=DATE_FACTOR_INSIDE_WINDOW,
            penalty=DATE_FACTOR_BEFORE_ORDER,
        )

    def factors(self, order: Order, transaction: Transaction) -> ScoreBreakdown:
        """Compute every raw factor for a pair."""
        return ScoreBreakdown(*(self._factor(name, order, transaction) for name in FACTOR_NAMES))

    def score(self, order: Order, transaction: Transaction) -> float:
        """
        Calculate match confidence (0.0 to 1.0) for one pair.

        Factors with zero weight are skipped entirely, so the name-only
        profile costs a single string comparison.
        """
        total = 0.0
        for name, weight in zip(FACTOR_NAMES, self.weights.as_tuple()):
            if weight:
                total += weight * self._factor(name, order, transaction)
        return max(0.0, min(1.0, total))


def score(
    order: Order,
    transaction: Transaction,
    weights: "str | WeightProfile | Mapping[str, Any]" = STRICT_PROFILE,
    date_window_days: int = DEFAULT_DATE_WINDOW_DAYS,
) -> float:
    """Score a single pair without keeping a scorer around."""
    return MatchScorer(weights, date_window_days=date_window_days).score(order, transaction)
