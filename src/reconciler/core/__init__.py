"""
Core Utilities Package

Shared primitives used by the matching engine and its collaborators.

This package provides:
- Money and FinancialDate value types with integer-cent precision
- Currency parsing/formatting for CSV input and text output
- The reconciler error hierarchy
- Configuration management for environment-specific settings
"""

from .config import (
    Config,
    Environment,
    MatchingConfig,
    get_config,
    reload_config,
)
from .currency import (
    cents_to_dollars_str,
    format_cents,
    parse_cents,
    parse_dollars_to_cents,
)
from .dates import FinancialDate
from .errors import (
    CollaboratorUnavailable,
    ConfigurationError,
    ConservationError,
    InputError,
    ReconciliationError,
)
from .money import Money

__all__ = [
    # Errors
    "CollaboratorUnavailable",
    # Configuration
    "Config",
    "ConfigurationError",
    "ConservationError",
    "Environment",
    "FinancialDate",
    "InputError",
    "MatchingConfig",
    "Money",
    "ReconciliationError",
    # Currency utilities
    "cents_to_dollars_str",
    "format_cents",
    "get_config",
    "parse_cents",
    "parse_dollars_to_cents",
    "reload_config",
]
