#!/usr/bin/env python3
"""
Reconciler Error Hierarchy

Every failure the matching engine and its collaborators report derives from
ReconciliationError. Validation failures also subclass ValueError so callers
that already catch ValueError keep working.
"""


class ReconciliationError(Exception):
    """Base class for all reconciler errors."""


class ConfigurationError(ReconciliationError, ValueError):
    """Invalid weight profile, threshold, or engine option."""


class InputError(ReconciliationError, ValueError):
    """A record is missing a required field or carries a malformed value."""


class CollaboratorUnavailable(ReconciliationError):
    """
    A dependency of the engine (candidate retrieval, persistence) failed.

    Propagated as-is; retry policy belongs to the caller.
    """


class ConservationError(ReconciliationError):
    """A match run would have lost or duplicated a record."""
