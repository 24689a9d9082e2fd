"""opcorr errors."""

from __future__ import annotations


class OpcorrError(Exception):
    """Base error for the operation correlation layer."""


class InvalidArgumentError(OpcorrError, ValueError):
    """A required argument (telemetry client, telemetry item) is missing."""
