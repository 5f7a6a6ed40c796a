"""Module: appinit.errors

Purpose: Exception hierarchy for the initialization workflow.

Key Components:
- AppInitError: Base for every appinit error
- StageFailure: A stage rejected its candidate values (ConnectivityFailure, SchemaCreationFailure)
- LookupMiss: Fallback locale missing from the timezone table
- PromptAborted: Operator cancelled an interactive prompt
- AppInitTimeoutError: Run guard could not be acquired
"""

from __future__ import annotations


class AppInitError(Exception):
    """Base exception for appinit errors."""

    pass


class AppInitTimeoutError(AppInitError):
    """Raised when the run guard lock cannot be acquired in time."""

    pass


class StageFailure(AppInitError):
    """Raised by a stage when its candidate values fail verification.

    The bootstrapper catches it, reports it and stops the run. The failing
    stage's values are never persisted.
    """

    pass


class ConnectivityFailure(StageFailure):
    """Raised when candidate credentials cannot establish a live connection."""

    pass


class SchemaCreationFailure(StageFailure):
    """Raised when CREATE DATABASE fails after a successful bare connection."""

    pass


class LookupMiss(AppInitError, LookupError):
    """Raised when a locale and its fallback are both absent from the timezone table."""

    pass


class PromptAborted(AppInitError):
    """Raised when the operator cancels a prompt."""

    pass
