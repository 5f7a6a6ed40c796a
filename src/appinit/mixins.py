"""Module: appinit.mixins

Purpose: Mixin for Django AppConfig to contribute baseline seed data.

Key Components:
- AppInitMixin: Mixin class providing the handle_seed hook
"""

from __future__ import annotations


class AppInitMixin:
    """Mixin for AppConfig to participate in the seeding step of appinit.

    Purpose: Let apps populate baseline records after migrations have run.

    Key Behaviors:
    - handle_seed: Called once per initialization, after migrations
    - Called in INSTALLED_APPS order
    - Failures are fatal (raise exception to abort init before the lock file is written)

    Design:
    Apps inherit from both AppConfig and AppInitMixin.

    Related:
    - orchestrator.run_seeders: Calls handle_seed
    """

    def handle_seed(self) -> None:
        """Populate baseline records for this app.

        Override this method in your AppConfig to add seed logic.
        """
        pass
