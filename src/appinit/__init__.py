"""Module: appinit

Purpose: Interactive first-run initialization for Django application environments.

Key Components:
- orchestrator: Lock check, configuration stages, migrations, seeders, lock marker
- stages: APP, LOG, DB, Redis, QUEUE, CACHE prompts and verification
- locales: Locale -> timezone table and config accessors
- AppInitMixin: Mixin for AppConfig to register seed hooks
- Management commands: appinit, appinit_status

Architecture:
Settings are written to the env file (.env) one stage at a time.
Database and Redis settings are verified against live servers before they are persisted.
A lock file under the storage root prevents re-initialization.

Related Modules:
- python-dotenv: Env file parsing and reloading
- questionary: Interactive prompts
- filelock: Run guard
"""

__version__ = '0.1.0'

from appinit.mixins import AppInitMixin

__all__ = ['AppInitMixin', '__version__']
