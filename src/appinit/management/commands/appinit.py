"""Management command: appinit

Purpose: Interactive first-run initialization (APP, LOG, DB, Redis, QUEUE, CACHE,
migrations, seeders).

Related:
- appinit.orchestrator.run_init: Core implementation
"""

from __future__ import annotations

import sys

from django.core.management.base import BaseCommand

from appinit.errors import AppInitError
from appinit.orchestrator import RunResult, run_init


class Command(BaseCommand):
    """Run the interactive application initialization.

    Key Behaviors:
    - Skips everything if the init lock file exists
    - Prompts for and verifies each configuration stage
    - Runs migrations and seeders, then writes the lock file
    - Exits with status 1 on a failed stage or any appinit error
    """

    help = (
        'Application initialization: configure APP, LOG, DB, Redis, QUEUE, CACHE, '
        'run migrations and seeders'
    )

    def handle(self, *args, **options) -> None:
        try:
            result = run_init(
                say=self.stdout.write,
                error=lambda message: self.stderr.write(self.style.ERROR(message)),
            )
        except AppInitError as e:
            self.stderr.write(self.style.ERROR(f'appinit: FAILED - {e}'))
            sys.exit(1)

        if result is RunResult.STAGE_FAILURE:
            self.stderr.write(self.style.ERROR('appinit: FAILED - initialization stopped'))
            sys.exit(1)
        if result is RunResult.SUCCESS:
            self.stdout.write(self.style.SUCCESS('appinit: completed'))
