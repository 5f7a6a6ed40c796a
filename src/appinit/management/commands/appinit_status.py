"""Management command: appinit_status

Purpose: Diagnostic command reporting whether the application has been initialized.

Related:
- appinit.orchestrator: Lock marker location
"""

from __future__ import annotations

from django.core.management.base import BaseCommand

from appinit.orchestrator import get_env_file, get_lock_file, is_initialized


class Command(BaseCommand):
    """Report the init lock file state (read-only).

    Key Behaviors:
    - Prints INITIALIZED with the lock file content, or NOT INITIALIZED
    - Never creates or deletes the lock file
    """

    help = 'Report whether appinit has already run'

    def handle(self, *args, **options) -> None:
        lock_path = get_lock_file()
        self.stdout.write(f'appinit env file: {get_env_file()}')

        if is_initialized():
            self.stdout.write(
                self.style.SUCCESS(f'appinit status: INITIALIZED ({lock_path.read_text().strip()})')
            )
            self.stdout.write(f'Delete {lock_path} to reinitialize')
        else:
            self.stdout.write(self.style.WARNING('appinit status: NOT INITIALIZED'))
