"""Module: appinit.orchestrator

Purpose: Drive the one-time interactive initialization of an application environment.

Key Components:
- RunResult: Outcome of a run (success, already initialized, stage failure)
- get_env_file / get_lock_file: Resolve paths from settings
- run_migrations / run_seeders: Schema and baseline data steps
- run_init: Lock check, stages, migrations, seeders, lock marker

Architecture:
Stages run in a fixed order (appinit.stages.STAGES). Each stage commits its
values to the env file independently; a failing stage stops the run without
rolling back earlier stages. The lock marker file gates re-execution and is
only written after everything succeeded. A filelock guard keeps two concurrent
invocations from interleaving.

Related Modules:
- appinit.stages: Stage prompts and verification
- appinit.envfile: Env file persistence
- filelock: File-based run guard
"""

from __future__ import annotations

import enum
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from django.apps import apps
from django.conf import settings
from django.core import management
from django.db import DEFAULT_DB_ALIAS
from django.utils import timezone
from filelock import FileLock, Timeout

from appinit.envfile import ensure_env_file, read_env, refresh_config, update_env
from appinit.errors import AppInitError, AppInitTimeoutError, StageFailure
from appinit.mixins import AppInitMixin
from appinit.probes import DatabaseProbe, RedisProbe
from appinit.prompts import Prompter
from appinit.stages import STAGES, InitContext

if TYPE_CHECKING:
    from django.apps import AppConfig

logger = logging.getLogger(__name__)


class RunResult(enum.Enum):
    SUCCESS = 'success'
    ALREADY_INITIALIZED = 'already-initialized'
    STAGE_FAILURE = 'stage-failure'


def _get_base_dir() -> Path:
    """Get BASE_DIR from settings (defaults to cwd)."""
    return Path(getattr(settings, 'BASE_DIR', Path.cwd()))


def _get_timeout() -> int:
    """Get guard lock timeout from settings."""
    return getattr(settings, 'APPINIT_TIMEOUT_SEC', 300)


def _get_db_alias() -> str:
    """Get database alias from settings."""
    return getattr(settings, 'APPINIT_DB_ALIAS', DEFAULT_DB_ALIAS)


def _get_seed_fixtures() -> list[str]:
    """Get seed fixture names from settings."""
    return list(getattr(settings, 'APPINIT_SEED_FIXTURES', []))


def get_env_file() -> Path:
    """Get the env file path (APPINIT_ENV_FILE, defaults to BASE_DIR/.env)."""
    return Path(getattr(settings, 'APPINIT_ENV_FILE', _get_base_dir() / '.env'))


def get_lock_file() -> Path:
    """Get the lock marker path under the storage root."""
    storage_dir = Path(getattr(settings, 'APPINIT_STORAGE_DIR', _get_base_dir() / 'storage'))
    return storage_dir / 'app' / 'init.lock'


def is_initialized() -> bool:
    """Check if the lock marker exists."""
    return get_lock_file().exists()


def _write_lock_file(lock_path: Path) -> None:
    """Write the lock marker with the current local time (TIME_ZONE when USE_TZ)."""
    now = timezone.now()
    if timezone.is_aware(now):
        now = timezone.localtime(now)
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    lock_path.write_text(f"Initialized at {now.strftime('%Y-%m-%d %H:%M:%S')}")


def _get_apps_with_mixin() -> list[AppConfig]:
    """Get all app configs that implement AppInitMixin in INSTALLED_APPS order."""
    result = []
    for app_config in apps.get_app_configs():
        if isinstance(app_config, AppInitMixin):
            result.append(app_config)
    return result


def run_migrations() -> None:
    """Apply all pending migrations without prompting."""
    logger.info('appinit: running migrations')
    management.call_command('migrate', '--noinput', database=_get_db_alias(), verbosity=1)


def run_seeders() -> None:
    """Populate baseline data.

    Key Behaviors:
    - Loads APPINIT_SEED_FIXTURES (if any) with loaddata
    - Calls handle_seed on all apps with AppInitMixin, in INSTALLED_APPS order
    """
    fixtures = _get_seed_fixtures()
    if fixtures:
        logger.info('appinit: loading seed fixtures', extra={'fixtures': fixtures})
        management.call_command('loaddata', *fixtures, database=_get_db_alias(), verbosity=1)

    for app_config in _get_apps_with_mixin():
        logger.info('appinit: running seed hook', extra={'app': app_config.name})
        app_config.handle_seed()


def run_init(
    prompter: Prompter | None = None,
    database: DatabaseProbe | None = None,
    redis: RedisProbe | None = None,
    say: Callable[[str], None] = print,
    error: Callable[[str], None] = print,
) -> RunResult:
    """Run the interactive initialization workflow once.

    Purpose: Configure the env file, verify services, migrate, seed and lock.

    Key Behaviors:
    - Returns ALREADY_INITIALIZED without side effects if the lock marker exists
    - Runs App, Log, DB, Redis, Queue, Cache stages in order
    - A StageFailure is reported and stops the run (STAGE_FAILURE); values
      persisted by earlier stages stay written
    - Runs migrations then seeders, then writes the lock marker

    Args:
        prompter: Operator prompts (defaults to questionary prompts)
        database: Database probe (defaults to the APPINIT_DB_ALIAS connection)
        redis: Redis probe
        say: Writer for progress messages
        error: Writer for failure messages

    Raises:
        AppInitTimeoutError: If another run holds the guard lock past the timeout
        AppInitError: If migrations or seeders fail, or a prompt is cancelled
        LookupMiss: If the fallback locale has no timezone entry
    """
    lock_path = get_lock_file()
    if lock_path.exists():
        say(f'If you want to reinitialize, please delete {lock_path}')
        logger.info('appinit: already initialized', extra={'lock_file': str(lock_path)})
        return RunResult.ALREADY_INITIALIZED

    timeout = _get_timeout()
    guard_path = lock_path.with_name(lock_path.name + '.guard')
    guard_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with FileLock(guard_path, timeout=timeout):
            # Double-check marker inside guard (another run may have completed)
            if lock_path.exists():
                say(f'If you want to reinitialize, please delete {lock_path}')
                return RunResult.ALREADY_INITIALIZED
            return _run_locked(
                lock_path,
                InitContext(
                    prompter=prompter or Prompter(),
                    database=database or DatabaseProbe(_get_db_alias()),
                    redis=redis or RedisProbe(),
                    say=say,
                ),
                error,
            )
    except Timeout:
        raise AppInitTimeoutError(
            f'Guard lock acquisition timed out (timeout={timeout}s)'
        )


def _run_locked(lock_path: Path, ctx: InitContext, error: Callable[[str], None]) -> RunResult:
    env_path = get_env_file()
    ensure_env_file(env_path)
    ctx.env = read_env(env_path)

    logger.info('appinit: starting initialization', extra={'env_file': str(env_path)})

    for name, banner, configure in STAGES:
        ctx.say(banner)
        try:
            values = configure(ctx)
        except StageFailure as e:
            error(f'Configuring {name} failed: {e}')
            logger.error('appinit: stage failed', extra={'stage': name, 'error': str(e)})
            return RunResult.STAGE_FAILURE

        update_env(env_path, values)
        ctx.env = refresh_config(env_path)
        logger.info('appinit: stage completed', extra={'stage': name, 'keys': list(values)})
        ctx.say(f'Configuring {name} successful!')

    try:
        ctx.say('Running Migrations...')
        run_migrations()
        ctx.say('Running Migrations successful!')

        ctx.say('Running Seeders...')
        run_seeders()
        ctx.say('Running Seeders successful!')
    except Exception as e:
        logger.exception('appinit: migrations or seeders failed')
        raise AppInitError(f'Migrations or seeders failed: {e}') from e

    _write_lock_file(lock_path)
    ctx.say('Initialization lock file created successfully!')
    logger.info('appinit: initialization completed', extra={'lock_file': str(lock_path)})

    ctx.say('Application Initialization successfully!')
    return RunResult.SUCCESS
