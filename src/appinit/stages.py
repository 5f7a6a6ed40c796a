"""Module: appinit.stages

Purpose: The configuration stages run by the bootstrapper.

Key Components:
- InitContext: Collaborators and current env values shared by the stages
- configure_app / configure_log / configure_db / configure_redis /
  configure_queue / configure_cache: One function per stage
- STAGES: Stage order

Design:
A stage prompts for its fields, verifies them against live services where it
has any, and returns the full set of values to persist. It never writes the env
file itself: raising StageFailure means none of its values are persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from django.core.management.utils import get_random_secret_key

from appinit.locales import (
    get_envs,
    get_fallback_locale,
    get_languages,
    get_timezone_with_language,
    is_prod,
)
from appinit.probes import DB_ENGINES, DatabaseProbe, RedisProbe
from appinit.prompts import Prompter

LOG_CHANNELS = ['single', 'daily', 'slack', 'syslog', 'errorlog', 'custom', 'stack']
LOG_DAILY_DAYS = [7, 14, 30]
REDIS_DBS = list(range(16))


@dataclass
class InitContext:
    """Shared state for one bootstrap run.

    Attributes:
        prompter: Operator prompt surface
        database: Database connectivity probe
        redis: Redis connectivity probe
        env: Values currently in the env file (refreshed after each stage)
        say: Console writer for progress messages
    """

    prompter: Prompter
    database: DatabaseProbe
    redis: RedisProbe
    env: dict[str, str | None] = field(default_factory=dict)
    say: Callable[[str], None] = print


def configure_app(ctx: InitContext) -> dict[str, Any]:
    """Collect APP_* settings and derive APP_KEY and APP_TIMEZONE.

    Raises:
        LookupMiss: If the configured fallback locale has no timezone
    """
    ask, choice = ctx.prompter.ask, ctx.prompter.choice
    languages = get_languages()

    app_name = ask('Enter the APP_NAME:', 'app')
    app_env = choice('Enter the APP_ENV:', get_envs(), 0)
    app_debug = choice('Enter the APP_DEBUG:', ['true', 'false'], 0)
    app_url = ask('Enter the APP_URL:', 'http://localhost')
    app_locale = choice(
        'Enter the APP_LOCALE (the timezone follows the selected locale):', languages, 0
    )
    app_fallback_locale = choice('Enter the APP_FALLBACK_LOCALE:', languages, 0)
    app_faker_locale = choice('Enter the APP_FAKER_LOCALE:', languages, 0)

    return {
        'APP_NAME': app_name,
        'APP_KEY': get_random_secret_key(),
        'APP_ENV': app_env,
        'APP_DEBUG': app_debug,
        'APP_URL': app_url,
        'APP_LOCALE': app_locale,
        'APP_FALLBACK_LOCALE': app_fallback_locale,
        'APP_FAKER_LOCALE': app_faker_locale,
        # fallback is whatever was configured before this run
        'APP_TIMEZONE': get_timezone_with_language(app_locale, get_fallback_locale(ctx.env)),
    }


def configure_log(ctx: InitContext) -> dict[str, Any]:
    """Collect LOG_* settings; LOG_LEVEL is error in prod, debug otherwise."""
    choice = ctx.prompter.choice

    log_channel = choice('Enter the LOG_CHANNEL:', LOG_CHANNELS, 6)
    log_stack = choice('Enter the LOG_STACK:', LOG_CHANNELS, 1)
    log_daily_days = choice('Enter the LOG_DAILY_DAYS:', LOG_DAILY_DAYS, 1)

    return {
        'LOG_CHANNEL': log_channel,
        'LOG_STACK': log_stack,
        'LOG_LEVEL': 'error' if is_prod(ctx.env) else 'debug',
        'LOG_DAILY_DAYS': log_daily_days,
    }


def configure_db(ctx: InitContext) -> dict[str, Any]:
    """Collect database settings, create the schema and verify it is reachable.

    Raises:
        ConnectivityFailure: Server or schema connection failed
        SchemaCreationFailure: CREATE DATABASE failed
    """
    ask, choice = ctx.prompter.ask, ctx.prompter.choice

    db_connection = choice('Enter the DB_CONNECTION:', list(DB_ENGINES), 0)
    db_host = ask('Enter the DB_HOST:', '127.0.0.1')
    db_port = ask('Enter the DB_PORT:', '3306')
    db_database = ask('Enter the DB_DATABASE:', 'app')
    db_username = ask('Enter the DB_USERNAME:', 'root')
    db_password = ctx.prompter.secret('Enter the DB_PASSWORD:')
    db_charset = ask('Enter the DB_CHARSET:', 'utf8mb4')
    db_collation = ask('Enter the DB_COLLATION:', 'utf8mb4_unicode_ci')
    db_prefix = ask('Enter the DB_PREFIX:', '')

    params = {
        'ENGINE': DB_ENGINES[db_connection],
        'HOST': db_host,
        'PORT': db_port,
        'NAME': '',
        'USER': db_username,
        'PASSWORD': db_password,
        'OPTIONS': {'charset': db_charset},
    }

    ctx.say('Connecting to the database server to create the database...')
    ctx.database.configure(params)
    ctx.database.connect()

    ctx.say(f'Creating database: {db_database}...')
    ctx.database.execute(
        f'CREATE DATABASE IF NOT EXISTS {ctx.database.quote_name(db_database)} '
        f'CHARACTER SET {db_charset} COLLATE {db_collation}'
    )
    ctx.say(f"Database '{db_database}' created successfully!")

    ctx.say('Testing connection to the new database...')
    ctx.database.configure({**params, 'NAME': db_database})
    ctx.database.connect()
    ctx.say('Database connection successful!')

    return {
        'DB_CONNECTION': db_connection,
        'DB_HOST': db_host,
        'DB_PORT': db_port,
        'DB_DATABASE': db_database,
        'DB_USERNAME': db_username,
        'DB_PASSWORD': db_password,
        'DB_CHARSET': db_charset,
        'DB_COLLATION': db_collation,
        'DB_PREFIX': db_prefix,
    }


def configure_redis(ctx: InitContext) -> dict[str, Any]:
    """Collect REDIS_* settings and PING the server with them.

    Raises:
        ConnectivityFailure: Redis did not answer
    """
    ask, choice = ctx.prompter.ask, ctx.prompter.choice

    redis_client = choice('Enter the REDIS_CLIENT:', ['redis', 'hiredis'], 0)
    redis_host = ask('Enter the REDIS_HOST:', '127.0.0.1')
    redis_password = ctx.prompter.secret('Enter the REDIS_PASSWORD:')
    redis_port = ask('Enter the REDIS_PORT:', '6379')
    redis_db = choice('Enter the REDIS_DB:', REDIS_DBS, 0)
    redis_cache_db = choice('Enter the REDIS_CACHE_DB:', REDIS_DBS, 1)
    redis_lock_db = choice('Enter the REDIS_LOCK_DB:', REDIS_DBS, 2)
    redis_queue_db = choice('Enter the REDIS_QUEUE_DB:', REDIS_DBS, 3)
    redis_prefix = ask('Enter the REDIS_PREFIX:', '')
    redis_cache_lock_connection = choice(
        'Enter the REDIS_CACHE_LOCK_CONNECTION:', ['default', 'lock'], 1
    )
    redis_queue_connection = choice('Enter the REDIS_QUEUE_CONNECTION:', ['default', 'queue'], 1)

    ctx.say('Testing Redis connection...')
    ctx.redis.ping(redis_host, redis_port, redis_password, redis_db)
    ctx.say('Redis connection successful!')

    return {
        'REDIS_CLIENT': redis_client,
        'REDIS_HOST': redis_host,
        'REDIS_PASSWORD': redis_password,
        'REDIS_PORT': redis_port,
        'REDIS_DB': redis_db,
        'REDIS_CACHE_DB': redis_cache_db,
        'REDIS_LOCK_DB': redis_lock_db,
        'REDIS_QUEUE_DB': redis_queue_db,
        'REDIS_PREFIX': redis_prefix,
        'REDIS_CACHE_LOCK_CONNECTION': redis_cache_lock_connection,
        'REDIS_QUEUE_CONNECTION': redis_queue_connection,
    }


def configure_queue(ctx: InitContext) -> dict[str, Any]:
    """Collect QUEUE_CONNECTION (Redis only)."""
    return {
        'QUEUE_CONNECTION': ctx.prompter.choice('Enter the QUEUE_CONNECTION:', ['redis'], 0),
    }


def configure_cache(ctx: InitContext) -> dict[str, Any]:
    """Collect CACHE_STORE (Redis only) and CACHE_PREFIX."""
    cache_store = ctx.prompter.choice('Enter the CACHE_STORE:', ['redis'], 0)
    cache_prefix = ctx.prompter.ask('Enter the CACHE_PREFIX:', '')
    return {
        'CACHE_STORE': cache_store,
        'CACHE_PREFIX': cache_prefix,
    }


# (name, banner, stage function) in run order
STAGES: list[tuple[str, str, Callable[[InitContext], dict[str, Any]]]] = [
    ('APP', 'Configuring APP...(APP_KEY and APP_TIMEZONE are set automatically)', configure_app),
    ('LOG', 'Configuring LOG...(LOG_LEVEL is set from APP_ENV)', configure_log),
    ('DB', 'Configuring DB...(only MySQL is supported, adjust other databases by hand)', configure_db),
    ('REDIS', 'Configuring Redis...', configure_redis),
    ('QUEUE', 'Configuring QUEUE...(only Redis is supported)', configure_queue),
    ('CACHE', 'Configuring CACHE...(only Redis is supported)', configure_cache),
]
