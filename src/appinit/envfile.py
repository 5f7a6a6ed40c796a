"""Module: appinit.envfile

Purpose: Read, update and reload the persisted environment file (.env).

Key Components:
- read_env: Parse the env file into a dict
- update_env: Replace KEY=value lines in place
- ensure_env_file: Create the env file from .env.example when missing
- refresh_config: Reload the env file into os.environ and notify listeners

Design:
update_env is line-oriented: each key's whole line is substituted (an
`export ` prefix is kept), every other line stays byte-identical and nothing is
reordered. Keys missing from the file are appended at the end. Values are read
back literally, without ${VAR} expansion.
"""

from __future__ import annotations

import logging
import re
import shutil
from pathlib import Path
from typing import Any, Mapping

from dotenv import dotenv_values, load_dotenv

from appinit.signals import env_refreshed

logger = logging.getLogger(__name__)


def format_env_value(value: Any) -> str:
    """Render a value the way it is written to the env file."""
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


def read_env(env_path: Path) -> dict[str, str | None]:
    """Parse the env file literally (no ${VAR} expansion); missing file -> {}."""
    if not env_path.exists():
        return {}
    return dict(dotenv_values(env_path, interpolate=False))


def update_env(env_path: Path, data: Mapping[str, Any]) -> None:
    """Write values into the env file, replacing existing lines per key.

    Args:
        env_path: Path to the env file (created if missing)
        data: Key -> value mapping; values rendered with format_env_value
    """
    content = env_path.read_text(encoding='utf-8') if env_path.exists() else ''
    missing = []

    for key, value in data.items():
        line = f'{key}={format_env_value(value)}'
        pattern = re.compile(
            rf'^([ \t]*(?:export[ \t]+)?){re.escape(key)}[ \t]*=.*$', re.MULTILINE
        )
        content, count = pattern.subn(lambda match: match.group(1) + line, content)
        if not count:
            missing.append(line)

    if missing:
        if content and not content.endswith('\n'):
            content += '\n'
        content += '\n'.join(missing) + '\n'

    env_path.write_text(content, encoding='utf-8')
    logger.debug('appinit: env file updated', extra={'path': str(env_path), 'keys': list(data)})


def ensure_env_file(env_path: Path) -> None:
    """Make sure the env file exists, seeding it from .env.example if available."""
    if env_path.exists():
        return
    env_path.parent.mkdir(parents=True, exist_ok=True)
    example_path = env_path.with_name('.env.example')
    if example_path.exists():
        shutil.copyfile(example_path, env_path)
        logger.info('appinit: env file created from example', extra={'path': str(env_path)})
    else:
        env_path.touch()
        logger.info('appinit: empty env file created', extra={'path': str(env_path)})


def refresh_config(env_path: Path) -> dict[str, str | None]:
    """Reload the env file so this process observes freshly written values.

    Returns:
        Parsed env file values
    """
    load_dotenv(env_path, override=True, interpolate=False)
    values = read_env(env_path)
    env_refreshed.send(sender=refresh_config, path=env_path, values=values)
    return values
