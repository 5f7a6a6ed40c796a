"""Module: appinit.locales

Purpose: Static locale -> timezone lookup and accessors over env configuration.

Key Components:
- get_language_timezones / get_languages: The supported locale table
- get_timezone_with_language: Derive a timezone from a locale with fallback
- get_env / get_language / get_timezone / is_prod: Read values from an explicit config mapping

Design:
Every accessor takes the configuration mapping as an argument (usually the
values parsed from the env file) instead of reading process-wide state.
"""

from __future__ import annotations

from typing import Mapping

from appinit.errors import LookupMiss

DEFAULT_FALLBACK_LOCALE = 'en'

_LANGUAGE_TIMEZONES = {
    'zh': 'Asia/Shanghai',
    'zh-TW': 'Asia/Taipei',
    'en': 'UTC',
    'ja': 'Asia/Tokyo',
    'ko': 'Asia/Seoul',
    'fr': 'Europe/Paris',
    'es': 'Europe/Madrid',
    'it': 'Europe/Rome',
    'de': 'Europe/Berlin',
    'tr': 'Europe/Istanbul',
    'ru': 'Europe/Moscow',
    'pt': 'Europe/Lisbon',
    'vi': 'Asia/Ho_Chi_Minh',
    'id': 'Asia/Jakarta',
    'th': 'Asia/Bangkok',
    'ms': 'Asia/Kuala_Lumpur',
    'ar': 'Asia/Riyadh',
    'hi': 'Asia/Kolkata',
}

_ENVS = ('dev', 'stag', 'prod')


def get_language_timezones() -> dict[str, str]:
    """Return a copy of the locale -> IANA timezone table, in display order."""
    return dict(_LANGUAGE_TIMEZONES)


def get_languages() -> list[str]:
    """Return supported locale codes in display order."""
    return list(_LANGUAGE_TIMEZONES)


def get_timezone_with_language(language: str, fallback_locale: str) -> str:
    """Resolve the timezone for a locale.

    Args:
        language: Locale code to resolve
        fallback_locale: Locale whose timezone is used when language is unknown

    Returns:
        IANA timezone identifier

    Raises:
        LookupMiss: If neither language nor fallback_locale is in the table
    """
    if language in _LANGUAGE_TIMEZONES:
        return _LANGUAGE_TIMEZONES[language]
    try:
        return _LANGUAGE_TIMEZONES[fallback_locale]
    except KeyError:
        raise LookupMiss(
            f'No timezone for locale {language!r} or fallback locale {fallback_locale!r}'
        ) from None


def get_envs() -> list[str]:
    """Return the supported APP_ENV values."""
    return list(_ENVS)


def get_env(config: Mapping[str, str | None]) -> str | None:
    """Get APP_ENV from config."""
    return config.get('APP_ENV')


def get_language(config: Mapping[str, str | None]) -> str | None:
    """Get APP_LOCALE from config."""
    return config.get('APP_LOCALE')


def get_timezone(config: Mapping[str, str | None]) -> str | None:
    """Get APP_TIMEZONE from config."""
    return config.get('APP_TIMEZONE')


def get_fallback_locale(config: Mapping[str, str | None]) -> str:
    """Get APP_FALLBACK_LOCALE from config (defaults to en)."""
    return config.get('APP_FALLBACK_LOCALE') or DEFAULT_FALLBACK_LOCALE


def is_prod(config: Mapping[str, str | None]) -> bool:
    """Check whether config describes a production environment."""
    return get_env(config) == 'prod'
