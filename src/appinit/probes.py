"""Module: appinit.probes

Purpose: Live connectivity checks for candidate database and Redis settings.

Key Components:
- DatabaseProbe: Install candidate settings on a Django connection alias, connect, run DDL
- RedisProbe: PING a Redis server with candidate settings

Design:
Probes raise ConnectivityFailure / SchemaCreationFailure carrying the driver
message. Nothing is retried.
"""

from __future__ import annotations

import logging
from typing import Any

import redis
from django.core.exceptions import ImproperlyConfigured
from django.db import DEFAULT_DB_ALIAS, DatabaseError, connections

from appinit.errors import ConnectivityFailure, SchemaCreationFailure

logger = logging.getLogger(__name__)

DB_ENGINES = {
    'mysql': 'django.db.backends.mysql',
}


class DatabaseProbe:
    """Verify database settings through Django's connection handler.

    Key Behaviors:
    - configure() purges the alias and installs the candidate settings
    - connect() opens the connection (raises ConnectivityFailure)
    - execute() runs a raw statement (raises SchemaCreationFailure)
    - Installed settings remain in place so later commands (migrate) use them
    """

    def __init__(self, alias: str = DEFAULT_DB_ALIAS) -> None:
        self.alias = alias

    def purge(self) -> None:
        """Close and forget the alias connection if one was opened."""
        for conn in connections.all(initialized_only=True):
            if conn.alias == self.alias:
                conn.close()
                del connections[self.alias]

    def configure(self, params: dict[str, Any]) -> None:
        """Purge the alias and install Django-style settings (ENGINE, NAME, HOST...).

        Raises:
            ConnectivityFailure: If Django rejects the settings
        """
        self.purge()
        # other aliases are passed along, Django requires a default entry
        databases = {**connections.settings, self.alias: dict(params)}
        try:
            configured = connections.configure_settings(databases)
        except ImproperlyConfigured as e:
            raise ConnectivityFailure(str(e)) from e
        connections.settings[self.alias] = configured[self.alias]

    def quote_name(self, name: str) -> str:
        """Quote an identifier for the configured backend."""
        return connections[self.alias].ops.quote_name(name)

    def connect(self) -> None:
        try:
            connections[self.alias].ensure_connection()
        except (DatabaseError, ImproperlyConfigured, ValueError) as e:
            raise ConnectivityFailure(str(e)) from e
        logger.info('appinit: database connection established', extra={'alias': self.alias})

    def execute(self, sql: str) -> None:
        try:
            with connections[self.alias].cursor() as cursor:
                cursor.execute(sql)
        except DatabaseError as e:
            raise SchemaCreationFailure(str(e)) from e


class RedisProbe:
    """Verify Redis settings with a single PING."""

    def ping(self, host: str, port: str | int, password: str | None, db: str | int) -> None:
        try:
            client = redis.Redis(
                host=host,
                port=int(port),
                password=password or None,
                db=int(db),
            )
        except ValueError as e:
            raise ConnectivityFailure(str(e)) from e
        try:
            client.ping()
        except redis.RedisError as e:
            raise ConnectivityFailure(str(e)) from e
        finally:
            client.close()
        logger.info('appinit: redis connection established', extra={'host': host, 'db': db})
