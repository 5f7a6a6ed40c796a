"""
Shared pytest fixtures for appinit tests.

This module provides:
- A temporary env file and storage root wired into Django settings
- Scripted fakes for the prompter, database probe and Redis probe
- os.environ restoration (refresh_config loads the env file into it)
"""

import os
import re

import pytest

from appinit.errors import ConnectivityFailure, SchemaCreationFailure

ENV_TEMPLATE = """\
APP_NAME=Example
APP_ENV=local
APP_KEY=
APP_DEBUG=true
APP_URL=http://localhost

# Logging
LOG_CHANNEL=stack
LOG_LEVEL=debug

DB_CONNECTION=mysql
DB_HOST=127.0.0.1
DB_PORT=3306
DB_DATABASE=example
DB_USERNAME=root
DB_PASSWORD=

SESSION_DRIVER=database
"""

KEY_RE = re.compile(r'Enter the ([A-Z_]+)')


class FakePrompter:
    """Answers prompts from a KEY -> answer mapping, falling back to defaults."""

    def __init__(self, answers=None):
        self.answers = dict(answers or {})
        self.asked = []

    def _key(self, question):
        key = KEY_RE.search(question).group(1)
        self.asked.append(key)
        return key

    def ask(self, question, default=''):
        key = self._key(question)
        return str(self.answers.get(key, default))

    def choice(self, question, choices, default=0):
        key = self._key(question)
        options = [str(choice) for choice in choices]
        answer = str(self.answers.get(key, options[default]))
        assert answer in options, f'{answer!r} not offered for {key}'
        return answer

    def secret(self, question):
        key = self._key(question)
        return str(self.answers.get(key, ''))


class FakeDatabase:
    """Records probe calls; fails on the requested step."""

    def __init__(self, fail_connect=False, fail_execute=False, fail_reconnect=False):
        self.fail_connect = fail_connect
        self.fail_execute = fail_execute
        self.fail_reconnect = fail_reconnect
        self.calls = []
        self.configured = []
        self.statements = []

    def configure(self, params):
        self.configured.append(params)
        self.calls.append('configure')

    def connect(self):
        self.calls.append('connect')
        connects = self.calls.count('connect')
        if connects == 1 and self.fail_connect:
            raise ConnectivityFailure('Access denied for user')
        if connects == 2 and self.fail_reconnect:
            raise ConnectivityFailure('Unknown database')

    def quote_name(self, name):
        return f'`{name}`'

    def execute(self, sql):
        self.calls.append('execute')
        self.statements.append(sql)
        if self.fail_execute:
            raise SchemaCreationFailure('Syntax error')


class FakeRedis:
    def __init__(self, fail=False):
        self.fail = fail
        self.pings = []

    def ping(self, host, port, password, db):
        self.pings.append((host, port, password, db))
        if self.fail:
            raise ConnectivityFailure('Connection refused')


@pytest.fixture(autouse=True)
def restore_environ():
    saved = dict(os.environ)
    yield
    os.environ.clear()
    os.environ.update(saved)


@pytest.fixture
def env_file(tmp_path, settings):
    path = tmp_path / '.env'
    path.write_text(ENV_TEMPLATE)
    settings.APPINIT_ENV_FILE = path
    settings.APPINIT_STORAGE_DIR = tmp_path / 'storage'
    return path


@pytest.fixture
def lock_file(env_file, tmp_path):
    return tmp_path / 'storage' / 'app' / 'init.lock'


@pytest.fixture
def prompter():
    return FakePrompter()


@pytest.fixture
def database():
    return FakeDatabase()


@pytest.fixture
def fake_redis():
    return FakeRedis()
