"""
Tests for the initialization workflow.

Tests verify:
- An existing lock file short-circuits the run without side effects
- A failed stage persists nothing of its own and stops later stages
- A successful run writes every stage, migrates, seeds and locks
- Migration and seeder steps call the expected management commands
- The lock marker timestamp is rendered in the configured time zone
"""

from datetime import datetime
from datetime import timezone as dt_timezone
from unittest.mock import Mock, call, patch

import pytest

from appinit import orchestrator
from appinit.errors import AppInitError
from appinit.mixins import AppInitMixin
from appinit.orchestrator import RunResult, run_init, run_migrations, run_seeders
from tests.conftest import ENV_TEMPLATE, FakeDatabase, FakePrompter, FakeRedis


@pytest.fixture
def steps(monkeypatch):
    manager = Mock()
    monkeypatch.setattr(orchestrator, 'run_migrations', manager.migrate)
    monkeypatch.setattr(orchestrator, 'run_seeders', manager.seed)
    return manager


def db_lines(text):
    return [line for line in text.splitlines() if line.startswith('DB_')]


class TestAlreadyInitialized:

    def test_lock_file_short_circuits(self, env_file, lock_file, steps):
        lock_file.parent.mkdir(parents=True)
        lock_file.write_text('Initialized at 2026-01-01 00:00:00')
        prompter, database, redis = FakePrompter(), FakeDatabase(), FakeRedis()
        messages = []

        result = run_init(prompter, database, redis, say=messages.append)

        assert result is RunResult.ALREADY_INITIALIZED
        assert env_file.read_text() == ENV_TEMPLATE
        assert prompter.asked == []
        assert database.calls == []
        assert redis.pings == []
        assert steps.mock_calls == []
        assert not lock_file.with_name('init.lock.guard').exists()
        assert messages == [f'If you want to reinitialize, please delete {lock_file}']


class TestStageFailure:

    def test_database_failure_stops_run(self, env_file, lock_file, steps):
        prompter = FakePrompter({'APP_ENV': 'stag', 'DB_HOST': 'db.invalid'})
        redis = FakeRedis()
        errors = []

        result = run_init(
            prompter, FakeDatabase(fail_connect=True), redis, say=lambda _: None, error=errors.append
        )

        assert result is RunResult.STAGE_FAILURE
        content = env_file.read_text()
        assert db_lines(content) == db_lines(ENV_TEMPLATE)
        # earlier stages stay written
        assert 'APP_ENV=stag\n' in content
        assert 'LOG_STACK=daily\n' in content
        assert not any(key.startswith(('REDIS_', 'QUEUE_', 'CACHE_')) for key in prompter.asked)
        assert redis.pings == []
        assert 'REDIS_HOST' not in content
        assert steps.mock_calls == []
        assert not lock_file.exists()
        assert errors == ['Configuring DB failed: Access denied for user']

    def test_schema_creation_failure_stops_run(self, env_file, lock_file, steps):
        result = run_init(
            FakePrompter(), FakeDatabase(fail_execute=True), FakeRedis(), say=lambda _: None, error=lambda _: None
        )

        assert result is RunResult.STAGE_FAILURE
        assert db_lines(env_file.read_text()) == db_lines(ENV_TEMPLATE)
        assert not lock_file.exists()

    def test_redis_failure_keeps_database_settings(self, env_file, lock_file, steps):
        prompter = FakePrompter({'DB_DATABASE': 'testdb'})

        result = run_init(
            prompter, FakeDatabase(), FakeRedis(fail=True), say=lambda _: None, error=lambda _: None
        )

        assert result is RunResult.STAGE_FAILURE
        content = env_file.read_text()
        assert 'DB_DATABASE=testdb\n' in content
        assert 'REDIS_HOST' not in content
        assert 'QUEUE_CONNECTION' not in content
        assert steps.mock_calls == []
        assert not lock_file.exists()


class TestSuccessfulRun:

    def test_end_to_end(self, env_file, lock_file, steps):
        prompter = FakePrompter({'APP_ENV': 'dev', 'DB_DATABASE': 'testdb'})
        database, redis = FakeDatabase(), FakeRedis()
        messages = []

        result = run_init(prompter, database, redis, say=messages.append)

        assert result is RunResult.SUCCESS
        content = env_file.read_text()
        for line in ('APP_ENV=dev', 'DB_DATABASE=testdb', 'QUEUE_CONNECTION=redis', 'CACHE_STORE=redis'):
            assert f'{line}\n' in content
        assert content.count('APP_ENV=') == 1
        assert 'SESSION_DRIVER=database\n' in content
        assert steps.mock_calls == [call.migrate(), call.seed()]
        assert lock_file.read_text().startswith('Initialized at ')
        assert len(redis.pings) == 1
        assert messages[-1] == 'Application Initialization successfully!'

    def test_log_level_follows_new_app_env(self, env_file, steps):
        run_init(FakePrompter({'APP_ENV': 'prod'}), FakeDatabase(), FakeRedis(), say=lambda _: None)

        assert 'LOG_LEVEL=error\n' in env_file.read_text()

    def test_second_run_is_skipped(self, env_file, steps):
        run_init(FakePrompter(), FakeDatabase(), FakeRedis(), say=lambda _: None)
        written = env_file.read_text()
        prompter = FakePrompter()

        result = run_init(prompter, FakeDatabase(), FakeRedis(), say=lambda _: None)

        assert result is RunResult.ALREADY_INITIALIZED
        assert env_file.read_text() == written
        assert prompter.asked == []
        assert steps.migrate.call_count == 1

    def test_missing_env_file_created_from_example(self, env_file, steps):
        env_file.unlink()
        (env_file.parent / '.env.example').write_text('APP_ENV=local\nCACHE_STORE=database\n')

        run_init(FakePrompter(), FakeDatabase(), FakeRedis(), say=lambda _: None)

        content = env_file.read_text()
        assert content.startswith('APP_ENV=dev\nCACHE_STORE=redis\n')

    def test_migration_failure_raises_without_lock(self, env_file, lock_file, steps):
        steps.migrate.side_effect = RuntimeError('table exists')

        with pytest.raises(AppInitError, match='table exists'):
            run_init(FakePrompter(), FakeDatabase(), FakeRedis(), say=lambda _: None)

        assert not lock_file.exists()
        assert steps.seed.call_count == 0


class SeedingApp(AppInitMixin):

    def __init__(self, name):
        self.name = name
        self.handle_seed = Mock()


class TestMigrationsAndSeeders:

    def test_run_migrations(self):
        with patch('appinit.orchestrator.management.call_command') as call_command:
            run_migrations()

        call_command.assert_called_once_with('migrate', '--noinput', database='default', verbosity=1)

    def test_run_seeders_without_fixtures(self):
        apps = [SeedingApp('billing'), SeedingApp('accounts')]
        with patch('appinit.orchestrator.management.call_command') as call_command, \
                patch('appinit.orchestrator._get_apps_with_mixin', return_value=apps):
            run_seeders()

        call_command.assert_not_called()
        for app in apps:
            app.handle_seed.assert_called_once_with()

    def test_run_seeders_loads_fixtures(self, settings):
        settings.APPINIT_SEED_FIXTURES = ['roles', 'admin_user']
        with patch('appinit.orchestrator.management.call_command') as call_command, \
                patch('appinit.orchestrator._get_apps_with_mixin', return_value=[]):
            run_seeders()

        call_command.assert_called_once_with(
            'loaddata', 'roles', 'admin_user', database='default', verbosity=1
        )

    def test_apps_with_mixin_keep_installed_order(self):
        first, second = SeedingApp('first'), SeedingApp('second')
        plain = Mock(spec=['name'])
        with patch('appinit.orchestrator.apps.get_app_configs', return_value=[first, plain, second]):
            assert orchestrator._get_apps_with_mixin() == [first, second]


class TestPaths:

    def test_defaults_use_base_dir(self, settings, tmp_path):
        settings.BASE_DIR = tmp_path
        assert orchestrator.get_env_file() == tmp_path / '.env'
        assert orchestrator.get_lock_file() == tmp_path / 'storage' / 'app' / 'init.lock'


class TestLockFile:

    def test_timestamp_uses_configured_time_zone(self, settings, tmp_path):
        settings.USE_TZ = True
        settings.TIME_ZONE = 'Asia/Tokyo'
        lock_path = tmp_path / 'storage' / 'app' / 'init.lock'
        utc_now = datetime(2026, 1, 1, 0, 30, tzinfo=dt_timezone.utc)

        with patch('appinit.orchestrator.timezone.now', return_value=utc_now):
            orchestrator._write_lock_file(lock_path)

        assert lock_path.read_text() == 'Initialized at 2026-01-01 09:30:00'

    def test_naive_time_written_as_is(self, settings, tmp_path):
        settings.USE_TZ = False
        lock_path = tmp_path / 'init.lock'

        with patch('appinit.orchestrator.timezone.now', return_value=datetime(2026, 1, 1, 8, 5, 7)):
            orchestrator._write_lock_file(lock_path)

        assert lock_path.read_text() == 'Initialized at 2026-01-01 08:05:07'
