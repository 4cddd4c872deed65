import pytest

from energy_league.activities.errors import ValidationError
from energy_league.utils import env as env_module
from energy_league.utils.env import Settings, env_filename, load_env

ENV_VARS = (
    'DATABASE_URL',
    'DB_POOL_MIN_SIZE',
    'DB_POOL_MAX_SIZE',
    'LEAGUE_TIMEZONE',
    'MAX_PHOTOS_PER_ACTIVITY',
    'LOG_LEVEL',
    'NOTIFICATION_SINK',
    'ENV',
    'ENV_FILE',
    'PYTHON_ENV',
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        # setenv first so values loaded from .env files are undone after the test
        monkeypatch.setenv(name, '')
        monkeypatch.delenv(name)


def test_defaults():
    settings = Settings.from_env()
    assert settings.database_url is None
    assert settings.db_pool_min_size == 1
    assert settings.db_pool_max_size == 10
    assert settings.league_timezone == 'UTC'
    assert settings.max_photos_per_activity == 10
    assert settings.log_level == 'INFO'
    assert settings.notification_sink == 'database'


def test_values_from_environment(monkeypatch):
    monkeypatch.setenv('DATABASE_URL', 'postgresql://league@localhost/league')
    monkeypatch.setenv('LEAGUE_TIMEZONE', 'Europe/Moscow')
    monkeypatch.setenv('MAX_PHOTOS_PER_ACTIVITY', '4')
    monkeypatch.setenv('LOG_LEVEL', 'debug')

    settings = Settings.from_env()

    assert settings.database_url.endswith('/league')
    assert settings.league_timezone == 'Europe/Moscow'
    assert settings.max_photos_per_activity == 4
    assert settings.log_level == 'DEBUG'


@pytest.mark.parametrize(
    'name, value',
    [
        ('LEAGUE_TIMEZONE', 'Mars/Olympus'),
        ('DB_POOL_MIN_SIZE', 'many'),
        ('DB_POOL_MIN_SIZE', '0'),
        ('MAX_PHOTOS_PER_ACTIVITY', '-1'),
        ('NOTIFICATION_SINK', 'pigeon'),
    ],
)
def test_invalid_values(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValidationError):
        Settings.from_env()


def test_notification_sink_is_case_insensitive(monkeypatch):
    monkeypatch.setenv('NOTIFICATION_SINK', 'LOG')
    assert Settings.from_env().notification_sink == 'log'


def test_pool_bounds(monkeypatch):
    monkeypatch.setenv('DB_POOL_MIN_SIZE', '5')
    monkeypatch.setenv('DB_POOL_MAX_SIZE', '2')
    with pytest.raises(ValidationError):
        Settings.from_env()


def test_env_filename(monkeypatch):
    assert env_filename() == '.env.local'
    monkeypatch.setenv('ENV', 'prod')
    assert env_filename() == '.env.prod'
    monkeypatch.setenv('ENV_FILE', 'custom.env')
    assert env_filename() == 'custom.env'


def test_load_env_reads_file(tmp_path, monkeypatch):
    (tmp_path / 'pyproject.toml').write_text('')
    (tmp_path / '.env.local').write_text('LEAGUE_TIMEZONE=Asia/Tokyo\n')
    monkeypatch.setattr(env_module, 'project_root', lambda start=None: tmp_path)

    loaded = load_env()

    assert loaded == tmp_path / '.env.local'
    assert Settings.from_env().league_timezone == 'Asia/Tokyo'


def test_load_env_falls_back_to_dotenv(tmp_path, monkeypatch):
    (tmp_path / '.env').write_text('LOG_LEVEL=warning\n')
    monkeypatch.setattr(env_module, 'project_root', lambda start=None: tmp_path)

    assert load_env() == tmp_path / '.env'
    assert Settings.from_env().log_level == 'WARNING'


def test_load_env_without_files(tmp_path, monkeypatch):
    monkeypatch.setattr(env_module, 'project_root', lambda start=None: tmp_path)
    assert load_env() is None
