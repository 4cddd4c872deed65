import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

import pendulum
from dotenv import load_dotenv

from energy_league.activities.errors import ValidationError
from energy_league.utils.constants import (
    DEFAULT_LEAGUE_TIMEZONE,
    DEFAULT_MAX_PHOTOS_PER_ACTIVITY,
    DEFAULT_NOTIFICATION_SINK,
    NOTIFICATION_SINKS,
)

logger = logging.getLogger(__name__)

ROOT_MARKERS = ('pyproject.toml', '.git')


def project_root(start: Optional[Path] = None) -> Path:
    '''Walk up from `start` until a directory holding a root marker is found.'''
    here = (start or Path(__file__)).resolve()
    current = here if here.is_dir() else here.parent
    for candidate in (current, *current.parents):
        if any((candidate / m).exists() for m in ROOT_MARKERS):
            return candidate
    return current


def env_filename() -> str:
    '''ENV_FILE wins; otherwise ENV=prod picks .env.prod, anything else .env.local.'''
    explicit = os.getenv('ENV_FILE')
    if explicit:
        return explicit
    env = (os.getenv('ENV') or os.getenv('PYTHON_ENV') or 'local').lower()
    return '.env.prod' if env in {'prod', 'production'} else '.env.local'


def load_env(override: bool = False) -> Optional[Path]:
    '''Load the first env file that exists; returns its path or None.'''
    root = project_root()
    target = Path(env_filename())
    if not target.is_absolute():
        target = root / target

    for path in (target, root / '.env'):
        if path.exists():
            load_dotenv(dotenv_path=path, override=override)
            logger.debug(f'Loaded environment from {path}')
            return path
    return None


def _int_env(name: str, default: int, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ValidationError(f'{name} must be an integer, got {raw!r}') from e
    if value < minimum:
        raise ValidationError(f'{name} must be >= {minimum}, got {value}')
    return value


@dataclass(frozen=True)
class Settings:
    database_url: Optional[str]
    db_pool_min_size: int
    db_pool_max_size: int
    league_timezone: str
    max_photos_per_activity: int
    log_level: str
    notification_sink: str = DEFAULT_NOTIFICATION_SINK

    @classmethod
    def from_env(cls) -> 'Settings':
        tz_name = os.getenv('LEAGUE_TIMEZONE') or DEFAULT_LEAGUE_TIMEZONE
        try:
            pendulum.timezone(tz_name)
        except Exception as e:
            raise ValidationError(f'Unknown LEAGUE_TIMEZONE {tz_name!r}') from e

        min_size = _int_env('DB_POOL_MIN_SIZE', 1, minimum=1)
        max_size = _int_env('DB_POOL_MAX_SIZE', 10, minimum=1)
        if max_size < min_size:
            raise ValidationError('DB_POOL_MAX_SIZE must be >= DB_POOL_MIN_SIZE')

        sink = (os.getenv('NOTIFICATION_SINK') or DEFAULT_NOTIFICATION_SINK).lower()
        if sink not in NOTIFICATION_SINKS:
            raise ValidationError(
                f'NOTIFICATION_SINK must be one of {", ".join(NOTIFICATION_SINKS)}, '
                f'got {sink!r}'
            )

        return cls(
            database_url=os.getenv('DATABASE_URL'),
            db_pool_min_size=min_size,
            db_pool_max_size=max_size,
            league_timezone=tz_name,
            max_photos_per_activity=_int_env(
                'MAX_PHOTOS_PER_ACTIVITY', DEFAULT_MAX_PHOTOS_PER_ACTIVITY
            ),
            log_level=(os.getenv('LOG_LEVEL') or 'INFO').upper(),
            notification_sink=sink,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
