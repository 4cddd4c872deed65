import logging
import os
from datetime import datetime
from typing import Optional

logger = logging.getLogger(__name__)

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
MIGRATIONS_DIR = os.path.join(BASE_DIR, 'migrations')

TEMPLATE = '''from energy_league.database.db_manager import DBManager


def up(db_manager: DBManager):
    # Apply this migration.
    pass


def down(db_manager: DBManager):
    # Rollback this migration.
    db_manager.execute(
        "DELETE FROM migrations WHERE filename = '{filename}'"
    )
'''


def migration_filename(name: str, now: Optional[datetime] = None) -> str:
    timestamp = (now or datetime.now()).strftime('%Y%m%d_%H%M%S')
    return f'{timestamp}_{name.strip().lower().replace(" ", "_")}.py'


def create_migration(
    name: str, migrations_dir: str = MIGRATIONS_DIR, now: Optional[datetime] = None
) -> str:
    '''Create a new migration file with a timestamp-based name.'''
    if not name.strip():
        raise ValueError('migration name must not be blank')

    filename = migration_filename(name, now)
    filepath = os.path.join(migrations_dir, filename)
    os.makedirs(migrations_dir, exist_ok=True)

    with open(filepath, 'w', encoding='utf-8') as f:
        f.write(TEMPLATE.format(filename=filename))

    logger.info(f'Created new migration file: {filepath}')
    return filepath


if __name__ == '__main__':
    note = input('Enter a short note for this migration: ')
    create_migration(note)
