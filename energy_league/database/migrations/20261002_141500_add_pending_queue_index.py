from energy_league.database.db_manager import DBManager


def up(db_manager: DBManager):
    # Moderation queue reads only PENDING rows, newest first
    db_manager.execute(
        '''
        CREATE INDEX IF NOT EXISTS idx_activities_pending_created
        ON activities (created_at DESC, id DESC)
        WHERE status = 'PENDING'
        '''
    )

    # Moderator stats count by (moderated_by, status)
    db_manager.execute(
        '''
        CREATE INDEX IF NOT EXISTS idx_activities_moderated_by
        ON activities (moderated_by, status)
        WHERE moderated_by IS NOT NULL
        '''
    )


def down(db_manager: DBManager):
    db_manager.execute('DROP INDEX IF EXISTS idx_activities_pending_created')
    db_manager.execute('DROP INDEX IF EXISTS idx_activities_moderated_by')
    db_manager.execute(
        "DELETE FROM migrations "
        "WHERE filename = '20261002_141500_add_pending_queue_index.py'"
    )
