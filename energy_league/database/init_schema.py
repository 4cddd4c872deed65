import logging

from energy_league.database.db_manager import DBManager

logger = logging.getLogger(__name__)


def init_schema(db: DBManager):
    '''Create the league tables if they don't already exist.'''

    # --- EVENTS TABLE ---
    db.execute(
        '''
        CREATE TABLE IF NOT EXISTS events (
            id BIGSERIAL PRIMARY KEY,
            name TEXT NOT NULL,
            requires_activity_approval BOOLEAN NOT NULL DEFAULT FALSE,
            team_based_competition BOOLEAN NOT NULL DEFAULT TRUE,
            multiplier DOUBLE PRECISION NOT NULL DEFAULT 1.0,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
        '''
    )

    # --- TEAMS TABLE ---
    db.execute(
        '''
        CREATE TABLE IF NOT EXISTS teams (
            id BIGSERIAL PRIMARY KEY,
            name TEXT NOT NULL,
            event_id BIGINT REFERENCES events(id) ON DELETE SET NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
        '''
    )

    # --- PARTICIPANTS TABLE ---
    db.execute(
        '''
        CREATE TABLE IF NOT EXISTS participants (
            id BIGSERIAL PRIMARY KEY,
            name TEXT NOT NULL,
            role TEXT NOT NULL DEFAULT 'USER'
                CHECK (role IN ('USER', 'MODERATOR', 'ADMIN')),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
        '''
    )

    # --- TEAM MEMBERSHIP TABLE ---
    db.execute(
        '''
        CREATE TABLE IF NOT EXISTS team_participants (
            team_id BIGINT NOT NULL REFERENCES teams(id) ON DELETE CASCADE,
            participant_id BIGINT NOT NULL
                REFERENCES participants(id) ON DELETE CASCADE,
            role TEXT NOT NULL DEFAULT 'PARTICIPANT'
                CHECK (role IN ('CAPTAIN', 'PARTICIPANT')),
            joined_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            PRIMARY KEY (team_id, participant_id)
        )
        '''
    )

    # --- ACTIVITY TYPES TABLE ---
    db.execute(
        '''
        CREATE TABLE IF NOT EXISTS activity_types (
            id BIGSERIAL PRIMARY KEY,
            name TEXT UNIQUE NOT NULL
        )
        '''
    )

    # --- ACTIVITIES TABLE ---
    db.execute(
        '''
        CREATE TABLE IF NOT EXISTS activities (
            id BIGSERIAL PRIMARY KEY,
            team_id BIGINT NOT NULL REFERENCES teams(id) ON DELETE CASCADE,
            participant_id BIGINT NOT NULL REFERENCES participants(id),
            activity_type_id BIGINT NOT NULL REFERENCES activity_types(id),
            energy INTEGER NOT NULL CHECK (energy >= 0),
            description TEXT DEFAULT NULL,
            duration_minutes INTEGER DEFAULT NULL,
            status TEXT NOT NULL
                CHECK (status IN ('PENDING', 'AUTO_APPROVED', 'APPROVED', 'REJECTED')),
            moderated_by BIGINT REFERENCES participants(id),
            moderated_at TIMESTAMPTZ DEFAULT NULL,
            rejection_reason TEXT DEFAULT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
        '''
    )

    # --- ACTIVITY PHOTOS TABLE ---
    db.execute(
        '''
        CREATE TABLE IF NOT EXISTS activity_photos (
            id BIGSERIAL PRIMARY KEY,
            activity_id BIGINT NOT NULL REFERENCES activities(id) ON DELETE CASCADE,
            photo_url TEXT NOT NULL,
            display_order INTEGER NOT NULL DEFAULT 0
        )
        '''
    )

    # --- ACTIVITY CO-PARTICIPANTS TABLE ---
    db.execute(
        '''
        CREATE TABLE IF NOT EXISTS activity_participants (
            activity_id BIGINT NOT NULL REFERENCES activities(id) ON DELETE CASCADE,
            participant_id BIGINT NOT NULL REFERENCES participants(id),
            PRIMARY KEY (activity_id, participant_id)
        )
        '''
    )

    # --- BONUS TYPES TABLE ---
    db.execute(
        '''
        CREATE TABLE IF NOT EXISTS bonus_types (
            id BIGSERIAL PRIMARY KEY,
            event_id BIGINT NOT NULL REFERENCES events(id) ON DELETE CASCADE,
            name TEXT NOT NULL,
            description TEXT DEFAULT NULL,
            points_adjustment INTEGER NOT NULL,
            kind TEXT NOT NULL CHECK (kind IN ('BONUS', 'PENALTY')),
            is_active BOOLEAN NOT NULL DEFAULT TRUE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
        '''
    )

    # --- ACTIVITY ADJUSTMENTS TABLE ---
    db.execute(
        '''
        CREATE TABLE IF NOT EXISTS activity_adjustments (
            id BIGSERIAL PRIMARY KEY,
            activity_id BIGINT NOT NULL REFERENCES activities(id) ON DELETE CASCADE,
            bonus_type_id BIGINT NOT NULL REFERENCES bonus_types(id),
            moderator_id BIGINT NOT NULL REFERENCES participants(id),
            points_adjustment INTEGER NOT NULL,
            comment TEXT DEFAULT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
        '''
    )

    # --- NOTIFICATIONS TABLE ---
    db.execute(
        '''
        CREATE TABLE IF NOT EXISTS notifications (
            id BIGSERIAL PRIMARY KEY,
            participant_id BIGINT NOT NULL
                REFERENCES participants(id) ON DELETE CASCADE,
            activity_id BIGINT REFERENCES activities(id) ON DELETE SET NULL,
            category TEXT NOT NULL,
            title TEXT NOT NULL,
            message TEXT NOT NULL,
            is_read BOOLEAN NOT NULL DEFAULT FALSE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
        '''
    )

    # --- MIGRATIONS TABLE ---
    db.execute(
        '''
        CREATE TABLE IF NOT EXISTS migrations (
            id BIGSERIAL PRIMARY KEY,
            filename TEXT NOT NULL UNIQUE,
            applied_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
        '''
    )

    # --- INDEXES ---
    db.execute(
        'CREATE INDEX IF NOT EXISTS idx_activities_team_created '
        'ON activities (team_id, created_at)'
    )
    db.execute(
        'CREATE INDEX IF NOT EXISTS idx_adjustments_activity '
        'ON activity_adjustments (activity_id)'
    )
    db.execute(
        'CREATE INDEX IF NOT EXISTS idx_bonus_types_event '
        'ON bonus_types (event_id)'
    )

    logger.info('Schema created/verified.')
