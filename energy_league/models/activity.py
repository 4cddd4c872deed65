from datetime import datetime
from typing import Any, Iterable, Optional, cast

from energy_league.database.db_manager import DBManager
from energy_league.models.base import BaseModel

# Photos and extra participants ride along as arrays so one query loads an activity
SELECT_WITH_EXTRAS = (
    'SELECT a.*, '
    'COALESCE((SELECT array_agg(p.photo_url ORDER BY p.display_order) '
    "FROM activity_photos p WHERE p.activity_id = a.id), '{}') AS photo_urls, "
    'COALESCE((SELECT array_agg(ap.participant_id ORDER BY ap.participant_id) '
    "FROM activity_participants ap WHERE ap.activity_id = a.id), '{}') "
    'AS participant_ids '
    'FROM activities a'
)


class ActivityModel(BaseModel):
    table = 'activities'

    @classmethod
    def get_with_extras(
        cls, activity_id: int, db: Optional[DBManager] = None
    ) -> Optional[dict[str, Any]]:
        with cls.session(db) as conn:
            row = conn.fetchone(f'{SELECT_WITH_EXTRAS} WHERE a.id = %s', (activity_id,))
        return cast(Optional[dict[str, Any]], row)

    @classmethod
    def insert_with_extras(
        cls,
        values: dict[str, Any],
        photo_urls: list[str],
        participant_ids: list[int],
    ) -> dict[str, Any]:
        '''Insert the activity, its photos and co-participants in one transaction.'''
        with DBManager() as db:
            row = cls.create(values, db=db)
            activity_id = row['id']
            db.executemany(
                'INSERT INTO activity_photos (activity_id, photo_url, display_order) '
                'VALUES (%s, %s, %s)',
                [(activity_id, url, order) for order, url in enumerate(photo_urls)],
            )
            db.executemany(
                'INSERT INTO activity_participants (activity_id, participant_id) '
                'VALUES (%s, %s)',
                [(activity_id, pid) for pid in participant_ids],
            )
        return {**row, 'photo_urls': photo_urls, 'participant_ids': participant_ids}

    @classmethod
    def transition_if_pending(
        cls,
        activity_id: int,
        status: str,
        moderator_id: int,
        moderated_at: datetime,
        rejection_reason: Optional[str],
        db: DBManager,
    ) -> Optional[dict[str, Any]]:
        '''
        Compare-and-set on status. The row lock taken by UPDATE makes a
        concurrent second verdict re-check the WHERE clause and match nothing.
        '''
        row = db.fetchone(
            'UPDATE activities '
            'SET status = %s, moderated_by = %s, moderated_at = %s, '
            'rejection_reason = %s '
            "WHERE id = %s AND status = 'PENDING' "
            'RETURNING *',
            (status, moderator_id, moderated_at, rejection_reason, activity_id),
        )
        return cast(Optional[dict[str, Any]], row)

    @classmethod
    def list_pending(
        cls,
        event_id: Optional[int],
        team_id: Optional[int],
        limit: int,
        offset: int,
    ) -> list[dict[str, Any]]:
        clauses = ["a.status = 'PENDING'"]
        params: list[Any] = []
        if event_id is not None:
            clauses.append('a.team_id IN (SELECT id FROM teams WHERE event_id = %s)')
            params.append(event_id)
        if team_id is not None:
            clauses.append('a.team_id = %s')
            params.append(team_id)
        sql = (
            f'{SELECT_WITH_EXTRAS} WHERE {" AND ".join(clauses)} '
            'ORDER BY a.created_at DESC, a.id DESC LIMIT %s OFFSET %s'
        )
        with DBManager() as db:
            rows = db.fetchall(sql, (*params, limit, offset))
        return cast(list[dict[str, Any]], rows)

    @classmethod
    def list_for_team(cls, team_id: int) -> list[dict[str, Any]]:
        with DBManager() as db:
            rows = db.fetchall(
                f'{SELECT_WITH_EXTRAS} WHERE a.team_id = %s '
                'ORDER BY a.created_at DESC, a.id DESC',
                (team_id,),
            )
        return cast(list[dict[str, Any]], rows)

    @classmethod
    def list_by_status(
        cls,
        statuses: Iterable[str],
        event_id: Optional[int] = None,
        team_id: Optional[int] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        '''Activities in any of `statuses`, newest first. A None limit means all.'''
        clauses = ['a.status = ANY(%s)']
        params: list[Any] = [sorted(statuses)]
        if event_id is not None:
            clauses.append('a.team_id IN (SELECT id FROM teams WHERE event_id = %s)')
            params.append(event_id)
        if team_id is not None:
            clauses.append('a.team_id = %s')
            params.append(team_id)
        sql = (
            f'{SELECT_WITH_EXTRAS} WHERE {" AND ".join(clauses)} '
            'ORDER BY a.created_at DESC, a.id DESC LIMIT %s OFFSET %s'
        )
        with DBManager() as db:
            rows = db.fetchall(sql, (*params, limit, offset))
        return cast(list[dict[str, Any]], rows)

    @classmethod
    def count_by_status(cls, status: str) -> int:
        return cls.count('status = %s', (status,))

    @classmethod
    def count_moderated_by(cls, moderator_id: int, status: str) -> int:
        return cls.count('moderated_by = %s AND status = %s', (moderator_id, status))
