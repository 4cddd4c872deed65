import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Optional, Sequence

from energy_league.activities.records import (
    Activity,
    ActivityAdjustment,
    ActivityDraft,
    ActivityStatus,
    AdjustmentDraft,
    Approved,
    AutoApproved,
    ModerationState,
    Pending,
    Rejected,
    Verdict,
)
from energy_league.database.db_manager import DBManager
from energy_league.models.activity import ActivityModel
from energy_league.models.activity_adjustment import AdjustmentModel

logger = logging.getLogger(__name__)


def _aware(ts: datetime) -> datetime:
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=timezone.utc)


def state_from_row(row: dict[str, Any]) -> ModerationState:
    status = ActivityStatus(row['status'])
    if status is ActivityStatus.PENDING:
        return Pending()
    if status is ActivityStatus.AUTO_APPROVED:
        return AutoApproved()
    if status is ActivityStatus.APPROVED:
        return Approved(
            moderator_id=row['moderated_by'],
            moderated_at=_aware(row['moderated_at']),
        )
    return Rejected(
        moderator_id=row['moderated_by'],
        moderated_at=_aware(row['moderated_at']),
        reason=row.get('rejection_reason'),
    )


def activity_from_row(row: dict[str, Any]) -> Activity:
    return Activity(
        id=row['id'],
        team_id=row['team_id'],
        participant_id=row['participant_id'],
        activity_type_id=row['activity_type_id'],
        energy=int(row['energy']),
        state=state_from_row(row),
        created_at=_aware(row['created_at']),
        description=row.get('description'),
        duration_minutes=row.get('duration_minutes'),
        photo_urls=tuple(row.get('photo_urls') or ()),
        participant_ids=frozenset(row.get('participant_ids') or ()),
    )


def adjustment_from_row(row: dict[str, Any]) -> ActivityAdjustment:
    return ActivityAdjustment(
        id=row['id'],
        activity_id=row['activity_id'],
        bonus_type_id=row['bonus_type_id'],
        moderator_id=row['moderator_id'],
        points_adjustment=int(row['points_adjustment']),
        created_at=_aware(row['created_at']),
        comment=row.get('comment'),
    )


class PostgresActivityStore:
    '''ActivityStore backed by the activities/activity_adjustments tables.'''

    def get_activity(self, activity_id: int) -> Optional[Activity]:
        row = ActivityModel.get_with_extras(activity_id)
        return activity_from_row(row) if row else None

    def add_activity(self, draft: ActivityDraft) -> Activity:
        row = ActivityModel.insert_with_extras(
            {
                'team_id': draft.team_id,
                'participant_id': draft.participant_id,
                'activity_type_id': draft.activity_type_id,
                'energy': draft.energy,
                'description': draft.description,
                'duration_minutes': draft.duration_minutes,
                'status': draft.state.status.value,
            },
            photo_urls=list(draft.photo_urls),
            participant_ids=sorted(draft.participant_ids),
        )
        return activity_from_row(row)

    def apply_verdict(
        self,
        activity_id: int,
        verdict: Verdict,
        adjustments: Sequence[AdjustmentDraft],
    ) -> Optional[Activity]:
        with DBManager() as db:
            row = ActivityModel.transition_if_pending(
                activity_id,
                status=verdict.status.value,
                moderator_id=verdict.moderator_id,
                moderated_at=verdict.moderated_at,
                rejection_reason=getattr(verdict, 'reason', None),
                db=db,
            )
            if row is None:
                logger.debug(f'Verdict skipped, activity {activity_id} is no longer pending')
                return None
            for adj in adjustments:
                AdjustmentModel.insert(
                    activity_id,
                    bonus_type_id=adj.bonus_type_id,
                    moderator_id=adj.moderator_id,
                    points_adjustment=adj.points_adjustment,
                    comment=adj.comment,
                    db=db,
                )
            full = ActivityModel.get_with_extras(activity_id, db=db)
        return activity_from_row(full or row)

    def list_adjustments(
        self, activity_ids: Iterable[int]
    ) -> dict[int, list[ActivityAdjustment]]:
        grouped: dict[int, list[ActivityAdjustment]] = {}
        for row in AdjustmentModel.for_activities(activity_ids):
            adj = adjustment_from_row(row)
            grouped.setdefault(adj.activity_id, []).append(adj)
        return grouped

    def list_pending(
        self,
        event_id: Optional[int],
        team_id: Optional[int],
        limit: int,
        offset: int,
    ) -> list[Activity]:
        rows = ActivityModel.list_pending(event_id, team_id, limit, offset)
        return [activity_from_row(r) for r in rows]

    def count_by_status(self, status: ActivityStatus) -> int:
        return ActivityModel.count_by_status(status.value)

    def count_moderated_by(self, moderator_id: int, status: ActivityStatus) -> int:
        return ActivityModel.count_moderated_by(moderator_id, status.value)

    def list_team_activities(self, team_id: int) -> list[Activity]:
        return [activity_from_row(r) for r in ActivityModel.list_for_team(team_id)]

    def list_activities(
        self,
        statuses: Iterable[ActivityStatus],
        event_id: Optional[int] = None,
        team_id: Optional[int] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Activity]:
        rows = ActivityModel.list_by_status(
            [s.value for s in statuses], event_id, team_id, limit, offset
        )
        return [activity_from_row(r) for r in rows]
