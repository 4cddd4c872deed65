from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from energy_league.activities import lifecycle
from energy_league.activities import notifications as notify
from energy_league.activities.errors import InvalidState, NotFound, Unauthorized
from energy_league.activities.interface import ActivityStore, LeagueDirectory
from energy_league.activities.notifications import Notification, NotificationSink
from energy_league.activities.records import (
    Activity,
    ActivityStatus,
    AdjustmentDraft,
    BonusType,
    Participant,
    Role,
    Verdict,
)
from energy_league.utils.constants import DEFAULT_PAGE_SIZE
from energy_league.utils.helper import check_paging, utc_now
from energy_league.utils.tracing import add_span_metadata, trace_span

logger = logging.getLogger(__name__)

MODERATOR_ROLES = frozenset({Role.MODERATOR, Role.ADMIN})


def can_moderate(role: Role) -> bool:
    return role in MODERATOR_ROLES


@dataclass(frozen=True)
class ModerationStats:
    pending_count: int
    approved_by_moderator: int
    rejected_by_moderator: int


@dataclass(frozen=True)
class QueueItem:
    '''A pending activity with everything a moderator needs to judge it.'''

    activity: Activity
    activity_type_name: str
    author_name: str
    team_name: str
    event_id: Optional[int]
    participants: tuple[Participant, ...]
    team_participant_count: int


class ModerationWorkflow:
    def __init__(
        self,
        store: ActivityStore,
        directory: LeagueDirectory,
        sink: NotificationSink,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.directory = directory
        self.sink = sink
        self.clock = clock

    # --- verdicts ---

    def approve_activity(
        self,
        activity_id: int,
        moderator_id: int,
        bonus_type_id: Optional[int] = None,
        penalty_type_id: Optional[int] = None,
        comment: Optional[str] = None,
    ) -> None:
        with trace_span(
            'moderation.approve',
            {'activity_id': activity_id, 'moderator_id': moderator_id},
        ):
            activity = self._load_pending(activity_id)
            moderator = self._authorize(moderator_id)

            # Resolve everything before the first write
            applied: list[BonusType] = []
            if bonus_type_id is not None:
                applied.append(self._resolve_bonus_type(bonus_type_id, 'Bonus type'))
            if penalty_type_id is not None:
                applied.append(
                    self._resolve_bonus_type(penalty_type_id, 'Penalty type')
                )

            verdict = lifecycle.approve(activity, moderator.id, self.clock())
            adjustments = [
                AdjustmentDraft(
                    bonus_type_id=bt.id,
                    moderator_id=moderator.id,
                    points_adjustment=bt.points_adjustment,
                    comment=comment,
                )
                for bt in applied
            ]
            approved = self._commit(activity, verdict, adjustments)
            add_span_metadata('adjustments', len(adjustments))

        self._notify(
            lambda type_name: notify.approved_notification(
                approved, type_name, moderator, applied, comment
            ),
            approved,
        )

    def reject_activity(
        self,
        activity_id: int,
        moderator_id: int,
        reason: Optional[str] = None,
        penalty_type_id: Optional[int] = None,
    ) -> None:
        with trace_span(
            'moderation.reject',
            {'activity_id': activity_id, 'moderator_id': moderator_id},
        ):
            activity = self._load_pending(activity_id)
            moderator = self._authorize(moderator_id)
            reason = reason.strip() if reason and reason.strip() else None

            penalty = (
                self._resolve_bonus_type(penalty_type_id, 'Penalty type')
                if penalty_type_id is not None
                else None
            )

            verdict = lifecycle.reject(activity, moderator.id, reason, self.clock())
            adjustments = []
            if penalty is not None:
                adjustments.append(
                    AdjustmentDraft(
                        bonus_type_id=penalty.id,
                        moderator_id=moderator.id,
                        points_adjustment=penalty.points_adjustment,
                        comment=reason,
                    )
                )
            rejected = self._commit(activity, verdict, adjustments)

        self._notify(
            lambda type_name: notify.rejected_notification(
                rejected, type_name, moderator, reason, penalty
            ),
            rejected,
        )

    # --- queue and stats ---

    def list_pending_activities(
        self,
        event_id: Optional[int] = None,
        team_id: Optional[int] = None,
        page: int = 0,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> list[Activity]:
        check_paging(page, page_size)
        return self.store.list_pending(
            event_id, team_id, limit=page_size, offset=page * page_size
        )

    def pending_queue(
        self,
        event_id: Optional[int] = None,
        team_id: Optional[int] = None,
        page: int = 0,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> list[QueueItem]:
        return [
            self._queue_item(a)
            for a in self.list_pending_activities(event_id, team_id, page, page_size)
        ]

    def get_moderation_stats(self, moderator_id: int) -> ModerationStats:
        return ModerationStats(
            pending_count=self.store.count_by_status(ActivityStatus.PENDING),
            approved_by_moderator=self.store.count_moderated_by(
                moderator_id, ActivityStatus.APPROVED
            ),
            rejected_by_moderator=self.store.count_moderated_by(
                moderator_id, ActivityStatus.REJECTED
            ),
        )

    def has_moderation_enabled_events(self) -> bool:
        return any(e.requires_activity_approval for e in self.directory.list_events())

    def bonus_types_for_event(self, event_id: int) -> list[BonusType]:
        return self.directory.list_bonus_types(event_id, active_only=True)

    # --- internals ---

    def _load_pending(self, activity_id: int) -> Activity:
        activity = self.store.get_activity(activity_id)
        if activity is None:
            raise NotFound('Activity', activity_id)
        lifecycle.ensure_pending(activity)
        return activity

    def _authorize(self, moderator_id: int) -> Participant:
        moderator = self.directory.get_participant(moderator_id)
        if moderator is None:
            raise NotFound('Moderator', moderator_id)
        if not can_moderate(moderator.role):
            logger.warning(
                f'Participant {moderator_id} with role {moderator.role.value} '
                f'tried to moderate'
            )
            raise Unauthorized(
                'participant is not a moderator',
                {'participant_id': moderator_id, 'role': moderator.role.value},
            )
        return moderator

    def _resolve_bonus_type(self, bonus_type_id: int, label: str) -> BonusType:
        bonus_type = self.directory.get_bonus_type(bonus_type_id)
        if bonus_type is None:
            raise NotFound(label, bonus_type_id)
        return bonus_type

    def _commit(
        self,
        activity: Activity,
        verdict: Verdict,
        adjustments: list[AdjustmentDraft],
    ) -> Activity:
        updated = self.store.apply_verdict(activity.id, verdict, adjustments)
        if updated is None:
            # Lost the race against another moderator
            logger.warning(
                f'Concurrent moderation detected: activity={activity.id}, '
                f'verdict={verdict.status.value}'
            )
            raise InvalidState(
                lifecycle.NOT_PENDING_MESSAGE, {'activity_id': activity.id}
            )
        logger.info(
            f'Activity moderated: activity={activity.id}, '
            f'{activity.status.value} -> {updated.status.value}, '
            f'moderator={verdict.moderator_id}, adjustments={len(adjustments)}'
        )
        return updated

    def _notify(
        self, build: Callable[[str], Notification], activity: Activity
    ) -> None:
        try:
            activity_type = self.directory.get_activity_type(activity.activity_type_id)
            type_name = activity_type.name if activity_type else 'activity'
            notification = build(type_name)
        except Exception:
            logger.exception(
                f'Could not build moderation notification for activity={activity.id}'
            )
            return
        notify.dispatch(self.sink, [notification])

    def _queue_item(self, activity: Activity) -> QueueItem:
        team = self.directory.get_team(activity.team_id)
        author = self.directory.get_participant(activity.participant_id)
        activity_type = self.directory.get_activity_type(activity.activity_type_id)

        participants = tuple(
            p
            for p in (
                self.directory.get_participant(pid)
                for pid in sorted(activity.participant_ids)
            )
            if p is not None
        )
        if not participants and author is not None:
            participants = (author,)

        return QueueItem(
            activity=activity,
            activity_type_name=activity_type.name if activity_type else '',
            author_name=author.name if author else '',
            team_name=team.name if team else '',
            event_id=team.event_id if team else None,
            participants=participants,
            team_participant_count=self.directory.count_team_participants(
                activity.team_id
            ),
        )
