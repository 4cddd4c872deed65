'''
Activity moderation lifecycle.

    PENDING ──approve──▶ APPROVED
       └─────reject───▶ REJECTED

AUTO_APPROVED, APPROVED and REJECTED are terminal.
'''

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Union

from energy_league.activities.errors import InvalidState
from energy_league.activities.records import (
    Activity,
    ActivityStatus,
    Approved,
    AutoApproved,
    Event,
    Pending,
    Rejected,
    Verdict,
)

logger = logging.getLogger(__name__)

VALID_TRANSITIONS: dict[ActivityStatus, tuple[ActivityStatus, ...]] = {
    ActivityStatus.PENDING: (ActivityStatus.APPROVED, ActivityStatus.REJECTED),
    ActivityStatus.AUTO_APPROVED: (),
    ActivityStatus.APPROVED: (),
    ActivityStatus.REJECTED: (),
}

NOT_PENDING_MESSAGE = 'activity is not pending moderation'


def initial_state(event: Optional[Event]) -> Union[Pending, AutoApproved]:
    '''New activities wait for a moderator only if their event asks for it.'''
    if event is not None and event.requires_activity_approval:
        return Pending()
    return AutoApproved()


def allowed_transitions(status: ActivityStatus) -> tuple[ActivityStatus, ...]:
    return VALID_TRANSITIONS.get(status, ())


def is_terminal(status: ActivityStatus) -> bool:
    return not allowed_transitions(status)


def ensure_pending(activity: Activity) -> None:
    if activity.status is not ActivityStatus.PENDING:
        logger.warning(
            f'Rejected moderation attempt: activity={activity.id}, '
            f'status={activity.status.value}'
        )
        raise InvalidState(
            NOT_PENDING_MESSAGE,
            {'activity_id': activity.id, 'status': activity.status.value},
        )


def approve(activity: Activity, moderator_id: int, at: datetime) -> Verdict:
    '''Build the APPROVED verdict for a pending activity.'''
    ensure_pending(activity)
    return Approved(moderator_id=moderator_id, moderated_at=at)


def reject(
    activity: Activity, moderator_id: int, reason: Optional[str], at: datetime
) -> Verdict:
    '''Build the REJECTED verdict for a pending activity.'''
    ensure_pending(activity)
    return Rejected(moderator_id=moderator_id, moderated_at=at, reason=reason)
