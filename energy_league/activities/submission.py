from __future__ import annotations

import logging
from typing import Iterable, Optional

from energy_league.activities.errors import NotFound, ValidationError
from energy_league.activities.interface import ActivityStore, LeagueDirectory
from energy_league.activities.lifecycle import initial_state
from energy_league.activities.records import Activity, ActivityDraft
from energy_league.utils.constants import DEFAULT_MAX_PHOTOS_PER_ACTIVITY

logger = logging.getLogger(__name__)


def submit_activity(
    store: ActivityStore,
    directory: LeagueDirectory,
    team_id: int,
    participant_id: int,
    activity_type_id: int,
    energy: int,
    *,
    description: Optional[str] = None,
    duration_minutes: Optional[int] = None,
    photo_urls: Iterable[str] = (),
    participant_ids: Iterable[int] = (),
    max_photos: int = DEFAULT_MAX_PHOTOS_PER_ACTIVITY,
) -> Activity:
    '''
    Log an activity for a team. It starts PENDING when the team's event
    requires approval and AUTO_APPROVED otherwise.
    '''
    photos = tuple(url for url in photo_urls if url)
    if len(photos) > max_photos:
        raise ValidationError(
            f'Maximum {max_photos} photos allowed per activity',
            {'photos': len(photos)},
        )
    if isinstance(energy, bool) or not isinstance(energy, int) or energy < 0:
        raise ValidationError('energy must be a non-negative integer', {'energy': energy})
    if duration_minutes is not None and duration_minutes < 0:
        raise ValidationError('duration_minutes must not be negative')

    team = directory.get_team(team_id)
    if team is None:
        raise NotFound('Team', team_id)
    if directory.get_participant(participant_id) is None:
        raise NotFound('Participant', participant_id)
    if directory.get_activity_type(activity_type_id) is None:
        raise NotFound('Activity type', activity_type_id)

    others = frozenset(participant_ids)
    for pid in sorted(others):
        if directory.get_participant(pid) is None:
            raise NotFound('Participant', pid)

    event = directory.get_event(team.event_id) if team.event_id is not None else None
    draft = ActivityDraft(
        team_id=team_id,
        participant_id=participant_id,
        activity_type_id=activity_type_id,
        energy=energy,
        state=initial_state(event),
        description=description,
        duration_minutes=duration_minutes,
        photo_urls=photos,
        participant_ids=others,
    )
    activity = store.add_activity(draft)
    logger.info(
        f'Activity submitted: activity={activity.id}, team={team_id}, '
        f'participant={participant_id}, status={activity.status.value}'
    )
    return activity
