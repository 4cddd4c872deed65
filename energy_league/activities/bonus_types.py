from __future__ import annotations

import dataclasses
import logging
from typing import Optional, Union

from energy_league.activities.errors import NotFound, ValidationError
from energy_league.activities.interface import LeagueDirectory
from energy_league.activities.records import BonusKind, BonusType

logger = logging.getLogger(__name__)


def parse_kind(raw: Union[str, BonusKind]) -> BonusKind:
    if isinstance(raw, BonusKind):
        return raw
    try:
        return BonusKind(str(raw).strip().upper())
    except ValueError as e:
        raise ValidationError(
            f'Unknown bonus type kind {raw!r}', {'allowed': [k.value for k in BonusKind]}
        ) from e


def normalize_points(kind: BonusKind, points: int) -> int:
    '''Penalties never add points: a positive penalty is stored negated.'''
    if kind is BonusKind.PENALTY and points > 0:
        return -points
    return points


def _validated(name: str, points: int) -> str:
    if not name or not name.strip():
        raise ValidationError('Bonus type name must not be blank')
    if isinstance(points, bool) or not isinstance(points, int):
        raise ValidationError('points_adjustment must be an integer')
    return name.strip()


def create_bonus_type(
    directory: LeagueDirectory,
    event_id: int,
    name: str,
    points_adjustment: int,
    kind: Union[str, BonusKind],
    description: Optional[str] = None,
) -> BonusType:
    parsed = parse_kind(kind)
    clean_name = _validated(name, points_adjustment)
    if directory.get_event(event_id) is None:
        raise NotFound('Event', event_id)

    created = directory.insert_bonus_type(
        event_id=event_id,
        name=clean_name,
        description=description,
        points_adjustment=normalize_points(parsed, points_adjustment),
        kind=parsed,
    )
    logger.info(
        f'Bonus type created: id={created.id}, event={event_id}, '
        f'kind={parsed.value}, points={created.points_adjustment}'
    )
    return created


def update_bonus_type(
    directory: LeagueDirectory,
    bonus_type_id: int,
    name: str,
    points_adjustment: int,
    kind: Union[str, BonusKind],
    description: Optional[str] = None,
) -> BonusType:
    parsed = parse_kind(kind)
    clean_name = _validated(name, points_adjustment)
    current = directory.get_bonus_type(bonus_type_id)
    if current is None:
        raise NotFound('Bonus type', bonus_type_id)

    return directory.update_bonus_type(
        dataclasses.replace(
            current,
            name=clean_name,
            description=description,
            points_adjustment=normalize_points(parsed, points_adjustment),
            kind=parsed,
        )
    )


def deactivate_bonus_type(directory: LeagueDirectory, bonus_type_id: int) -> BonusType:
    '''Bonus types are never deleted; past adjustments keep pointing at them.'''
    current = directory.get_bonus_type(bonus_type_id)
    if current is None:
        raise NotFound('Bonus type', bonus_type_id)
    if not current.is_active:
        return current
    logger.info(f'Bonus type deactivated: id={bonus_type_id}')
    return directory.update_bonus_type(dataclasses.replace(current, is_active=False))


def active_bonus_types(directory: LeagueDirectory, event_id: int) -> list[BonusType]:
    return directory.list_bonus_types(event_id, active_only=True)
