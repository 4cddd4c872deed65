from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Union


class ActivityStatus(str, Enum):
    PENDING = 'PENDING'
    AUTO_APPROVED = 'AUTO_APPROVED'
    APPROVED = 'APPROVED'
    REJECTED = 'REJECTED'


class Role(str, Enum):
    USER = 'USER'
    MODERATOR = 'MODERATOR'
    ADMIN = 'ADMIN'


class BonusKind(str, Enum):
    BONUS = 'BONUS'
    PENALTY = 'PENALTY'


# --- Moderation state: one variant per status ---


@dataclass(frozen=True)
class Pending:
    @property
    def status(self) -> ActivityStatus:
        return ActivityStatus.PENDING


@dataclass(frozen=True)
class AutoApproved:
    @property
    def status(self) -> ActivityStatus:
        return ActivityStatus.AUTO_APPROVED


@dataclass(frozen=True)
class Approved:
    moderator_id: int
    moderated_at: datetime

    @property
    def status(self) -> ActivityStatus:
        return ActivityStatus.APPROVED


@dataclass(frozen=True)
class Rejected:
    moderator_id: int
    moderated_at: datetime
    reason: Optional[str]

    @property
    def status(self) -> ActivityStatus:
        return ActivityStatus.REJECTED


ModerationState = Union[Pending, AutoApproved, Approved, Rejected]
Verdict = Union[Approved, Rejected]


@dataclass(frozen=True)
class Activity:
    id: int
    team_id: int
    participant_id: int
    activity_type_id: int
    energy: int
    state: ModerationState
    created_at: datetime
    description: Optional[str] = None
    duration_minutes: Optional[int] = None
    photo_urls: tuple[str, ...] = ()
    participant_ids: frozenset[int] = field(default_factory=frozenset)

    @property
    def status(self) -> ActivityStatus:
        return self.state.status

    @property
    def moderator_id(self) -> Optional[int]:
        return getattr(self.state, 'moderator_id', None)

    @property
    def moderated_at(self) -> Optional[datetime]:
        return getattr(self.state, 'moderated_at', None)

    @property
    def rejection_reason(self) -> Optional[str]:
        return getattr(self.state, 'reason', None)


@dataclass(frozen=True)
class ActivityDraft:
    '''A submission that has not been persisted yet.'''

    team_id: int
    participant_id: int
    activity_type_id: int
    energy: int
    state: Union[Pending, AutoApproved]
    description: Optional[str] = None
    duration_minutes: Optional[int] = None
    photo_urls: tuple[str, ...] = ()
    participant_ids: frozenset[int] = field(default_factory=frozenset)


@dataclass(frozen=True)
class ActivityAdjustment:
    id: int
    activity_id: int
    bonus_type_id: int
    moderator_id: int
    points_adjustment: int
    created_at: datetime
    comment: Optional[str] = None


@dataclass(frozen=True)
class AdjustmentDraft:
    bonus_type_id: int
    moderator_id: int
    points_adjustment: int
    comment: Optional[str] = None


@dataclass(frozen=True)
class BonusType:
    id: int
    event_id: int
    name: str
    points_adjustment: int
    kind: BonusKind
    description: Optional[str] = None
    is_active: bool = True


@dataclass(frozen=True)
class Event:
    id: int
    name: str
    requires_activity_approval: bool = False
    team_based_competition: bool = True
    multiplier: float = 1.0


@dataclass(frozen=True)
class Team:
    id: int
    name: str
    event_id: Optional[int] = None


@dataclass(frozen=True)
class Participant:
    id: int
    name: str
    role: Role = Role.USER


@dataclass(frozen=True)
class ActivityType:
    id: int
    name: str
