from __future__ import annotations

from typing import Any, Optional


class LeagueError(Exception):
    '''
    Base class for every error raised by the scoring and moderation core.

    `kind` is the machine-readable discriminator callers switch on; `message`
    is meant for humans.
    '''

    kind: str = 'league_error'

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            'kind': self.kind,
            'message': self.message,
            'details': self.details,
        }


class NotFound(LeagueError):
    kind = 'not_found'

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(
            f'{entity} not found', {'entity': entity, 'id': entity_id}
        )
        self.entity = entity
        self.entity_id = entity_id


class InvalidState(LeagueError):
    kind = 'invalid_state'


class Unauthorized(LeagueError):
    kind = 'unauthorized'


class ValidationError(LeagueError):
    kind = 'validation_error'
