from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Sequence, Union

from energy_league.activities import bonus_types, feeds, scoring
from energy_league.activities.interface import ActivityStore, LeagueDirectory
from energy_league.activities.moderation import (
    ModerationStats,
    ModerationWorkflow,
    QueueItem,
)
from energy_league.activities.notifications import NotificationSink
from energy_league.activities.records import (
    Activity,
    ActivityAdjustment,
    BonusKind,
    BonusType,
)
from energy_league.activities.submission import submit_activity
from energy_league.standings.rankings import (
    ParticipantRanking,
    TeamRanking,
    participant_rankings,
    team_rankings,
)
from energy_league.standings.regularity import (
    HeatmapDay,
    TeamRegularity,
    team_activity_heatmap,
    team_regularity,
)
from energy_league.utils.constants import DEFAULT_PAGE_SIZE, HEATMAP_WINDOW_DAYS
from energy_league.utils.env import Settings, get_settings


class League:
    '''
    Entry point for the league engine. Wires an activity store, a directory
    and a notification sink together and exposes every operation the rest of
    the application calls.
    '''

    def __init__(
        self,
        store: ActivityStore,
        directory: LeagueDirectory,
        sink: NotificationSink,
        settings: Optional[Settings] = None,
        workflow: Optional[ModerationWorkflow] = None,
    ) -> None:
        self.store = store
        self.directory = directory
        self.sink = sink
        self.settings = settings or get_settings()
        self.moderation = workflow or ModerationWorkflow(store, directory, sink)

    @classmethod
    def from_postgres(cls, settings: Optional[Settings] = None) -> 'League':
        '''
        League backed by the Postgres tables. Notifications are stored in the
        notifications table, or only logged when NOTIFICATION_SINK=log.
        '''
        from energy_league.database.db_manager import DBManager
        from energy_league.services.activity_store import PostgresActivityStore
        from energy_league.services.league_directory import PostgresLeagueDirectory
        from energy_league.services.notification_sink import (
            DatabaseNotificationSink,
            LoggingNotificationSink,
        )

        settings = settings or get_settings()
        DBManager.init_pool(
            settings.database_url,
            settings.db_pool_min_size,
            settings.db_pool_max_size,
        )
        sink = (
            LoggingNotificationSink()
            if settings.notification_sink == 'log'
            else DatabaseNotificationSink()
        )
        return cls(
            PostgresActivityStore(),
            PostgresLeagueDirectory(),
            sink,
            settings=settings,
        )

    # --- activities ---

    def submit_activity(
        self,
        team_id: int,
        participant_id: int,
        activity_type_id: int,
        energy: int,
        *,
        description: Optional[str] = None,
        duration_minutes: Optional[int] = None,
        photo_urls: Iterable[str] = (),
        participant_ids: Iterable[int] = (),
    ) -> Activity:
        return submit_activity(
            self.store,
            self.directory,
            team_id,
            participant_id,
            activity_type_id,
            energy,
            description=description,
            duration_minutes=duration_minutes,
            photo_urls=photo_urls,
            participant_ids=participant_ids,
            max_photos=self.settings.max_photos_per_activity,
        )

    def compute_final_points(
        self, activity: Activity, adjustments: Sequence[ActivityAdjustment]
    ) -> int:
        return scoring.compute_final_points(activity, adjustments)

    def score_activity(self, activity_id: int) -> scoring.ScoredActivity:
        return scoring.score_activity(self.store, activity_id)

    def get_team_activities(self, team_id: int) -> list[scoring.ScoredActivity]:
        return feeds.team_activities(self.store, self.directory, team_id)

    def get_event_activities(
        self, event_id: int, page: int = 0, page_size: int = DEFAULT_PAGE_SIZE
    ) -> list[scoring.ScoredActivity]:
        return feeds.event_activities(
            self.store, self.directory, event_id, page, page_size
        )

    # --- moderation ---

    def approve_activity(
        self,
        activity_id: int,
        moderator_id: int,
        bonus_type_id: Optional[int] = None,
        penalty_type_id: Optional[int] = None,
        comment: Optional[str] = None,
    ) -> None:
        self.moderation.approve_activity(
            activity_id, moderator_id, bonus_type_id, penalty_type_id, comment
        )

    def reject_activity(
        self,
        activity_id: int,
        moderator_id: int,
        reason: Optional[str] = None,
        penalty_type_id: Optional[int] = None,
    ) -> None:
        self.moderation.reject_activity(
            activity_id, moderator_id, reason, penalty_type_id
        )

    def list_pending_activities(
        self,
        event_id: Optional[int] = None,
        team_id: Optional[int] = None,
        page: int = 0,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> list[Activity]:
        return self.moderation.list_pending_activities(
            event_id, team_id, page, page_size
        )

    def pending_queue(
        self,
        event_id: Optional[int] = None,
        team_id: Optional[int] = None,
        page: int = 0,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> list[QueueItem]:
        return self.moderation.pending_queue(event_id, team_id, page, page_size)

    def get_moderation_stats(self, moderator_id: int) -> ModerationStats:
        return self.moderation.get_moderation_stats(moderator_id)

    def has_moderation_enabled_events(self) -> bool:
        return self.moderation.has_moderation_enabled_events()

    # --- bonus types ---

    def bonus_types_for_event(self, event_id: int) -> list[BonusType]:
        return bonus_types.active_bonus_types(self.directory, event_id)

    def create_bonus_type(
        self,
        event_id: int,
        name: str,
        points_adjustment: int,
        kind: Union[str, BonusKind],
        description: Optional[str] = None,
    ) -> BonusType:
        return bonus_types.create_bonus_type(
            self.directory, event_id, name, points_adjustment, kind, description
        )

    def update_bonus_type(
        self,
        bonus_type_id: int,
        name: str,
        points_adjustment: int,
        kind: Union[str, BonusKind],
        description: Optional[str] = None,
    ) -> BonusType:
        return bonus_types.update_bonus_type(
            self.directory, bonus_type_id, name, points_adjustment, kind, description
        )

    def deactivate_bonus_type(self, bonus_type_id: int) -> BonusType:
        return bonus_types.deactivate_bonus_type(self.directory, bonus_type_id)

    # --- standings ---

    def get_team_rankings(self) -> list[TeamRanking]:
        return team_rankings(self.store, self.directory)

    def get_participant_rankings(self, event_id: int) -> list[ParticipantRanking]:
        return participant_rankings(self.store, self.directory, event_id)

    def get_team_regularity(self, today: Optional[date] = None) -> list[TeamRegularity]:
        return team_regularity(
            self.store, self.directory, self.settings.league_timezone, today
        )

    def get_team_heatmap(
        self,
        team_id: int,
        days: int = HEATMAP_WINDOW_DAYS,
        today: Optional[date] = None,
    ) -> list[HeatmapDay]:
        return team_activity_heatmap(
            self.store,
            self.directory,
            team_id,
            self.settings.league_timezone,
            days,
            today,
        )
