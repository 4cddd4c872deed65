from dataclasses import replace

import pytest

from energy_league.activities.errors import ValidationError
from energy_league.activities.records import ActivityStatus
from energy_league.database.db_manager import DBManager
from energy_league.league import League
from energy_league.services.notification_sink import (
    DatabaseNotificationSink,
    LoggingNotificationSink,
)
from tests.helpers import NOW


@pytest.fixture()
def league(league_db, sink, settings):
    return League(league_db, league_db, sink, settings=settings)


def test_full_round_trip_through_facade(league, league_db, sink):
    activity = league.submit_activity(1, 1, 1, 100, photo_urls=['https://cdn/p.jpg'])
    assert league.list_pending_activities() == [activity]

    league.approve_activity(activity.id, 9, bonus_type_id=5, penalty_type_id=6)

    scored = league.score_activity(activity.id)
    assert scored.final_points == 130
    assert league.compute_final_points(scored.activity, scored.adjustments) == 130
    assert league.list_pending_activities() == []
    assert league.get_moderation_stats(9).approved_by_moderator == 1

    top = league.get_team_rankings()[0]
    assert (top.team_id, top.total_points, top.rank) == (1, 130, 1)
    assert len(sink.sent) == 1


def test_regularity_and_heatmap(league, league_db):
    league_db.seed_activity(2, 2, 10, created_at=NOW)
    today = NOW.date()

    regularity = {r.team_id: r for r in league.get_team_regularity(today)}
    assert regularity[2].current_streak == 1
    assert regularity[2].rank == 1
    assert len(regularity[1].last_14_days) == 14

    [day] = league.get_team_heatmap(2, today=today)
    assert (day.day, day.count) == (today, 1)


def test_photo_limit_comes_from_settings(league_db, sink, settings):
    league = League(league_db, league_db, sink, settings=replace(settings, max_photos_per_activity=1))
    with pytest.raises(ValidationError):
        league.submit_activity(1, 1, 1, 10, photo_urls=['a', 'b'])


def test_reject_through_facade(league, league_db):
    activity = league.submit_activity(1, 2, 1, 40)
    league.reject_activity(activity.id, 10, 'wrong team')
    assert league_db.get_activity(activity.id).status is ActivityStatus.REJECTED
    assert league.pending_queue() == []


def test_bonus_type_management(league):
    created = league.create_bonus_type(1, 'Hydration', 5, 'penalty')
    assert created.points_adjustment == -5
    updated = league.update_bonus_type(created.id, 'Hydration', 8, 'BONUS')
    assert updated.points_adjustment == 8
    league.deactivate_bonus_type(created.id)
    assert created.id not in [bt.id for bt in league.bonus_types_for_event(1)]
    assert league.has_moderation_enabled_events() is True


def test_participant_rankings_and_feeds_through_facade(league, league_db):
    activity = league.submit_activity(1, 2, 1, 60)
    league.approve_activity(activity.id, 9, bonus_type_id=5)
    league_db.seed_activity(2, 1, 30)

    assert [(r.name, r.total_points) for r in league.get_participant_rankings(1)] == [
        ('Bob', 110),
        ('Alice', 30),
    ]
    [scored] = league.get_team_activities(1)
    assert (scored.activity.id, scored.final_points) == (activity.id, 110)
    assert len(league.get_event_activities(1, page_size=1)) == 1


@pytest.mark.parametrize(
    'choice, sink_class',
    [('database', DatabaseNotificationSink), ('log', LoggingNotificationSink)],
)
def test_from_postgres_picks_sink_from_settings(monkeypatch, settings, choice, sink_class):
    pool_args = []
    monkeypatch.setattr(
        DBManager, 'init_pool', classmethod(lambda cls, *args: pool_args.append(args))
    )

    league = League.from_postgres(replace(settings, notification_sink=choice))

    assert isinstance(league.sink, sink_class)
    assert league.moderation.sink is league.sink
    assert pool_args == [(None, 1, 2)]
