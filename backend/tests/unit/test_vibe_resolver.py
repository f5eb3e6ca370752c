from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from reki.core.errors import InvalidInputError, ScheduleRuleNotFoundError, VenueNotFoundError
from reki.models.enums import VibeType
from reki.services.vibe_schedule import (
    create_rule,
    delete_rule,
    list_rules,
    resolve_current_vibe,
    resolve_next_change,
)

FRI, SAT = 5, 6
LONDON = ZoneInfo("Europe/London")


def _friday_evening_rules(make_rule, venue):
    make_rule(venue, FRI, "17:00", "19:00", VibeType.CHILL, priority=1)
    make_rule(venue, FRI, "19:00", "22:00", VibeType.SOCIAL, priority=2)
    make_rule(venue, FRI, "22:00", "23:59", VibeType.PARTY, priority=3)


def test_current_vibe_uses_venue_local_time(db, make_venue, make_rule):
    venue = make_venue()
    _friday_evening_rules(make_rule, venue)
    # 18:30 UTC is 19:30 BST
    assert resolve_current_vibe(db, venue.id, datetime(2026, 10, 16, 18, 30, tzinfo=timezone.utc)) == VibeType.SOCIAL
    # 17:00 UTC is 18:00 BST
    assert resolve_current_vibe(db, venue.id, datetime(2026, 10, 16, 17, 0, tzinfo=timezone.utc)) == VibeType.CHILL


def test_shared_boundary_goes_to_higher_priority(db, make_venue, make_rule):
    venue = make_venue()
    _friday_evening_rules(make_rule, venue)
    assert resolve_current_vibe(db, venue.id, datetime(2026, 10, 16, 18, 0, tzinfo=timezone.utc)) == VibeType.SOCIAL


def test_no_rule_for_the_day_returns_none(db, make_venue, make_rule):
    venue = make_venue()
    _friday_evening_rules(make_rule, venue)
    sunday_noon = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)
    assert resolve_current_vibe(db, venue.id, sunday_noon) is None


def test_day_of_week_comes_from_venue_timezone(db, make_venue, make_rule):
    tokyo = make_venue(timezone_name="Asia/Tokyo")
    london = make_venue(timezone_name="Europe/London")
    for venue in (tokyo, london):
        make_rule(venue, SAT, "01:00", "03:00", VibeType.PARTY)
    # Friday 17:00 UTC: Saturday 02:00 in Tokyo, Friday 18:00 in London
    now = datetime(2026, 10, 16, 17, 0, tzinfo=timezone.utc)
    assert resolve_current_vibe(db, tokyo.id, now) == VibeType.PARTY
    assert resolve_current_vibe(db, london.id, now) is None


def test_overnight_rule_resolves_after_midnight(db, make_venue, make_rule):
    venue = make_venue()
    make_rule(venue, FRI, "22:00", "02:00", VibeType.LATE_NIGHT)
    # Saturday 01:00 BST
    assert resolve_current_vibe(db, venue.id, datetime(2026, 10, 17, 0, 0, tzinfo=timezone.utc)) == VibeType.LATE_NIGHT


def test_inactive_rules_are_ignored(db, make_venue, make_rule):
    venue = make_venue()
    make_rule(venue, FRI, "00:00", "23:59", VibeType.ROMANTIC, is_active=False)
    assert resolve_current_vibe(db, venue.id, datetime(2026, 10, 16, 12, 0, tzinfo=timezone.utc)) is None


def test_unknown_venue_raises(db):
    with pytest.raises(VenueNotFoundError):
        resolve_current_vibe(db, 999, datetime(2026, 10, 16, tzinfo=timezone.utc))
    with pytest.raises(VenueNotFoundError):
        resolve_next_change(db, 999, datetime(2026, 10, 16, tzinfo=timezone.utc))


def test_next_change_later_today(db, make_venue, make_rule):
    venue = make_venue()
    _friday_evening_rules(make_rule, venue)
    nxt = resolve_next_change(db, venue.id, datetime(2026, 10, 16, 18, 30, tzinfo=timezone.utc))
    assert nxt.vibe == VibeType.PARTY
    assert nxt.starts_at == "22:00"
    assert nxt.day_of_week == FRI
    assert nxt.at == datetime(2026, 10, 16, 22, 0, tzinfo=LONDON)
    assert nxt.at == datetime(2026, 10, 16, 21, 0, tzinfo=timezone.utc)


def test_next_change_rolls_over_to_next_week(db, make_venue, make_rule):
    venue = make_venue()
    _friday_evening_rules(make_rule, venue)
    # Saturday 00:00 BST: no Saturday rules, next is Friday 17:00 six days later
    nxt = resolve_next_change(db, venue.id, datetime(2026, 10, 16, 23, 0, tzinfo=timezone.utc))
    assert nxt.vibe == VibeType.CHILL
    assert nxt.day_of_week == FRI
    assert nxt.at == datetime(2026, 10, 23, 16, 0, tzinfo=timezone.utc)
    assert nxt.as_dict()["starts_at"] == "17:00"


def test_next_change_none_without_rules(db, make_venue):
    venue = make_venue()
    assert resolve_next_change(db, venue.id, datetime(2026, 10, 16, tzinfo=timezone.utc)) is None


def test_create_rule_normalizes_and_validates(db, make_venue):
    venue = make_venue()
    rule = create_rule(db, venue.id, FRI, "9:00", "11:30", "SOCIAL", priority=2)
    assert (rule.start_time, rule.end_time, rule.vibe) == ("09:00", "11:30", VibeType.SOCIAL)

    with pytest.raises(InvalidInputError):
        create_rule(db, venue.id, 7, "09:00", "10:00", VibeType.CHILL)
    with pytest.raises(InvalidInputError):
        create_rule(db, venue.id, FRI, "25:00", "10:00", VibeType.CHILL)
    with pytest.raises(InvalidInputError):
        create_rule(db, venue.id, FRI, "09:00", "10:00", "DISCO")
    with pytest.raises(InvalidInputError):
        create_rule(db, venue.id, FRI, "09:00", "10:00", VibeType.CHILL, priority=-1)
    with pytest.raises(VenueNotFoundError):
        create_rule(db, 999, FRI, "09:00", "10:00", VibeType.CHILL)


def test_list_and_delete_rules(db, make_venue, make_rule):
    venue = make_venue()
    sat = make_rule(venue, SAT, "16:00", "19:00", VibeType.CHILL)
    low = make_rule(venue, FRI, "19:00", "22:00", VibeType.SOCIAL, priority=1)
    high = make_rule(venue, FRI, "19:00", "21:00", VibeType.PARTY, priority=4)
    early = make_rule(venue, FRI, "17:00", "19:00", VibeType.CHILL)

    ids = {"sat": sat.id, "low": low.id, "high": high.id, "early": early.id}

    assert [r.id for r in list_rules(db, venue.id)] == [ids["early"], ids["high"], ids["low"], ids["sat"]]

    delete_rule(db, ids["high"])
    assert ids["high"] not in [r.id for r in list_rules(db, venue.id)]
    with pytest.raises(ScheduleRuleNotFoundError):
        delete_rule(db, ids["high"])


def test_weekday_rules_queried_on_sunday(db, make_venue, make_rule):
    venue = make_venue()
    for day in (1, 2, 3, 4):
        make_rule(venue, day, "18:00", "23:00", VibeType.SOCIAL)
    sunday = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)

    assert resolve_current_vibe(db, venue.id, sunday) is None
    nxt = resolve_next_change(db, venue.id, sunday)
    assert nxt.day_of_week == 1
    assert nxt.at == datetime(2026, 10, 19, 17, 0, tzinfo=timezone.utc)
