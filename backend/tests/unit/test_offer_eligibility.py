from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from sqlalchemy.exc import OperationalError

from reki.core.errors import InvalidInputError, OfferNotFoundError, RedemptionUnavailableError, VenueNotFoundError
from reki.core.timeutil import as_utc
from reki.models.enums import BusynessLevel, OfferType
from reki.models.offer import Offer
from reki.models.offer_redemption import OfferRedemption
from reki.models.venue_live_state import VenueLiveState
from reki.services.automation import apply_scenario_preset
from reki.services.live_state_service import apply_override
from reki.services.offers import (
    EligibilityError,
    check_offer_eligibility,
    count_active_offers,
    create_offer,
    get_offer,
    get_offer_stats,
    list_eligible_offers,
    list_offers_for_venue,
    meets_busyness,
    record_click,
    record_view,
    redeem,
    update_offer_status,
    within_window,
)
from reki.services.offers import redemption as redemption_module

QUIET, MODERATE, BUSY = BusynessLevel.QUIET, BusynessLevel.MODERATE, BusynessLevel.BUSY
START = datetime(2026, 10, 16, 12, 0, tzinfo=timezone.utc)
END = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)
NOW = datetime(2026, 10, 16, 20, 0, tzinfo=timezone.utc)


def _offer(**overrides):
    values = {"is_active": True, "starts_at": START, "ends_at": END, "min_busyness": QUIET}
    values.update(overrides)
    return SimpleNamespace(**values)


def _ledger_rows(db, offer_id):
    return db.query(OfferRedemption).filter(OfferRedemption.offer_id == offer_id).count()


# --- Pure checks ---


@pytest.mark.parametrize(
    "current, required, ok",
    [
        (QUIET, QUIET, True),
        (QUIET, MODERATE, False),
        (QUIET, BUSY, False),
        (MODERATE, QUIET, True),
        (MODERATE, MODERATE, True),
        (MODERATE, BUSY, False),
        (BUSY, QUIET, True),
        (BUSY, MODERATE, True),
        (BUSY, BUSY, True),
    ],
)
def test_meets_busyness_is_monotonic(current, required, ok):
    assert meets_busyness(current, required) is ok


def test_window_is_closed_at_both_ends():
    assert within_window(START, END, START)
    assert within_window(START, END, END)
    assert not within_window(START, END, START - timedelta(seconds=1))
    assert not within_window(START, END, END + timedelta(seconds=1))


def test_window_treats_naive_stored_values_as_utc():
    assert within_window(START.replace(tzinfo=None), END.replace(tzinfo=None), NOW)


def test_first_failing_check_wins():
    assert check_offer_eligibility(None, BUSY, NOW) == EligibilityError.OFFER_NOT_FOUND
    inactive_and_expired = _offer(is_active=False, ends_at=START)
    assert check_offer_eligibility(inactive_and_expired, BUSY, NOW) == EligibilityError.OFFER_INACTIVE
    expired_and_too_quiet = _offer(ends_at=START, min_busyness=BUSY)
    assert check_offer_eligibility(expired_and_too_quiet, QUIET, NOW) == EligibilityError.OUTSIDE_WINDOW
    assert check_offer_eligibility(_offer(min_busyness=BUSY), MODERATE, NOW) == EligibilityError.BUSYNESS_NOT_MET
    assert check_offer_eligibility(_offer(min_busyness=BUSY), BUSY, NOW) is None


def test_missing_live_state_fails_closed():
    assert check_offer_eligibility(_offer(), None, NOW) == EligibilityError.BUSYNESS_NOT_MET


# --- Offer store ---


def test_create_offer_validation(db, make_venue):
    venue = make_venue()
    with pytest.raises(InvalidInputError):
        create_offer(db, venue.id, "Deal", OfferType.BOGO, END, START)
    with pytest.raises(InvalidInputError):
        create_offer(db, venue.id, "Deal", OfferType.BOGO, START, START)
    with pytest.raises(InvalidInputError):
        create_offer(db, venue.id, "  ", OfferType.BOGO, START, END)
    with pytest.raises(InvalidInputError):
        create_offer(db, venue.id, "x" * 161, OfferType.BOGO, START, END)
    with pytest.raises(InvalidInputError):
        create_offer(db, venue.id, "Deal", "CASHBACK", START, END)
    with pytest.raises(VenueNotFoundError):
        create_offer(db, 999, "Deal", OfferType.BOGO, START, END)

    offer = create_offer(db, venue.id, "x" * 160, "ENTRY_DEAL", START, END)
    assert offer.min_busyness == QUIET
    assert offer.offer_type == OfferType.ENTRY_DEAL


def test_eligible_offers_follow_live_busyness(db, make_venue, make_offer):
    venue = make_venue()
    quiet = make_offer(venue, QUIET, starts_at=START, ends_at=END, title="quiet")
    moderate = make_offer(venue, MODERATE, starts_at=START + timedelta(hours=1), ends_at=END, title="moderate")
    busy = make_offer(venue, BUSY, starts_at=START + timedelta(hours=2), ends_at=END, title="busy")
    ids = [quiet.id, moderate.id, busy.id]

    assert [o.id for o in list_eligible_offers(db, venue.id, NOW)] == ids[:1]
    apply_override(db, venue.id, NOW, busyness=MODERATE)
    assert [o.id for o in list_eligible_offers(db, venue.id, NOW)] == ids[:2]
    apply_override(db, venue.id, NOW, busyness=BUSY)
    assert [o.id for o in list_eligible_offers(db, venue.id, NOW)] == ids


def test_eligible_offers_exclude_inactive_and_out_of_window(db, make_venue, make_offer):
    venue = make_venue()
    make_offer(venue, starts_at=START, ends_at=END, is_active=False)
    make_offer(venue, starts_at=NOW + timedelta(minutes=1), ends_at=END)
    make_offer(venue, starts_at=START, ends_at=NOW - timedelta(minutes=1))
    edge = make_offer(venue, starts_at=START, ends_at=NOW)
    edge_id = edge.id

    assert [o.id for o in list_eligible_offers(db, venue.id, NOW)] == [edge_id]
    assert count_active_offers(db, venue.id) == 3


def test_eligible_offers_empty_without_live_state(db, make_venue, make_offer):
    venue = make_venue()
    make_offer(venue, starts_at=START, ends_at=END)
    db.query(VenueLiveState).filter(VenueLiveState.venue_id == venue.id).delete()
    db.commit()
    assert list_eligible_offers(db, venue.id, NOW) == []


def test_eligible_offers_unknown_venue(db):
    with pytest.raises(VenueNotFoundError):
        list_eligible_offers(db, 999, NOW)


def test_list_offers_for_venue_newest_window_first(db, make_venue, make_offer):
    venue = make_venue()
    older = make_offer(venue, starts_at=START, ends_at=END, is_active=False)
    newer = make_offer(venue, starts_at=START + timedelta(hours=3), ends_at=END)
    assert [o.id for o in list_offers_for_venue(db, venue.id)] == [newer.id, older.id]


def test_status_toggle(db, make_venue, make_offer):
    offer = make_offer(make_venue(), starts_at=START, ends_at=END)
    assert update_offer_status(db, offer.id, False).is_active is False
    assert update_offer_status(db, offer.id, True).is_active is True


# --- Engagement ---


def test_view_and_click_counters(db, make_venue, make_offer):
    offer = make_offer(make_venue(), starts_at=START, ends_at=END)
    record_view(db, offer.id)
    record_view(db, offer.id)
    assert record_click(db, offer.id).click_count == 1
    assert get_offer(db, offer.id).view_count == 2

    with pytest.raises(OfferNotFoundError):
        record_view(db, 999)
    with pytest.raises(OfferNotFoundError):
        record_click(db, 999)


def test_stats_conversion_rate(db, make_venue, make_offer):
    offer = make_offer(make_venue(), starts_at=START, ends_at=END)
    offer_id = offer.id
    assert get_offer_stats(db, offer_id)["conversion_rate"] == 0.0

    for _ in range(3):
        record_view(db, offer_id)
    assert redeem(db, offer_id, "u1", NOW).ok

    stats = get_offer_stats(db, offer_id)
    assert stats == {"offer_id": offer_id, "views": 3, "clicks": 0, "redemptions": 1, "conversion_rate": 33.33}


# --- Redemption ---


def test_redeem_appends_ledger_row_and_increments(db, make_venue, make_offer):
    venue = make_venue()
    offer = make_offer(venue, starts_at=START, ends_at=END)
    offer_id, venue_id = offer.id, venue.id

    result = redeem(db, offer_id, "user-1", NOW)

    assert result.ok
    assert result.error is None
    row = result.redemption
    assert (row.offer_id, row.venue_id, row.user_id, row.source) == (offer_id, venue_id, "user-1", "DEMO")
    assert as_utc(row.redeemed_at) == NOW
    assert get_offer(db, offer_id).redeem_count == 1
    assert _ledger_rows(db, offer_id) == 1


def test_redeem_records_source(db, make_venue, make_offer):
    offer = make_offer(make_venue(), starts_at=START, ends_at=END)
    result = redeem(db, offer.id, None, NOW, source="investor")
    assert result.redemption.source == "INVESTOR"
    assert result.redemption.user_id is None


@pytest.mark.parametrize(
    "setup, expected",
    [
        ("missing", EligibilityError.OFFER_NOT_FOUND),
        ("inactive", EligibilityError.OFFER_INACTIVE),
        ("expired", EligibilityError.OUTSIDE_WINDOW),
        ("too_quiet", EligibilityError.BUSYNESS_NOT_MET),
        ("no_live_state", EligibilityError.BUSYNESS_NOT_MET),
    ],
)
def test_redeem_refusals_write_nothing(db, make_venue, make_offer, setup, expected):
    venue = make_venue()
    offer = make_offer(
        venue,
        min_busyness=BUSY if setup == "too_quiet" else QUIET,
        starts_at=START,
        ends_at=NOW - timedelta(seconds=1) if setup == "expired" else END,
        is_active=setup != "inactive",
    )
    offer_id = 999 if setup == "missing" else offer.id
    if setup == "no_live_state":
        db.query(VenueLiveState).filter(VenueLiveState.venue_id == venue.id).delete()
        db.commit()

    result = redeem(db, offer_id, "user-1", NOW)

    assert not result.ok
    assert result.error == expected
    assert result.message
    assert db.query(OfferRedemption).count() == 0
    assert db.query(Offer).filter(Offer.redeem_count > 0).count() == 0


def test_unknown_offer_ids_share_a_fixed_lock_pool(db):
    pool = redemption_module._offer_locks

    for offer_id in range(100_000, 101_000):
        assert redeem(db, offer_id, "u", NOW).error == EligibilityError.OFFER_NOT_FOUND

    assert redemption_module._offer_locks is pool
    assert len(pool) == redemption_module.OFFER_LOCK_STRIPES
    assert redemption_module._offer_lock(7) is redemption_module._offer_lock(7)
    assert redemption_module._offer_lock(7) is redemption_module._offer_lock(7 + redemption_module.OFFER_LOCK_STRIPES)
    assert db.query(OfferRedemption).count() == 0


def test_redeem_at_exact_window_end(db, make_venue, make_offer):
    offer = make_offer(make_venue(), starts_at=START, ends_at=NOW)
    assert redeem(db, offer.id, "u", NOW).ok


def test_busy_offer_redeemable_after_quiet_to_busy(db, make_venue, make_offer):
    offer = make_offer(make_venue(), BUSY, starts_at=START, ends_at=END)
    offer_id = offer.id
    assert redeem(db, offer_id, "u", NOW).error == EligibilityError.BUSYNESS_NOT_MET

    apply_scenario_preset(db, "quiet_to_busy", NOW)

    assert redeem(db, offer_id, "u", NOW).ok


def test_store_failure_raises_unavailable_and_writes_nothing(db, make_venue, make_offer, monkeypatch):
    offer = make_offer(make_venue(), starts_at=START, ends_at=END)
    offer_id = offer.id

    def broken(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection lost"))

    monkeypatch.setattr("reki.services.offers.redemption.find_live_state", broken)
    with pytest.raises(RedemptionUnavailableError):
        redeem(db, offer_id, "u", NOW)

    monkeypatch.undo()
    assert _ledger_rows(db, offer_id) == 0
    assert get_offer(db, offer_id).redeem_count == 0


def test_redeem_rejects_overlong_source(db, make_venue, make_offer):
    offer = make_offer(make_venue(), starts_at=START, ends_at=END)
    with pytest.raises(InvalidInputError):
        redeem(db, offer.id, "u", NOW, source="X" * 33)
