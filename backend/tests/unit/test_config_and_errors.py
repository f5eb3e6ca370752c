import pytest

from reki.core import automation_config
from reki.core.errors import (
    InvalidInputError,
    OfferNotFoundError,
    RedemptionUnavailableError,
    VenueNotFoundError,
    error_to_http,
)


@pytest.mark.parametrize(
    "raw, expected",
    [(None, 300), ("120", 120), (" 45 ", 45), ("5", 30), ("99999", 3600), ("soon", 300)],
)
def test_int_env_is_clamped(monkeypatch, raw, expected):
    if raw is None:
        monkeypatch.delenv("VIBE_TICK_SECONDS_TEST", raising=False)
    else:
        monkeypatch.setenv("VIBE_TICK_SECONDS_TEST", raw)
    assert automation_config._int("VIBE_TICK_SECONDS_TEST", 300, min_val=30, max_val=3600) == expected


def test_automation_config_snapshot_is_in_range():
    cfg = automation_config.get_automation_config()
    assert 30 <= cfg.vibe_tick_seconds <= 3600
    assert 60 <= cfg.busyness_tick_seconds <= 7200
    assert cfg.scenario_venue_limit >= 0


@pytest.mark.parametrize(
    "exc, status",
    [
        (VenueNotFoundError(3), 404),
        (OfferNotFoundError(9), 404),
        (InvalidInputError("bad time"), 400),
        (RedemptionUnavailableError("db down"), 503),
        (RuntimeError("unexpected"), 500),
    ],
)
def test_error_to_http(exc, status):
    http = error_to_http(exc)
    assert http.status_code == status
    assert http.detail == str(exc)


def test_not_found_message_names_entity():
    assert str(VenueNotFoundError(3)) == "Venue 3 not found"
