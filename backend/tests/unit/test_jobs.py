from reki.models.enums import BusynessLevel
from reki.scheduler import busyness_tick_job, vibe_tick_job
from reki.services.automation.heartbeat import get_tick_heartbeat
from reki.services.live_state_service import get_live_state


class TrackingSessions:
    def __init__(self, factory):
        self.factory = factory
        self.closed = 0

    def __call__(self):
        session = self.factory()
        original_close = session.close

        def close():
            self.closed += 1
            original_close()

        session.close = close
        return session


def test_jobs_run_ticks_and_close_their_session(monkeypatch, session_factory, db, make_venue):
    make_venue()
    sessions = TrackingSessions(session_factory)
    monkeypatch.setattr(vibe_tick_job, "SessionLocal", sessions)
    monkeypatch.setattr(busyness_tick_job, "SessionLocal", sessions)

    vibe_tick_job.run_vibe_tick_job()
    busyness_tick_job.run_busyness_tick_job()

    assert sessions.closed == 2
    assert set(get_tick_heartbeat()) == {"vibe", "busyness"}


def test_job_failure_is_logged_not_raised(monkeypatch, session_factory, caplog):
    sessions = TrackingSessions(session_factory)
    monkeypatch.setattr(busyness_tick_job, "SessionLocal", sessions)

    def explode(db, now):
        raise RuntimeError("scheduler boom")

    monkeypatch.setattr(busyness_tick_job, "run_busyness_tick", explode)

    busyness_tick_job.run_busyness_tick_job()

    assert sessions.closed == 1
    assert "Busyness tick job failed" in caplog.text


def test_job_uses_current_time(monkeypatch, session_factory, db, make_venue):
    venue = make_venue()
    venue_id = venue.id
    monkeypatch.setattr(busyness_tick_job, "SessionLocal", session_factory)
    busyness_tick_job.run_busyness_tick_job()
    assert get_live_state(db, venue_id).busyness in set(BusynessLevel)
