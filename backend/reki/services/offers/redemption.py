"""
Offer redemption: re-check eligibility at the redemption instant, then append a ledger row
and bump the offer's redeem_count in the same transaction.

Concurrent redemptions of one offer are serialized: an in-process lock (one of a fixed
stripe, picked by offer id) plus a row lock (SELECT ... FOR UPDATE) on the offer for
multi-process deployments. Every success produces exactly one ledger row and exactly one
increment; a failure changes nothing.
"""
import logging
import threading
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from reki.core.constants import DEFAULT_REDEMPTION_SOURCE, REDEMPTION_SOURCE_MAX_LENGTH
from reki.core.errors import InvalidInputError, RedemptionUnavailableError
from reki.core.timeutil import as_utc
from reki.models.offer import Offer
from reki.models.offer_redemption import OfferRedemption
from reki.services.live_state_service import find_live_state
from reki.services.notify import EVENT_OFFER_REDEEMED, dispatch_event
from reki.services.offers.eligibility import ELIGIBILITY_MESSAGES, EligibilityError, check_offer_eligibility

logger = logging.getLogger(__name__)

OFFER_LOCK_STRIPES = 64
_offer_locks: tuple[threading.Lock, ...] = tuple(threading.Lock() for _ in range(OFFER_LOCK_STRIPES))


def _offer_lock(offer_id: int) -> threading.Lock:
    return _offer_locks[offer_id % OFFER_LOCK_STRIPES]


def _store_unavailable(db: Session, offer_id: int, e: SQLAlchemyError) -> RedemptionUnavailableError:
    db.rollback()
    logger.exception("Redemption of offer %s failed in store: %s", offer_id, e)
    return RedemptionUnavailableError(f"Redemption of offer {offer_id} is temporarily unavailable")


@dataclass(frozen=True)
class RedemptionResult:
    ok: bool
    redemption: OfferRedemption | None = None
    error: EligibilityError | None = None

    @property
    def message(self) -> str:
        if self.ok:
            return "Offer redeemed"
        return ELIGIBILITY_MESSAGES.get(self.error, "Offer cannot be redeemed")


def _normalize_source(source: str | None) -> str:
    source = (source or "").strip().upper() or DEFAULT_REDEMPTION_SOURCE
    if len(source) > REDEMPTION_SOURCE_MAX_LENGTH:
        raise InvalidInputError(f"source must be at most {REDEMPTION_SOURCE_MAX_LENGTH} characters.")
    return source


def redeem(
    db: Session,
    offer_id: int,
    user_id: str | None,
    now: datetime,
    source: str | None = None,
) -> RedemptionResult:
    """
    Redeem offer_id for user_id at now. Eligibility failures come back as
    RedemptionResult(ok=False, error=...). A store failure rolls back and raises
    RedemptionUnavailableError (safe to retry: nothing was written).
    """
    source = _normalize_source(source)
    user_id = (user_id or "").strip() or None

    try:
        exists = db.query(Offer.id).filter(Offer.id == offer_id).first() is not None
    except SQLAlchemyError as e:
        raise _store_unavailable(db, offer_id, e) from e
    if not exists:
        db.rollback()
        logger.info("Redemption of offer %s refused: %s", offer_id, EligibilityError.OFFER_NOT_FOUND.value)
        return RedemptionResult(ok=False, error=EligibilityError.OFFER_NOT_FOUND)

    with _offer_lock(offer_id):
        try:
            offer = (
                db.query(Offer)
                .filter(Offer.id == offer_id)
                .with_for_update()
                .populate_existing()
                .first()
            )
            busyness = None
            if offer is not None:
                live = find_live_state(db, offer.venue_id)
                busyness = live.busyness if live is not None else None
            error = check_offer_eligibility(offer, busyness, now)
            if error is not None:
                db.rollback()
                logger.info("Redemption of offer %s refused: %s", offer_id, error.value)
                return RedemptionResult(ok=False, error=error)

            row = OfferRedemption(
                offer_id=offer.id,
                venue_id=offer.venue_id,
                user_id=user_id,
                source=source,
                redeemed_at=as_utc(now),
            )
            db.add(row)
            db.query(Offer).filter(Offer.id == offer.id).update(
                {Offer.redeem_count: Offer.redeem_count + 1}, synchronize_session=False
            )
            db.commit()
            db.refresh(row)
        except SQLAlchemyError as e:
            raise _store_unavailable(db, offer_id, e) from e

    logger.info("Offer %s redeemed by %s (redemption %s, source %s)", offer_id, user_id, row.id, source)
    dispatch_event(
        EVENT_OFFER_REDEEMED,
        {
            "offer_id": row.offer_id,
            "venue_id": row.venue_id,
            "user_id": user_id,
            "redemption_id": row.id,
            "at": as_utc(now).isoformat(),
        },
    )
    return RedemptionResult(ok=True, redemption=row)

