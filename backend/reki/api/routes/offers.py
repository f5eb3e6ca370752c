"""
Offers API: create, eligible-now listing, redemption and engagement counters.

Caller identity for redemption is the X-User-Id header; body.user_id is only a fallback when the
header is absent. There is no auth here.
"""
import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, Header
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from reki.core.constants import OFFER_TITLE_MAX_LENGTH
from reki.core.errors import RekiError, error_to_http
from reki.db.session import get_db
from reki.models.enums import BusynessLevel, OfferType
from reki.services.offers import (
    count_active_offers,
    create_offer,
    get_offer,
    get_offer_stats,
    list_eligible_offers,
    list_offers_for_venue,
    record_click,
    record_view,
    redeem,
    update_offer_status,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def _offer_out(o) -> dict[str, Any]:
    return {
        "id": o.id,
        "venue_id": o.venue_id,
        "title": o.title,
        "description": o.description,
        "offer_type": o.offer_type.value,
        "min_busyness": o.min_busyness.value,
        "starts_at": _iso(o.starts_at),
        "ends_at": _iso(o.ends_at),
        "is_active": o.is_active,
        "view_count": o.view_count,
        "click_count": o.click_count,
        "redeem_count": o.redeem_count,
    }


class CreateOfferRequest(BaseModel):
    venue_id: int
    title: str = Field(..., min_length=1, max_length=OFFER_TITLE_MAX_LENGTH)
    description: str | None = None
    offer_type: OfferType
    min_busyness: BusynessLevel = BusynessLevel.QUIET
    starts_at: datetime
    ends_at: datetime
    is_active: bool = True


@router.post("")
def post_offer(body: CreateOfferRequest, db: Session = Depends(get_db)) -> dict[str, Any]:
    try:
        offer = create_offer(
            db,
            body.venue_id,
            body.title,
            body.offer_type,
            body.starts_at,
            body.ends_at,
            min_busyness=body.min_busyness,
            description=body.description,
            is_active=body.is_active,
        )
    except RekiError as exc:
        raise error_to_http(exc) from exc
    return _offer_out(offer)


class RedeemRequest(BaseModel):
    offer_id: int
    user_id: str | None = Field(None, max_length=64)
    source: str | None = Field(None, max_length=32, description="DEMO, INVESTOR, INTERNAL, ...")


@router.post("/redeem")
def post_redeem(
    body: RedeemRequest,
    db: Session = Depends(get_db),
    x_user_id: str | None = Header(None, alias="X-User-Id"),
) -> dict[str, Any]:
    """
    Redeem an offer now. Eligibility failures are a normal response (success=false + error code);
    a store failure is 503 and safe to retry.
    """
    user_id = x_user_id or body.user_id
    try:
        result = redeem(db, body.offer_id, user_id, datetime.now(timezone.utc), source=body.source)
    except RekiError as exc:
        raise error_to_http(exc) from exc
    if not result.ok:
        return {"success": False, "error": result.error.value, "message": result.message}
    r = result.redemption
    return {
        "success": True,
        "message": result.message,
        "redemption": {
            "id": r.id,
            "offer_id": r.offer_id,
            "venue_id": r.venue_id,
            "user_id": r.user_id,
            "source": r.source,
            "redeemed_at": _iso(r.redeemed_at),
        },
    }


@router.get("/by-venue/{venue_id}")
def eligible_offers(venue_id: int, db: Session = Depends(get_db)) -> dict[str, Any]:
    """Offers redeemable right now at this venue (active, in window, busyness met)."""
    try:
        rows = list_eligible_offers(db, venue_id, datetime.now(timezone.utc))
    except RekiError as exc:
        raise error_to_http(exc) from exc
    return {"venue_id": venue_id, "offers": [_offer_out(o) for o in rows]}


@router.get("/by-venue/{venue_id}/all")
def all_offers(venue_id: int, db: Session = Depends(get_db)) -> dict[str, Any]:
    try:
        rows = list_offers_for_venue(db, venue_id)
    except RekiError as exc:
        raise error_to_http(exc) from exc
    return {
        "venue_id": venue_id,
        "active_count": count_active_offers(db, venue_id),
        "offers": [_offer_out(o) for o in rows],
    }


@router.get("/{offer_id}")
def read_offer(offer_id: int, db: Session = Depends(get_db)) -> dict[str, Any]:
    try:
        return _offer_out(get_offer(db, offer_id))
    except RekiError as exc:
        raise error_to_http(exc) from exc


@router.patch("/{offer_id}/view")
def view_offer(offer_id: int, db: Session = Depends(get_db)) -> dict[str, Any]:
    try:
        offer = record_view(db, offer_id)
    except RekiError as exc:
        raise error_to_http(exc) from exc
    return {"offer_id": offer.id, "view_count": offer.view_count}


@router.patch("/{offer_id}/click")
def click_offer(offer_id: int, db: Session = Depends(get_db)) -> dict[str, Any]:
    try:
        offer = record_click(db, offer_id)
    except RekiError as exc:
        raise error_to_http(exc) from exc
    return {"offer_id": offer.id, "click_count": offer.click_count}


@router.get("/{offer_id}/stats")
def offer_stats(offer_id: int, db: Session = Depends(get_db)) -> dict[str, Any]:
    try:
        return get_offer_stats(db, offer_id)
    except RekiError as exc:
        raise error_to_http(exc) from exc


class OfferStatusRequest(BaseModel):
    is_active: bool


@router.patch("/{offer_id}/status")
def set_offer_status(offer_id: int, body: OfferStatusRequest, db: Session = Depends(get_db)) -> dict[str, Any]:
    try:
        offer = update_offer_status(db, offer_id, body.is_active)
    except RekiError as exc:
        raise error_to_http(exc) from exc
    return {"offer_id": offer.id, "is_active": offer.is_active}
