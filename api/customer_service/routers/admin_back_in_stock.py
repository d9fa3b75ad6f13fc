# customer_service/routers/admin_back_in_stock.py
"""
Admin view of back-in-stock subscriptions. Every route requires a role listed
in ADMIN_ROLES.
"""
from __future__ import annotations
import uuid
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from customer_service.auth import require_admin
from customer_service.database import get_session
from customer_service.models import MarkNotifiedIn, StatsOut, SubscriptionOut
from customer_service.services.back_in_stock import BackInStockRegistry

router = APIRouter(
    prefix="/api/v1/admin/back-in-stock",
    tags=["Admin: back in stock"],
    dependencies=[Depends(require_admin)],
)


@router.get("/stats", response_model=StatsOut)
async def get_stats(db: AsyncSession = Depends(get_session)):
    stats = await BackInStockRegistry(db).stats()
    return stats.to_dict()


@router.get("/subscriptions")
async def list_all_subscriptions(
    pending_only: bool = Query(False),
    limit: int = Query(100, ge=1, le=1000),
    db: AsyncSession = Depends(get_session),
) -> Dict[str, Any]:
    subs = await BackInStockRegistry(db).list_all(pending_only=pending_only, limit=limit)
    return {"subscriptions": [SubscriptionOut.model_validate(s) for s in subs], "count": len(subs)}


@router.get("/products/{product_id}/subscriptions")
async def pending_for_product(
    product_id: uuid.UUID,
    variant_id: Optional[uuid.UUID] = Query(None),
    db: AsyncSession = Depends(get_session),
) -> Dict[str, Any]:
    subs = await BackInStockRegistry(db).pending_for_product(product_id, variant_id)
    return {"subscriptions": [SubscriptionOut.model_validate(s) for s in subs], "count": len(subs)}


@router.post("/mark-notified")
async def mark_notified(payload: MarkNotifiedIn, db: AsyncSession = Depends(get_session)) -> Dict[str, Any]:
    marked = await BackInStockRegistry(db).mark_notified(payload.subscription_ids)
    return {"success": True, "marked": marked}


@router.delete("/cleanup")
async def cleanup_notified(
    request: Request,
    days: Optional[int] = Query(None, ge=1),
    db: AsyncSession = Depends(get_session),
) -> Dict[str, Any]:
    """Delete notified subscriptions older than `days` (defaults to BACK_IN_STOCK_CLEANUP_DAYS)."""
    if days is None:
        days = request.app.state.settings.BACK_IN_STOCK_CLEANUP_DAYS
    deleted = await BackInStockRegistry(db).delete_old_notified(days)
    return {"success": True, "deleted": deleted, "older_than_days": days}
