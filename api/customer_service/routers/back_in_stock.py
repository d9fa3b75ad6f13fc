# customer_service/routers/back_in_stock.py
from __future__ import annotations
import uuid
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from customer_service.auth import get_current_user_id
from customer_service.database import get_session
from customer_service.models import BackInStockSubscribe, SubscriptionOut
from customer_service.services.back_in_stock import BackInStockRegistry

router = APIRouter(prefix="/api/v1/customer/back-in-stock", tags=["Back in stock"])


@router.get("")
async def list_subscriptions(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> Dict[str, Any]:
    subs = await BackInStockRegistry(db).list_for_customer(user_id)
    return {"subscriptions": [SubscriptionOut.model_validate(s) for s in subs], "count": len(subs)}


@router.post("", response_model=SubscriptionOut, status_code=201)
async def subscribe(
    payload: BackInStockSubscribe,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
):
    """Idempotent: subscribing again to the same product/variant returns the existing subscription."""
    return await BackInStockRegistry(db).subscribe(
        user_id, payload.product_id, payload.variant_id, details=payload.details()
    )


@router.get("/check/{product_id}")
async def check_subscription(
    product_id: uuid.UUID,
    variant_id: Optional[uuid.UUID] = Query(None),
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> Dict[str, Any]:
    return {"subscribed": await BackInStockRegistry(db).is_subscribed(user_id, product_id, variant_id)}


@router.delete("/subscriptions/{subscription_id}")
async def unsubscribe_by_id(
    subscription_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> Dict[str, Any]:
    await BackInStockRegistry(db).unsubscribe_by_id(user_id, subscription_id)
    return {"success": True, "message": "Unsubscribed"}


@router.delete("/{product_id}")
async def unsubscribe(
    product_id: uuid.UUID,
    variant_id: Optional[uuid.UUID] = Query(None),
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> Dict[str, Any]:
    await BackInStockRegistry(db).unsubscribe(user_id, product_id, variant_id)
    return {"success": True, "message": "Unsubscribed"}
