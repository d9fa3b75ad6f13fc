# customer_service/routers/wishlist.py
"""
Wishlist Router.

Entries are keyed by (product, variant-or-none): adding the same key twice is a
no-op, and removing without variant_id only touches the product-level entry.
"""
from __future__ import annotations
import uuid
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from customer_service.auth import get_current_user_id
from customer_service.database import get_session
from customer_service.models import WishlistAdd, WishlistItemOut, WishlistNotifyUpdate
from customer_service.services.wishlist import WishlistService

router = APIRouter(prefix="/api/v1/customer/wishlist", tags=["Wishlist"])


@router.get("")
async def get_wishlist(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> Dict[str, Any]:
    items = await WishlistService(db).list(user_id)
    return {"items": [WishlistItemOut.model_validate(i) for i in items], "count": len(items)}


@router.post("", response_model=WishlistItemOut, status_code=201)
async def add_to_wishlist(
    payload: WishlistAdd,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
):
    return await WishlistService(db).add(
        user_id, payload.product_id, payload.variant_id, details=payload.details()
    )


@router.get("/count")
async def wishlist_count(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> Dict[str, Any]:
    return {"count": await WishlistService(db).count(user_id)}


@router.get("/check/{product_id}")
async def check_wishlist(
    product_id: uuid.UUID,
    variant_id: Optional[uuid.UUID] = Query(None),
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> Dict[str, Any]:
    svc = WishlistService(db)
    return {
        "in_wishlist": await svc.exists(user_id, product_id, variant_id),
        "any_variant": await svc.exists_any_variant(user_id, product_id),
    }


@router.delete("/items/{item_id}")
async def remove_wishlist_item(
    item_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> Dict[str, Any]:
    await WishlistService(db).remove_by_id(user_id, item_id)
    return {"success": True, "message": "Item removed from wishlist"}


@router.patch("/items/{item_id}")
async def update_wishlist_item(
    item_id: uuid.UUID,
    payload: WishlistNotifyUpdate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> Dict[str, Any]:
    await WishlistService(db).update_notify_on_sale(user_id, item_id, payload.notify_on_sale)
    return {"success": True, "notify_on_sale": payload.notify_on_sale}


@router.delete("/{product_id}/all")
async def remove_all_variants(
    product_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> Dict[str, Any]:
    removed = await WishlistService(db).remove_all_variants_of_product(user_id, product_id)
    return {"success": True, "removed": removed}


@router.delete("/{product_id}")
async def remove_from_wishlist(
    product_id: uuid.UUID,
    variant_id: Optional[uuid.UUID] = Query(None),
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> Dict[str, Any]:
    await WishlistService(db).remove(user_id, product_id, variant_id)
    return {"success": True, "message": "Item removed from wishlist"}
