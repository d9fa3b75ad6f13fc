# customer_service/routers/addresses.py
"""
Customer addresses. Default handling goes through AddressService, which keeps
at most one default per customer.
"""
from __future__ import annotations
import uuid
from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from customer_service.auth import get_current_user_id
from customer_service.database import get_session
from customer_service.models import AddressCreate, AddressOut, AddressUpdate
from customer_service.services.addresses import AddressService

router = APIRouter(prefix="/api/v1/customer/addresses", tags=["Addresses"])


@router.get("")
async def list_addresses(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> Dict[str, Any]:
    addresses = await AddressService(db).list(user_id)
    return {
        "addresses": [AddressOut.model_validate(a) for a in addresses],
        "count": len(addresses),
    }


@router.post("", response_model=AddressOut, status_code=201)
async def create_address(
    payload: AddressCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
):
    return await AddressService(db).create(user_id, payload.item_fields(), make_default=payload.is_default)


@router.get("/{address_id}", response_model=AddressOut)
async def get_address(
    address_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
):
    return await AddressService(db).get(user_id, address_id)


@router.put("/{address_id}", response_model=AddressOut)
async def update_address(
    address_id: uuid.UUID,
    payload: AddressUpdate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
):
    return await AddressService(db).update(
        user_id, address_id, payload.item_fields(), make_default=payload.is_default
    )


@router.delete("/{address_id}")
async def delete_address(
    address_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> Dict[str, Any]:
    await AddressService(db).delete(user_id, address_id)
    return {"success": True, "message": "Address deleted"}


@router.put("/{address_id}/default", response_model=AddressOut)
async def set_default_address(
    address_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
):
    return await AddressService(db).set_default(user_id, address_id)
