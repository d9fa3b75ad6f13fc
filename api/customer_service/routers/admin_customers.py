# customer_service/routers/admin_customers.py
"""
Admin customer management. Every route requires a role listed in ADMIN_ROLES.
"""
from __future__ import annotations
import uuid
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from customer_service.auth import require_admin
from customer_service.database import get_session
from customer_service.models import (
    AdminCustomerCreate,
    AdminCustomerUpdate,
    CustomerListOut,
    CustomerStatsOut,
    ProfileOut,
)
from customer_service.services.profile import ProfileService
from customer_service.value_objects import CustomerStatus, Phone

router = APIRouter(
    prefix="/api/v1/admin/customers",
    tags=["Admin: customers"],
    dependencies=[Depends(require_admin)],
)


@router.get("", response_model=CustomerListOut)
async def list_customers(
    status: Optional[CustomerStatus] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_session),
) -> Dict[str, Any]:
    customers, total = await ProfileService(db).list_customers(
        status=status, search=search, page=page, limit=limit
    )
    return {"customers": customers, "total": total, "page": page, "limit": limit}


@router.post("", response_model=ProfileOut, status_code=201)
async def create_customer(payload: AdminCustomerCreate, db: AsyncSession = Depends(get_session)):
    """Duplicate email -> 409."""
    email, name, phone = payload.value_objects()
    return await ProfileService(db).create_customer(
        email, name, phone=phone, status=payload.status or CustomerStatus.active
    )


# Registered before /{customer_id} so "stats" is not parsed as an id
@router.get("/stats", response_model=CustomerStatsOut)
async def customer_stats(db: AsyncSession = Depends(get_session)):
    stats = await ProfileService(db).stats()
    return stats.to_dict()


@router.get("/{customer_id}", response_model=ProfileOut)
async def get_customer(customer_id: uuid.UUID, db: AsyncSession = Depends(get_session)):
    return await ProfileService(db).get(customer_id)


@router.put("/{customer_id}", response_model=ProfileOut)
async def update_customer(
    customer_id: uuid.UUID,
    payload: AdminCustomerUpdate,
    db: AsyncSession = Depends(get_session),
):
    return await ProfileService(db).update_customer(
        customer_id,
        first_name=payload.first_name,
        last_name=payload.last_name,
        phone=Phone(payload.phone) if payload.phone else None,
        status=payload.status,
    )


@router.delete("/{customer_id}")
async def delete_customer(customer_id: uuid.UUID, db: AsyncSession = Depends(get_session)) -> Dict[str, Any]:
    await ProfileService(db).delete_customer(customer_id)
    return {"success": True}
