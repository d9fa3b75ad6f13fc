# customer_service/routers/profile.py
from __future__ import annotations
import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from customer_service.auth import get_current_user_id
from customer_service.database import get_session
from customer_service.models import ProfileIn, ProfileOut
from customer_service.services.profile import ProfileService

router = APIRouter(prefix="/api/v1/customer/profile", tags=["Profile"])


@router.get("", response_model=ProfileOut)
async def get_profile(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
):
    return await ProfileService(db).get(user_id)


@router.put("", response_model=ProfileOut)
async def put_profile(
    payload: ProfileIn,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
):
    """Create or replace the caller's profile; invalid email/phone/name -> 400."""
    email, name, phone = payload.value_objects()
    return await ProfileService(db).upsert(user_id, email, name, phone=phone, status=payload.status)
