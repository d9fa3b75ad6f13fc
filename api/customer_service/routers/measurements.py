# customer_service/routers/measurements.py
from __future__ import annotations
import uuid
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from customer_service.auth import get_current_user_id
from customer_service.database import get_session
from customer_service.models import MeasurementCreate, MeasurementOut, MeasurementUpdate
from customer_service.services.measurements import MeasurementService

router = APIRouter(prefix="/api/v1/customer/measurements", tags=["Measurements"])


@router.get("")
async def list_measurements(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> Dict[str, Any]:
    items = await MeasurementService(db).list(user_id)
    return {"measurements": [MeasurementOut.model_validate(m) for m in items], "count": len(items)}


@router.post("", response_model=MeasurementOut, status_code=201)
async def create_measurement(
    payload: MeasurementCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
):
    return await MeasurementService(db).create(user_id, payload.item_fields(), make_default=payload.is_default)


# Must be registered before /{measurement_id}
@router.get("/default", response_model=MeasurementOut)
async def get_default_measurement(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
):
    item = await MeasurementService(db).get_default(user_id)
    if item is None:
        raise HTTPException(404, detail="No default measurement")
    return item


@router.get("/{measurement_id}", response_model=MeasurementOut)
async def get_measurement(
    measurement_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
):
    return await MeasurementService(db).get(user_id, measurement_id)


@router.put("/{measurement_id}", response_model=MeasurementOut)
async def update_measurement(
    measurement_id: uuid.UUID,
    payload: MeasurementUpdate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
):
    return await MeasurementService(db).update(
        user_id, measurement_id, payload.item_fields(), make_default=payload.is_default
    )


@router.delete("/{measurement_id}")
async def delete_measurement(
    measurement_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> Dict[str, Any]:
    await MeasurementService(db).delete(user_id, measurement_id)
    return {"success": True, "message": "Measurement deleted"}


@router.put("/{measurement_id}/default", response_model=MeasurementOut)
@router.put("/{measurement_id}/set-default", response_model=MeasurementOut, include_in_schema=False)
async def set_default_measurement(
    measurement_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
):
    return await MeasurementService(db).set_default(user_id, measurement_id)
