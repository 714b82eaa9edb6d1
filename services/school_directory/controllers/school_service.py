import logging
import re
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response, status
from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from services.school_directory.models.schools import School
from services.school_directory.schemas.schools import (
    MessageOut,
    SchoolCreate,
    SchoolCreated,
    SchoolDelete,
    SchoolOut,
    SchoolUpdate,
)
from shared.db import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/schools", tags=["Schools"])

CONTACT_NUMBER_PATTERN = re.compile(r"^[0-9]{10}$")
EMAIL_PATTERN = re.compile(r"^[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}$", re.IGNORECASE)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _check_school_fields(payload: SchoolCreate):
    if _is_blank(payload.name) or _is_blank(payload.city) or _is_blank(payload.state):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required fields"
        )

    # Contact details are optional, but must be well formed when given
    if payload.contact_number and not CONTACT_NUMBER_PATTERN.match(payload.contact_number):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Contact number must be 10 digits"
        )
    if payload.email and not EMAIL_PATTERN.match(payload.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid email address"
        )


# --- LIST SCHOOLS ---
@router.get("", response_model=List[SchoolOut])
async def list_schools(db: AsyncSession = Depends(get_db)):
    try:
        result = await db.execute(select(School).order_by(School.id.desc()))
        return result.scalars().all()
    except SQLAlchemyError:
        logger.exception("GET /schools failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch schools"
        )


# --- ADD SCHOOL ---
@router.post("", response_model=SchoolCreated, status_code=status.HTTP_201_CREATED)
async def create_school(payload: SchoolCreate, db: AsyncSession = Depends(get_db)):
    _check_school_fields(payload)

    new_school = School(
        name=payload.name,
        address=payload.address,
        city=payload.city,
        state=payload.state,
        contact_number=payload.contact_number,
        email=payload.email,
        image=payload.image,
    )
    db.add(new_school)
    try:
        await db.commit()
        await db.refresh(new_school)
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("POST /schools failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to add school"
        )

    logger.info(f"Added school {new_school.id} ({new_school.name})")
    return SchoolCreated(id=new_school.id, message="School added successfully")


# --- EDIT SCHOOL ---
@router.put("", response_model=MessageOut)
async def update_school(payload: SchoolUpdate, db: AsyncSession = Depends(get_db)):
    if not payload.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required fields"
        )
    _check_school_fields(payload)

    values = {
        "name": payload.name,
        "address": payload.address,
        "city": payload.city,
        "state": payload.state,
        "contact_number": payload.contact_number,
        "email": payload.email,
    }
    # An omitted image keeps whatever is already stored
    if payload.image:
        values["image"] = payload.image

    try:
        result = await db.execute(
            update(School).where(School.id == payload.id).values(**values)
        )
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("PUT /schools failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update school"
        )

    if result.rowcount == 0:
        logger.warning(f"PUT /schools matched no row for id={payload.id}")
    return MessageOut(message="School updated successfully")


# --- DELETE SCHOOL ---
@router.delete("", response_model=MessageOut)
async def delete_school(
    id: Optional[int] = Query(None),
    payload: Optional[SchoolDelete] = Body(None),
    db: AsyncSession = Depends(get_db)
):
    # Generated ids start at 1, so 0 counts as missing
    school_id = id or (payload.id if payload else None)
    if not school_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="School ID is required"
        )

    try:
        result = await db.execute(delete(School).where(School.id == school_id))
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("DELETE /schools failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete school"
        )

    if result.rowcount == 0:
        logger.warning(f"DELETE /schools matched no row for id={school_id}")
    return MessageOut(message="School deleted successfully")


# --- PREFLIGHT ---
@router.options("")
async def schools_options():
    return Response(status_code=status.HTTP_200_OK)
