# services/school_directory/schemas/schools.py

from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class SchoolCreate(BaseModel):
    # Required fields are checked by the controller so a missing one is a 400
    name: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    contact_number: Optional[str] = None
    email: Optional[str] = None
    image: Optional[str] = None


class SchoolUpdate(SchoolCreate):
    id: Optional[int] = None


class SchoolDelete(BaseModel):
    id: Optional[int] = None


class SchoolOut(BaseModel):
    id: int
    name: str
    address: Optional[str]
    city: Optional[str]
    state: Optional[str]
    contact_number: Optional[str]
    email: Optional[str]
    image: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class SchoolCreated(BaseModel):
    id: int
    message: str


class MessageOut(BaseModel):
    message: str


class UploadOut(BaseModel):
    message: str
    path: str
    public_id: str
