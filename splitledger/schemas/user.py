# splitledger/schemas/user.py

from pydantic import BaseModel, Field, validator
from typing import Optional
from datetime import datetime


class MemberOut(BaseModel):
    """Короткая карточка участника: для балансов, settle-up, поиска и составов групп."""
    id: int
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    photo_url: Optional[str] = None

    class Config:
        from_attributes = True


class UserOut(MemberOut):
    telegram_id: int
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    language_code: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class UserContactsUpdate(BaseModel):
    email: Optional[str] = Field(default=None, max_length=320)
    phone: Optional[str] = Field(default=None, max_length=32)

    @validator("email")
    def _check_email(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip().lower()
        if v and ("@" not in v or v.startswith("@") or v.endswith("@")):
            raise ValueError("Invalid email")
        return v or None
