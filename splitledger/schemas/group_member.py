# splitledger/schemas/group_member.py
from datetime import datetime

from pydantic import BaseModel, constr

from .user import MemberOut


class GroupMemberCreate(BaseModel):
    group_id: int
    user_id: int


class GroupMemberByEmail(BaseModel):
    group_id: int
    email: constr(strip_whitespace=True, min_length=3)


class GroupMemberByPhone(BaseModel):
    group_id: int
    phone: constr(strip_whitespace=True, min_length=1)


class GroupMemberByName(BaseModel):
    group_id: int
    name: constr(strip_whitespace=True, min_length=1)


class GroupMemberOut(BaseModel):
    id: int
    group_id: int
    joined_at: datetime
    user: MemberOut

    class Config:
        from_attributes = True
