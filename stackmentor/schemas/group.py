from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from stackmentor.models.group import GROUP_NAME_MAX
from stackmentor.models.membership import GroupMemberType

class GroupCreate(BaseModel):
    name: str = Field(min_length=1, max_length=GROUP_NAME_MAX)
    description: Optional[str] = None

class MemberAdd(BaseModel):
    user_id: int
    role: Optional[GroupMemberType] = None

class GroupMemberView(BaseModel):
    user_id: int
    name: str
    role: GroupMemberType
    joined_at: datetime

class GroupView(BaseModel):
    group_id: int
    group_name: str
    description: Optional[str] = None
    created_by: int
    created_at: datetime
    members: List[GroupMemberView] = []

class GroupPublic(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    created_by: int
    created_at: datetime

    class Config:
        from_attributes = True
