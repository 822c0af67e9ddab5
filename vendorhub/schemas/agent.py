from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field

AgentRole = Literal["agent", "employee"]


class AgentCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    username: str = Field(min_length=3, max_length=120)
    password: str = Field(min_length=8, max_length=200)
    email: EmailStr | None = None
    role: AgentRole = "agent"


class AgentUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    username: str | None = Field(default=None, min_length=3, max_length=120)
    password: str | None = Field(default=None, min_length=8, max_length=200)
    email: EmailStr | None = None
    role: AgentRole | None = None
    is_active: bool | None = None


class AgentOut(BaseModel):
    id: str
    name: str
    username: str
    email: EmailStr | None
    role: str
    is_active: bool
    created_at: datetime | None


class AgentListOut(BaseModel):
    items: list[AgentOut]
    count: int


class AgentDeleteOut(BaseModel):
    id: str
    # vendors that pointed at the agent and are now unassigned
    unassigned_vendors: int
