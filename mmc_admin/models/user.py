from sqlmodel import SQLModel, Field, Column, JSON, DateTime
from typing import Optional, Dict, Any
from datetime import datetime
from enum import Enum

from mmc_admin.core.clock import utcnow


class UserRole(str, Enum):
    admin = "admin"
    editor = "editor"


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(unique=True, index=True, max_length=50)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: str = Field(max_length=255)
    role: UserRole = Field(default=UserRole.admin)
    profile: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))

    # Account status
    active: bool = Field(default=True)

    # Security
    login_attempts: int = Field(default=0)
    locked_until: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

    # Timestamps
    last_login: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
