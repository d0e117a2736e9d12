import uuid
from datetime import datetime
from enum import Enum
from sqlmodel import SQLModel, Field


class Role(str, Enum):
    ADMIN = "admin"
    EMPLOYEE = "employee"


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, index=True)

    email: str = Field(index=True, unique=True)
    name: str = Field(max_length=50)
    hashed_password: str

    role: str = Field(default=Role.EMPLOYEE.value, max_length=20)
    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
