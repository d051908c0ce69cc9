"""Staff user schemas."""

from pydantic import BaseModel, ConfigDict, Field


class UserCreate(BaseModel):
    """Payload for creating a staff account."""

    username: str = Field(min_length=1)
    email: str | None = None
    password: str = Field(min_length=4)
    role: str


class UserRead(BaseModel):
    """Serialized staff account."""

    id: int
    username: str
    email: str | None = None
    role: str
    is_active: bool

    model_config = ConfigDict(from_attributes=True)
