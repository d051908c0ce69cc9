"""Dining table schemas."""

from pydantic import BaseModel, ConfigDict, Field


class TableCreate(BaseModel):
    """Payload for creating a table."""

    table_number: int = Field(ge=1)


class TableRead(BaseModel):
    """Serialized table."""

    id: int
    restaurant_id: int
    table_number: int
    qr_code_data: str
    is_active: bool

    model_config = ConfigDict(from_attributes=True)
