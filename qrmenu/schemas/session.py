"""Table session schemas."""

from pydantic import BaseModel, ConfigDict, Field


class SessionContext(BaseModel):
    """Table and restaurant the diner is sitting at."""

    table_number: int = Field(ge=1)
    restaurant_id: int

    model_config = ConfigDict(frozen=True)


class TableScanRequest(BaseModel):
    """Payload sent after scanning the QR code on a table."""

    qr_code_data: str = Field(min_length=1)
