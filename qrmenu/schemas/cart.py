"""Cart records kept in the diner session."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, computed_field

COMMENT_MAX_LENGTH = 200


class SelectedOption(BaseModel):
    """Option chosen for one cart line, with its price resolved."""

    group_id: int
    group_name: str
    option_id: int
    option_name: str
    price_modifier: Decimal

    model_config = ConfigDict(frozen=True)


class CartLineRef(BaseModel):
    """Compact form of a cart line kept in the session cookie.

    Names and option details are read back from the catalog; only the unit
    price fixed at add time travels with the reference.
    """

    dish_id: int
    option_ids: list[int] = Field(default_factory=list)
    quantity: int = Field(default=1, ge=1)
    comment: str | None = None
    unit_price: Decimal


class CartLineItem(BaseModel):
    """Priced, quantified cart entry."""

    dish_id: int
    dish_name: str
    base_price: Decimal
    quantity: int = Field(default=1, ge=1)
    selected_options: list[SelectedOption] = Field(default_factory=list)
    comment: str | None = None
    unit_price: Decimal

    @computed_field  # type: ignore[prop-decorator]
    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


class CartAddRequest(BaseModel):
    """Dish plus the option ids picked in the customization dialog."""

    dish_id: int
    option_ids: list[int] = Field(default_factory=list)
    comment: str | None = Field(default=None, max_length=COMMENT_MAX_LENGTH)


class CartUpdateRequest(BaseModel):
    """New quantity and comment for a cart line; quantity 0 removes it."""

    quantity: int = Field(ge=0)
    comment: str | None = Field(default=None, max_length=COMMENT_MAX_LENGTH)


class CartResponse(BaseModel):
    """Serialized cart."""

    table_number: int
    items: list[CartLineItem]
    total_item_count: int
    total: Decimal
