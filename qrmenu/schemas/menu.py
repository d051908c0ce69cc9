"""Menu and catalog API schemas."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class OptionRead(BaseModel):
    """Serialized option inside a group."""

    id: int
    option_group_id: int
    name: str
    price_modifier: Decimal
    display_order: int = 0

    model_config = ConfigDict(from_attributes=True)


class OptionGroupRead(BaseModel):
    """Serialized option group with its ordered options."""

    id: int
    dish_id: int | None = None
    category: str | None = None
    name: str
    is_required: bool
    allow_multiple: bool
    display_order: int = 0
    options: list[OptionRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class DishRead(BaseModel):
    """Serialized dish."""

    id: int
    restaurant_id: int
    name: str
    description: str | None = None
    price: Decimal = Field(ge=0)
    category: str
    image_url: str | None = None
    is_available: bool

    model_config = ConfigDict(from_attributes=True)


class DishDetail(DishRead):
    """Dish with the option groups a diner has to go through."""

    option_groups: list[OptionGroupRead] = Field(default_factory=list)


class MenuSection(BaseModel):
    """Dishes of one category, in menu order."""

    category: str
    dishes: list[DishRead]


class KidsMenuTile(BaseModel):
    """One big button on the kids menu: a category and the dish behind it."""

    category: str
    theme: str
    emoji: str
    dish: DishRead


class DishCreate(BaseModel):
    """Payload for creating a dish."""

    name: str = Field(min_length=1)
    description: str | None = None
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    category: str = Field(min_length=1)
    image_url: str | None = None
    is_available: bool = True


class DishUpdate(BaseModel):
    """Partial dish update."""

    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    category: str | None = Field(default=None, min_length=1)
    image_url: str | None = None
    is_available: bool | None = None


class CategoryCreate(BaseModel):
    """Payload for creating a menu category."""

    name: str = Field(min_length=1)
    emoji: str | None = None
    display_order: int = 0


class CategoryRead(BaseModel):
    """Serialized menu category."""

    id: int
    name: str
    emoji: str | None = None
    display_order: int

    model_config = ConfigDict(from_attributes=True)


class OptionGroupCreate(BaseModel):
    """Payload for creating an option group on a dish or on a category."""

    dish_id: int | None = None
    category: str | None = None
    name: str = Field(min_length=1)
    is_required: bool = False
    allow_multiple: bool = False
    display_order: int = 0

    @model_validator(mode="after")
    def check_single_parent(self) -> "OptionGroupCreate":
        if (self.dish_id is None) == (self.category is None):
            raise ValueError("Option group needs exactly one of dish_id or category")
        return self


class OptionGroupUpdate(BaseModel):
    """Partial option group update."""

    name: str | None = Field(default=None, min_length=1)
    is_required: bool | None = None
    allow_multiple: bool | None = None
    display_order: int | None = None


class OptionCreate(BaseModel):
    """Payload for creating an option."""

    option_group_id: int
    name: str = Field(min_length=1)
    price_modifier: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)
    display_order: int = 0


class OptionUpdate(BaseModel):
    """Partial option update."""

    name: str | None = Field(default=None, min_length=1)
    price_modifier: Decimal | None = Field(default=None, max_digits=10, decimal_places=2)
    display_order: int | None = None
