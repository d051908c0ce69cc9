"""Schema exports."""

from qrmenu.schemas.auth import AuthUserResponse, LoginRequest, TokenResponse
from qrmenu.schemas.cart import CartAddRequest, CartLineItem, CartResponse, CartUpdateRequest, SelectedOption
from qrmenu.schemas.menu import (
    CategoryCreate,
    CategoryRead,
    DishCreate,
    DishDetail,
    DishRead,
    DishUpdate,
    KidsMenuTile,
    MenuSection,
    OptionCreate,
    OptionGroupCreate,
    OptionGroupRead,
    OptionGroupUpdate,
    OptionRead,
    OptionUpdate,
)
from qrmenu.schemas.order import OrderAction, OrderAdvanceRequest, OrderChangeEvent, OrderItemRead, OrderRead
from qrmenu.schemas.session import SessionContext, TableScanRequest
from qrmenu.schemas.table import TableCreate, TableRead
from qrmenu.schemas.user import UserCreate, UserRead

__all__ = [
    "AuthUserResponse",
    "LoginRequest",
    "TokenResponse",
    "CartAddRequest",
    "CartLineItem",
    "CartResponse",
    "CartUpdateRequest",
    "SelectedOption",
    "CategoryCreate",
    "CategoryRead",
    "DishCreate",
    "DishDetail",
    "DishRead",
    "DishUpdate",
    "KidsMenuTile",
    "MenuSection",
    "OptionCreate",
    "OptionGroupCreate",
    "OptionGroupRead",
    "OptionGroupUpdate",
    "OptionRead",
    "OptionUpdate",
    "OrderAction",
    "OrderAdvanceRequest",
    "OrderChangeEvent",
    "OrderItemRead",
    "OrderRead",
    "SessionContext",
    "TableScanRequest",
    "TableCreate",
    "TableRead",
    "UserCreate",
    "UserRead",
]
