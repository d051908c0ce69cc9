"""Application models package."""

from qrmenu.models.menu import Category, Dish, Option, OptionGroup
from qrmenu.models.order import Order, OrderItem
from qrmenu.models.restaurant import DiningTable, Restaurant
from qrmenu.models.user import User

__all__ = [
    "Category", "Dish", "Option", "OptionGroup", "Order", "OrderItem", "DiningTable", "Restaurant", "User",
]
