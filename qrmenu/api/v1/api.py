"""API v1 router composition."""

from fastapi import APIRouter

from qrmenu.api.v1.endpoints import admin, auth, cart, menu, orders, session, tables, users

api_router: APIRouter = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(menu.router, prefix="/menu", tags=["menu"])
api_router.include_router(session.router, prefix="/session", tags=["session"])
api_router.include_router(cart.router, prefix="/cart", tags=["cart"])
api_router.include_router(orders.router, prefix="/orders", tags=["orders"])
api_router.include_router(tables.router, prefix="/tables", tags=["tables"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
