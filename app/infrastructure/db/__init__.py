"""
Database infrastructure: engine, sessions, models and maintenance.
"""

from .database import Base, SessionLocal, get_db, get_engine, get_session_factory
from .models import (
    AuthUserModel,
    Currency,
    OrderItemModel,
    OrderModel,
    ProductModel,
    ProfileModel,
    UserRole,
)

__all__ = [
    "Base",
    "SessionLocal",
    "get_db",
    "get_engine",
    "get_session_factory",
    "AuthUserModel",
    "Currency",
    "OrderItemModel",
    "OrderModel",
    "ProductModel",
    "ProfileModel",
    "UserRole",
]
