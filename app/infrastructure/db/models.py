"""
SQLAlchemy models for the database.
Maps profiles, products and orders to PostgreSQL tables.
"""

from enum import Enum

from sqlalchemy import (
    Column, Integer, String, DateTime, Text, Boolean,
    Numeric, ForeignKeyConstraint, Enum as SQLEnum, text
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class Currency(str, Enum):
    EUR = "EUR"
    USD = "USD"


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


currency_enum = SQLEnum(Currency, name="currency", values_callable=_enum_values)
user_role_enum = SQLEnum(UserRole, name="user_role", values_callable=_enum_values)

# Money columns: numeric(12, 2)
Money = Numeric(12, 2)

AUTH_SCHEMA = "auth"


class AuthUserModel(Base):
    """Read-only view on Supabase auth.users; never created or written by us."""
    __tablename__ = 'users'
    __table_args__ = {'schema': AUTH_SCHEMA, 'info': {'external': True}}

    id = Column(UUID(as_uuid=True), primary_key=True)
    email = Column(Text)
    created_at = Column(DateTime(timezone=True))


class ProfileModel(Base):
    """Profile table - extends auth.users"""
    __tablename__ = 'profiles'
    __table_args__ = (
        ForeignKeyConstraint(['user_id'], [f'{AUTH_SCHEMA}.users.id'], name='profiles_user_fk'),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, server_default=text("gen_random_uuid()"))
    user_id = Column(UUID(as_uuid=True), nullable=False, unique=True)
    display_name = Column(String(120), nullable=False)
    role = Column(user_role_enum, nullable=False, default=UserRole.USER, server_default=UserRole.USER.value)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("AuthUserModel")
    orders = relationship("OrderModel", back_populates="profile")


class ProductModel(Base):
    """Product table"""
    __tablename__ = 'products'

    id = Column(UUID(as_uuid=True), primary_key=True, server_default=text("gen_random_uuid()"))
    sku = Column(String(64), nullable=False, unique=True)
    name = Column(Text, nullable=False)
    price = Column(Money, nullable=False)
    currency = Column(currency_enum, nullable=False, default=Currency.EUR, server_default=Currency.EUR.value)
    stock = Column(Integer, nullable=False, default=0, server_default=text("0"))
    active = Column(Boolean, nullable=False, default=True, server_default=text("true"))

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    order_items = relationship("OrderItemModel", back_populates="product")


class OrderModel(Base):
    """Order table"""
    __tablename__ = 'orders'
    __table_args__ = (
        ForeignKeyConstraint(['profile_id'], ['profiles.id'], name='orders_profile_fk'),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, server_default=text("gen_random_uuid()"))
    profile_id = Column(UUID(as_uuid=True), nullable=False)
    total = Column(Money, nullable=False)
    currency = Column(currency_enum, nullable=False, default=Currency.EUR, server_default=Currency.EUR.value)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    profile = relationship("ProfileModel", back_populates="orders")
    items = relationship("OrderItemModel", back_populates="order", cascade="all, delete-orphan")


class OrderItemModel(Base):
    """Order line item table"""
    __tablename__ = 'order_items'
    __table_args__ = (
        ForeignKeyConstraint(['order_id'], ['orders.id'], name='order_items_order_fk'),
        ForeignKeyConstraint(['product_id'], ['products.id'], name='order_items_product_fk'),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, server_default=text("gen_random_uuid()"))
    order_id = Column(UUID(as_uuid=True), nullable=False)
    product_id = Column(UUID(as_uuid=True), nullable=False)
    qty = Column(Integer, nullable=False, default=1, server_default=text("1"))
    unit_price = Column(Money, nullable=False)

    # Relationships
    order = relationship("OrderModel", back_populates="items")
    product = relationship("ProductModel", back_populates="order_items")

    @property
    def line_total(self):
        return self.unit_price * self.qty


def managed_tables():
    """Tables owned by this application (excludes auth.users)."""
    return [
        table for table in Base.metadata.sorted_tables
        if not table.info.get('external')
    ]


def create_all_tables(engine) -> None:
    """Create the application tables and enums; auth.users must already exist."""
    Base.metadata.create_all(bind=engine, tables=managed_tables())
