"""
Unit tests for the SQLAlchemy schema definitions.
"""

from decimal import Decimal

import pytest
from sqlalchemy import Numeric
from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateTable

from app.infrastructure.db.database import Base
from app.infrastructure.db.models import (
    AuthUserModel,
    Currency,
    OrderItemModel,
    OrderModel,
    ProductModel,
    ProfileModel,
    UserRole,
    managed_tables,
)


def _fk_names(model):
    return {fk.name for fk in model.__table__.foreign_key_constraints}


def _server_default(model, column):
    default = model.__table__.c[column].server_default
    return str(default.arg) if default is not None else None


class TestSchema:
    """Test cases for the table definitions."""

    def test_tables_are_registered(self):
        assert set(Base.metadata.tables) == {
            "auth.users", "profiles", "products", "orders", "order_items",
        }

    def test_auth_users_is_external(self):
        """Test auth.users is mapped but never created by the application."""
        assert AuthUserModel.__table__.schema == "auth"
        assert AuthUserModel.__table__ not in managed_tables()
        names = [t.name for t in managed_tables()]
        assert set(names) == {"products", "profiles", "orders", "order_items"}
        assert names.index("orders") < names.index("order_items")

    def test_foreign_key_names(self):
        """Test foreign keys carry their explicit names."""
        assert _fk_names(ProfileModel) == {"profiles_user_fk"}
        assert _fk_names(OrderModel) == {"orders_profile_fk"}
        assert _fk_names(OrderItemModel) == {"order_items_order_fk", "order_items_product_fk"}

        target = next(iter(ProfileModel.__table__.foreign_key_constraints)).elements[0].target_fullname
        assert target == "auth.users.id"

    @pytest.mark.parametrize("model, column", [
        (ProductModel, "price"),
        (OrderModel, "total"),
        (OrderItemModel, "unit_price"),
    ])
    def test_money_columns_have_fixed_precision(self, model, column):
        column_type = model.__table__.c[column].type
        assert isinstance(column_type, Numeric)
        assert (column_type.precision, column_type.scale) == (12, 2)
        assert model.__table__.c[column].nullable is False

    def test_defaults(self):
        """Test database-side defaults."""
        assert _server_default(ProductModel, "currency") == "EUR"
        assert _server_default(OrderModel, "currency") == "EUR"
        assert _server_default(ProductModel, "stock") == "0"
        assert _server_default(ProductModel, "active") == "true"
        assert _server_default(OrderItemModel, "qty") == "1"
        assert _server_default(ProfileModel, "role") == "user"
        assert _server_default(ProductModel, "id") == "gen_random_uuid()"
        for model in (ProfileModel, ProductModel, OrderModel):
            assert "now()" in _server_default(model, "created_at")

    def test_unique_columns(self):
        assert ProfileModel.__table__.c.user_id.unique is True
        assert ProductModel.__table__.c.sku.unique is True
        assert ProductModel.__table__.c.sku.type.length == 64
        assert ProfileModel.__table__.c.display_name.type.length == 120

    def test_enum_values(self):
        """Test enums store their lowercase/ISO values, not member names."""
        assert list(ProductModel.__table__.c.currency.type.enums) == ["EUR", "USD"]
        assert list(ProfileModel.__table__.c.role.type.enums) == ["user", "admin"]

    def test_postgres_ddl(self):
        """Test the products DDL compiles for PostgreSQL."""
        ddl = str(CreateTable(ProductModel.__table__).compile(dialect=postgresql.dialect()))

        assert "price NUMERIC(12, 2) NOT NULL" in ddl
        assert "currency currency DEFAULT 'EUR' NOT NULL" in ddl
        assert "UNIQUE (sku)" in ddl


class TestRelationships:
    """Test cases for ORM relationships."""

    def test_order_with_items(self):
        product = ProductModel(sku="SKU-1", name="Demo 1", price=Decimal("19.90"))
        order = OrderModel(total=Decimal("39.80"), currency=Currency.EUR)
        item = OrderItemModel(product=product, unit_price=Decimal("19.90"), qty=2)
        order.items.append(item)

        assert item.order is order
        assert product.order_items == [item]
        assert item.line_total == Decimal("39.80")

    def test_profile_orders(self):
        profile = ProfileModel(display_name="Robert", role=UserRole.ADMIN)
        order = OrderModel(total=Decimal("10.00"))
        profile.orders.append(order)

        assert order.profile is profile
