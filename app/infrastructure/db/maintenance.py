"""
Destructive and seeding operations used by manage_db.py.
"""

import logging
from decimal import Decimal
from typing import List

from sqlalchemy import select, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from .models import ProductModel


logger = logging.getLogger(__name__)


RESET_PUBLIC_SCHEMA_STATEMENTS = [
    "DROP SCHEMA IF EXISTS public CASCADE",
    "CREATE SCHEMA public",
    "GRANT ALL ON SCHEMA public TO postgres",
    "GRANT ALL ON SCHEMA public TO public",
    "COMMENT ON SCHEMA public IS 'standard public schema'",
]

DEMO_PRODUCTS = [
    {"sku": "SKU-1", "name": "Demo 1", "price": Decimal("19.90")},
    {"sku": "SKU-2", "name": "Demo 2", "price": Decimal("29.90")},
]


def reset_public_schema(engine: Engine) -> None:
    """
    Drop and recreate the public schema.
    WARNING: This removes every table, enum and row in public.
    """
    with engine.begin() as conn:
        for statement in RESET_PUBLIC_SCHEMA_STATEMENTS:
            conn.execute(text(statement))
    logger.info("Reset schema public")


def seed_demo_products(session: Session) -> List[ProductModel]:
    """Insert the demo products that are not present yet."""
    existing = set(session.scalars(
        select(ProductModel.sku).where(ProductModel.sku.in_([p["sku"] for p in DEMO_PRODUCTS]))
    ))

    created = [ProductModel(**product) for product in DEMO_PRODUCTS if product["sku"] not in existing]
    session.add_all(created)
    session.commit()

    logger.info(f"Seeded {len(created)} product(s), {len(existing)} already present")
    return created
