"""
Persistence: SQLAlchemy tables and the async session factory.

    from storefront import db

    session_factory, engine = await db.create_database(settings.database_url)
    async with session_factory() as session:
        async with session.begin():
            ...
"""

from storefront.db._models import (
    Base,
    TimestampMixin,
    UserTable,
    AddressTable,
    ProductTable,
    VariantTable,
    CartTable,
    CartLineTable,
    OrderTable,
    OrderLineTable,
    PaymentTable,
)
from storefront.db._session import create_engine, create_database

__all__ = (
    # Tables
    "Base",
    "TimestampMixin",
    "UserTable",
    "AddressTable",
    "ProductTable",
    "VariantTable",
    "CartTable",
    "CartLineTable",
    "OrderTable",
    "OrderLineTable",
    "PaymentTable",
    # Setup
    "create_engine",
    "create_database",
)
