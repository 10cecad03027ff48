"""
Seed the database with sample suppliers and products.

    python seed.py

Existing suppliers and products are removed first. If ADMIN_EMAIL and
ADMIN_PASSWORD are set, an admin account is created as well (skipped when
the email is already registered).
"""

import asyncio
import os

import structlog

from database import PRODUCTS, SUPPLIERS, connect, ensure_indexes
from errors import DuplicateEmail
from logging_config import configure_logging
from repositories import ProductRepository, SupplierRepository, UserRepository
from schemas import Role

logger = structlog.get_logger()

SAMPLE_SUPPLIERS = [
    {
        "name": "TechSupplies Inc.",
        "contactName": "John Smith",
        "email": "john.smith@techsupplies.com",
        "phone": "555-123-4567",
        "address": {"street": "123 Tech Blvd", "city": "San Francisco", "state": "CA", "zipCode": "94107"},
        "country": "USA",
        "supplierType": "manufacturer",
        "paymentTerms": "Net 30",
        "isActive": True,
    },
    {
        "name": "GlobalParts Ltd.",
        "contactName": "Emma Johnson",
        "email": "emma@globalparts.com",
        "phone": "555-234-5678",
        "address": {"street": "456 Global Ave", "city": "New York", "state": "NY", "zipCode": "10001"},
        "country": "USA",
        "supplierType": "distributor",
        "paymentTerms": "Net 45",
        "isActive": True,
    },
    {
        "name": "EuroComponents GmbH",
        "contactName": "Lukas Weber",
        "email": "l.weber@eurocomponents.de",
        "phone": "+49-30-1234567",
        "address": {"street": "Industriestrasse 12", "city": "Berlin", "state": "BE", "zipCode": "10115"},
        "country": "Germany",
        "supplierType": "wholesaler",
        "paymentTerms": "Net 60",
        "isActive": False,
    },
]

# supplier index -> products
SAMPLE_PRODUCTS = [
    (0, {
        "name": "UltraWide Gaming Monitor",
        "description": "34-inch curved ultrawide monitor with 144Hz refresh rate",
        "price": 549.99,
        "stock": 17,
        "category": "Electronics",
        "tags": ["monitor", "gaming", "ultrawide"],
        "dimensions": {"height": 16.9, "width": 32.2, "depth": 9.1, "unit": "inches"},
        "weight": 16.5,
        "isAvailable": True,
        "imageUrl": "https://example.com/monitor.jpg",
    }),
    (1, {
        "name": "Wireless Charging Pad",
        "description": "Fast-charging wireless pad compatible with all Qi devices",
        "price": 39.99,
        "stock": 120,
        "category": "Accessories",
        "tags": ["charger", "wireless", "mobile"],
        "dimensions": {"height": 0.4, "width": 3.5, "depth": 3.5, "unit": "inches"},
        "weight": 0.22,
        "isAvailable": True,
        "imageUrl": "https://example.com/charger.jpg",
    }),
    (2, {
        "name": "Mechanical Keyboard",
        "description": "RGB backlit mechanical keyboard with customizable keys",
        "price": 159.99,
        "discountPercentage": 10,
        "stock": 0,
        "category": "Accessories",
        "tags": ["keyboard", "mechanical", "gaming"],
        "isAvailable": False,
    }),
]


async def seed(db) -> dict:
    await db[SUPPLIERS].delete_many({})
    await db[PRODUCTS].delete_many({})

    suppliers = SupplierRepository(db)
    products = ProductRepository(db)

    supplier_ids = [(await suppliers.create(s))["id"] for s in SAMPLE_SUPPLIERS]
    for index, product in SAMPLE_PRODUCTS:
        await products.create({**product, "supplierId": supplier_ids[index]})

    admin_email = os.getenv("ADMIN_EMAIL")
    admin_password = os.getenv("ADMIN_PASSWORD")
    if admin_email and admin_password:
        try:
            await UserRepository(db).create({
                "name": "Administrator",
                "email": admin_email,
                "password": admin_password,
                "roles": [Role.ADMIN, Role.USER],
            })
        except DuplicateEmail:
            logger.info("admin_exists", email=admin_email)

    counts = {"suppliers": len(supplier_ids), "products": len(SAMPLE_PRODUCTS)}
    logger.info("seed_complete", **counts)
    return counts


async def main():
    configure_logging()
    client, db = connect()
    try:
        await ensure_indexes(db)
        await seed(db)
    finally:
        await client.close()


if __name__ == "__main__":
    asyncio.run(main())
