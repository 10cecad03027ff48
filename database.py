"""
Database helpers

The MongoDB client is created once in the application lifespan and kept on
``app.state.db``; repositories receive the database handle explicitly.
"""

import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import structlog
from bson import ObjectId
from fastapi import Request
from pymongo import ASCENDING, AsyncMongoClient

from errors import StoreUnavailable

logger = structlog.get_logger()

PRODUCTS = "products"
SUPPLIERS = "suppliers"
USERS = "users"


def is_valid_id(value: Any) -> bool:
    if isinstance(value, ObjectId):
        return True
    # ObjectId.is_valid also accepts 12-byte strings; only hex ids come in from outside
    return isinstance(value, str) and len(value) == 24 and ObjectId.is_valid(value)


def to_object_id(value: Any) -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    return ObjectId(value)


def utc_now() -> str:
    """Current instant as an ISO-8601 string, e.g. 2025-01-31T12:00:00.000Z"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def serialize_doc(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not doc:
        return doc
    d = dict(doc)
    if "_id" in d:
        d["id"] = str(d.pop("_id"))
    for k, v in list(d.items()):
        if isinstance(v, ObjectId):
            d[k] = str(v)
    return d


def connect(url: Optional[str] = None, name: Optional[str] = None):
    """Open a client and return ``(client, database)``."""
    url = url or os.getenv("DATABASE_URL", "mongodb://localhost:27017")
    name = name or os.getenv("DATABASE_NAME", "inventory")
    client = AsyncMongoClient(url)
    logger.info("database_client_created", database=name)
    return client, client[name]


async def ensure_indexes(db) -> None:
    users = db[USERS]
    await users.create_index([("email", ASCENDING)], unique=True)
    await users.create_index([("githubId", ASCENDING)], unique=True, sparse=True)
    await db[PRODUCTS].create_index([("supplierId", ASCENDING)])


async def create_document(collection, data: Dict[str, Any]) -> Dict[str, Any]:
    """Insert ``data`` stamped with ``createdAt`` and return the stored document."""
    doc = dict(data)
    doc["createdAt"] = utc_now()
    result = await collection.insert_one(doc)
    doc["_id"] = result.inserted_id
    return doc


async def get_documents(collection, filter_dict: Optional[Dict[str, Any]] = None, limit: Optional[int] = None):
    cursor = collection.find(filter_dict or {})
    if limit:
        cursor = cursor.limit(limit)
    return await cursor.to_list()


def get_db(request: Request):
    db = getattr(request.app.state, "db", None)
    if db is None:
        raise StoreUnavailable()
    return db
