"""
MongoDB access for the checkout service.

Collections are named after the lowercase schema class: Product -> "product",
Customer -> "customer", Order -> "order".
"""

import logging
import os
from datetime import datetime, timezone
from typing import Optional, Union

from bson.errors import InvalidId
from bson.objectid import ObjectId
from pydantic import BaseModel
from pymongo import MongoClient, ReturnDocument

from errors import DatabaseUnavailableError

log = logging.getLogger(__name__)

_client = None
db = None

database_url = os.getenv("DATABASE_URL")
database_name = os.getenv("DATABASE_NAME")

if database_url and database_name:
    _client = MongoClient(database_url, tz_aware=True)
    db = _client[database_name]


def _require_db():
    if db is None:
        raise DatabaseUnavailableError(
            "Database not available. Check DATABASE_URL and DATABASE_NAME environment variables."
        )
    return db


def to_object_id(value) -> Optional[ObjectId]:
    """Parse a string id into an ObjectId, or None if it is not one."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def to_str_id(doc: Optional[dict]):
    if not doc:
        return doc
    d = doc.copy()
    if "_id" in d:
        d["id"] = str(d.pop("_id"))
    return d


# -----------
# Generic CRUD
# -----------

def create_document(collection_name: str, data: Union[BaseModel, dict]) -> str:
    """Insert a document, stamping created_at/updated_at. Returns the new id."""
    database = _require_db()
    if isinstance(data, BaseModel):
        data_dict = data.model_dump()
    else:
        data_dict = data.copy()
    now = datetime.now(timezone.utc)
    data_dict["created_at"] = now
    data_dict["updated_at"] = now
    result = database[collection_name].insert_one(data_dict)
    return str(result.inserted_id)


def get_documents(collection_name: str, filter_dict: Optional[dict] = None, limit: Optional[int] = None):
    database = _require_db()
    cursor = database[collection_name].find(filter_dict or {})
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def get_document(collection_name: str, filter_dict: dict) -> Optional[dict]:
    return _require_db()[collection_name].find_one(filter_dict)


def delete_document(collection_name: str, document_id: str) -> bool:
    oid = to_object_id(document_id)
    if oid is None:
        return False
    result = _require_db()[collection_name].delete_one({"_id": oid})
    return result.deleted_count == 1


# ---------
# Products
# ---------

def _product_filter(product_id) -> dict:
    # Seeded rows may carry their own string "id" next to Mongo's _id
    oid = to_object_id(product_id)
    if oid is not None:
        return {"_id": oid}
    return {"id": str(product_id)}


def find_product(product_id) -> Optional[dict]:
    database = _require_db()
    doc = database["product"].find_one(_product_filter(product_id))
    if doc is None and to_object_id(product_id) is not None:
        doc = database["product"].find_one({"id": str(product_id)})
    return doc


def decrement_inventory(product_key, quantity: int) -> Optional[dict]:
    """
    Atomically take `quantity` units from a product's inventory.

    The filter only matches while inventory >= quantity, so concurrent callers
    can never drive it below zero. Returns the updated document, or None when
    the stock was not there (or the product vanished).
    """
    return _require_db()["product"].find_one_and_update(
        {"_id": product_key, "inventory": {"$gte": quantity}},
        {"$inc": {"inventory": -quantity}, "$set": {"updated_at": datetime.now(timezone.utc)}},
        return_document=ReturnDocument.AFTER,
    )


def increment_inventory(product_key, quantity: int) -> None:
    _require_db()["product"].update_one(
        {"_id": product_key},
        {"$inc": {"inventory": quantity}, "$set": {"updated_at": datetime.now(timezone.utc)}},
    )


def ensure_indexes() -> None:
    if db is None:
        log.warning("Database not configured; skipping index creation")
        return
    db["order"].create_index("order_number", unique=True)
