"""
Repositories

One class per collection. Each takes the database handle it works against,
checks identifiers before any store call, and returns serialized documents
(``id`` instead of ``_id``, ObjectIds as strings).
"""

from typing import Any, Dict, List, Optional

import structlog
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from database import (
    PRODUCTS,
    SUPPLIERS,
    USERS,
    create_document,
    get_documents,
    is_valid_id,
    serialize_doc,
    to_object_id,
    utc_now,
)
from errors import DuplicateEmail, InvalidIdentifier, NotFound
from schemas import Profile, Role
from security import hash_password

logger = structlog.get_logger()


class Repository:
    collection_name: str = ""
    kind: str = ""
    # Fields the caller may never set directly
    protected_fields = ("_id", "id", "createdAt", "updatedAt")
    # Extra fields ignored on update only
    immutable_fields: tuple = ()

    def __init__(self, db):
        self.db = db

    @property
    def collection(self):
        return self.db[self.collection_name]

    def _object_id(self, value: Any, kind: Optional[str] = None):
        if not is_valid_id(value):
            raise InvalidIdentifier(kind or self.kind)
        return to_object_id(value)

    def _clean(self, payload: Dict[str, Any], extra: tuple = ()) -> Dict[str, Any]:
        drop = set(self.protected_fields) | set(extra)
        return {k: v for k, v in payload.items() if k not in drop}

    def _coerce(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return data

    def _serialize(self, doc):
        return serialize_doc(doc)

    async def find_all(self) -> List[Dict[str, Any]]:
        return [self._serialize(d) for d in await get_documents(self.collection)]

    async def find_by_id(self, id: Any) -> Optional[Dict[str, Any]]:
        oid = self._object_id(id)
        return self._serialize(await self.collection.find_one({"_id": oid}))

    async def create(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = self._coerce(self._clean(payload))
        doc = await create_document(self.collection, data)
        logger.info("document_created", collection=self.collection_name, id=str(doc["_id"]))
        return self._serialize(doc)

    async def _apply_update(self, oid, changes: Dict[str, Any]) -> Dict[str, Any]:
        changes["updatedAt"] = utc_now()
        doc = await self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise NotFound(self.kind)
        logger.info("document_updated", collection=self.collection_name, id=str(oid), fields=sorted(changes))
        return doc

    async def update(self, id: Any, payload: Dict[str, Any]) -> Dict[str, Any]:
        oid = self._object_id(id)
        changes = self._coerce(self._clean(payload, self.immutable_fields))
        return self._serialize(await self._apply_update(oid, changes))

    async def delete(self, id: Any) -> bool:
        oid = self._object_id(id)
        result = await self.collection.delete_one({"_id": oid})
        if result.deleted_count == 0:
            raise NotFound(self.kind)
        logger.info("document_deleted", collection=self.collection_name, id=str(oid))
        return True


class ProductRepository(Repository):
    collection_name = PRODUCTS
    kind = "product"

    def _coerce(self, data):
        supplier_id = data.get("supplierId")
        # Malformed references are rejected by the validator, not here
        if supplier_id and is_valid_id(supplier_id):
            data["supplierId"] = to_object_id(supplier_id)
        return data

    async def find_by_supplier(self, supplier_id: Any) -> List[Dict[str, Any]]:
        oid = self._object_id(supplier_id, "supplier")
        docs = await get_documents(self.collection, {"supplierId": oid})
        return [self._serialize(d) for d in docs]


class SupplierRepository(Repository):
    collection_name = SUPPLIERS
    kind = "supplier"


class UserRepository(Repository):
    collection_name = USERS
    kind = "user"
    immutable_fields = ("password", "githubId", "roles")

    @staticmethod
    def sanitize(doc):
        if doc is None:
            return None
        doc = {k: v for k, v in doc.items() if k != "password"}
        return serialize_doc(doc)

    def _serialize(self, doc):
        return self.sanitize(doc)

    async def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """Raw document including the password hash. Only for credential checks."""
        if not isinstance(email, str):
            return None
        return await self.collection.find_one({"email": email.lower()})

    async def find_by_github_id(self, github_id: str) -> Optional[Dict[str, Any]]:
        return self.sanitize(await self.collection.find_one({"githubId": github_id}))

    async def _insert(self, data: Dict[str, Any]) -> Dict[str, Any]:
        try:
            doc = await create_document(self.collection, data)
        except DuplicateKeyError:
            raise DuplicateEmail()
        logger.info("user_created", id=str(doc["_id"]), oauth="githubId" in doc)
        return self.sanitize(doc)

    async def create(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = self._clean(payload, ("password",))
        data["email"] = data["email"].lower()
        if await self.find_by_email(data["email"]):
            raise DuplicateEmail()

        password = payload.get("password")
        if password:
            data["password"] = await hash_password(password)
        data["roles"] = [Role(r).value for r in data.get("roles") or [Role.USER]]
        return await self._insert(data)

    async def update(self, id: Any, payload: Dict[str, Any]) -> Dict[str, Any]:
        oid = self._object_id(id)
        # null means "leave as is", matching partial validation
        changes = {k: v for k, v in self._clean(payload, self.immutable_fields).items() if v is not None}
        if changes.get("email"):
            changes["email"] = changes["email"].lower()
            existing = await self.find_by_email(changes["email"])
            if existing and existing["_id"] != oid:
                raise DuplicateEmail()
        try:
            doc = await self._apply_update(oid, changes)
        except DuplicateKeyError:
            raise DuplicateEmail()
        return self.sanitize(doc)

    async def find_or_create_from_profile(self, profile: Profile) -> Dict[str, Any]:
        name = profile.display_name or profile.username or profile.provider_id
        avatar = profile.photos[0] if profile.photos else None

        existing = await self.collection.find_one({"githubId": profile.provider_id})
        if existing:
            changes: Dict[str, Any] = {"name": name}
            if avatar:
                changes["avatar"] = avatar
            return self.sanitize(await self._apply_update(existing["_id"], changes))

        email = profile.emails[0] if profile.emails else f"{profile.username or profile.provider_id}@github.com"
        data = {
            "githubId": profile.provider_id,
            "name": name,
            "email": email.lower(),
            "roles": [Role.USER.value],
        }
        if avatar:
            data["avatar"] = avatar
        return await self._insert(data)
