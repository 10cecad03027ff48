import copy
from types import SimpleNamespace

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from main import create_app
from oauth import OAuthError
from schemas import Profile

_MISSING = object()


class FakeCursor:
    def __init__(self, docs):
        self.docs = docs

    def limit(self, n):
        self.docs = self.docs[:n]
        return self

    async def to_list(self, length=None):
        return self.docs if length is None else self.docs[:length]


class FakeCollection:
    """Just enough of pymongo's async collection API for the repositories."""

    def __init__(self, name):
        self.name = name
        self.docs = []
        self.unique = {}
        self.calls = []

    def _matches(self, doc, filter_dict):
        return all(doc.get(k, _MISSING) == v for k, v in (filter_dict or {}).items())

    def _check_unique(self, candidate, skip=None):
        for field, sparse in self.unique.items():
            value = candidate.get(field, _MISSING)
            if value is _MISSING and sparse:
                continue
            for doc in self.docs:
                if doc is skip:
                    continue
                if doc.get(field, _MISSING) == value:
                    raise DuplicateKeyError(f"E11000 duplicate key error collection: {self.name} index: {field}_1")

    async def create_index(self, keys, unique=False, sparse=False):
        self.calls.append("create_index")
        if unique:
            self.unique[keys[0][0]] = sparse
        return f"{keys[0][0]}_1"

    async def insert_one(self, doc):
        self.calls.append("insert_one")
        doc.setdefault("_id", ObjectId())
        self._check_unique(doc)
        self.docs.append(copy.deepcopy(doc))
        return SimpleNamespace(inserted_id=doc["_id"])

    async def find_one(self, filter_dict=None):
        self.calls.append("find_one")
        for doc in self.docs:
            if self._matches(doc, filter_dict):
                return copy.deepcopy(doc)
        return None

    def find(self, filter_dict=None):
        self.calls.append("find")
        return FakeCursor([copy.deepcopy(d) for d in self.docs if self._matches(d, filter_dict)])

    async def find_one_and_update(self, filter_dict, update, return_document=ReturnDocument.BEFORE):
        self.calls.append("find_one_and_update")
        for doc in self.docs:
            if self._matches(doc, filter_dict):
                before = copy.deepcopy(doc)
                after = {**doc, **copy.deepcopy(update["$set"])}
                self._check_unique(after, skip=doc)
                doc.update(after)
                return copy.deepcopy(doc) if return_document == ReturnDocument.AFTER else before
        return None

    async def delete_one(self, filter_dict):
        self.calls.append("delete_one")
        for i, doc in enumerate(self.docs):
            if self._matches(doc, filter_dict):
                del self.docs[i]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    async def delete_many(self, filter_dict):
        self.calls.append("delete_many")
        kept = [d for d in self.docs if not self._matches(d, filter_dict)]
        deleted = len(self.docs) - len(kept)
        self.docs = kept
        return SimpleNamespace(deleted_count=deleted)

    async def count_documents(self, filter_dict):
        self.calls.append("count_documents")
        return sum(1 for d in self.docs if self._matches(d, filter_dict))


class FakeDatabase:
    def __init__(self):
        self.collections = {}

    def __getitem__(self, name):
        if name not in self.collections:
            self.collections[name] = FakeCollection(name)
        return self.collections[name]

    async def list_collection_names(self):
        return list(self.collections)


class FakeOAuth:
    def __init__(self):
        self.profiles = {}

    def authorization_url(self, state):
        return f"https://github.com/login/oauth/authorize?client_id=test&state={state}"

    async def fetch_profile(self, code):
        if code not in self.profiles:
            raise OAuthError("bad_verification_code")
        return self.profiles[code]


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def db():
    return FakeDatabase()


@pytest.fixture
def oauth():
    fake = FakeOAuth()
    fake.profiles["good-code"] = Profile(
        provider_id="583231",
        display_name="The Octocat",
        username="octocat",
        emails=["Octocat@GitHub.example.com"],
        photos=["https://avatars.githubusercontent.com/u/583231"],
    )
    return fake


@pytest.fixture
def client(db, oauth, monkeypatch):
    monkeypatch.delenv("FRONTEND_URL", raising=False)
    monkeypatch.setenv("JWT_SECRET", "test-secret-key-long-enough-for-hs256")
    app = create_app(db=db, oauth=oauth)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def product_payload():
    return {
        "name": "Mechanical Keyboard",
        "description": "RGB backlit mechanical keyboard with customizable keys",
        "price": 159.99,
        "stock": 0,
        "category": "Accessories",
        "tags": ["keyboard", "mechanical"],
        "dimensions": {"height": 1.5, "width": 17.3, "depth": 5.2, "unit": "inches"},
        "weight": 2.1,
        "isAvailable": False,
        "imageUrl": "https://example.com/keyboard.jpg",
    }


@pytest.fixture
def supplier_payload():
    return {
        "name": "TechSupplies Inc.",
        "contactName": "John Smith",
        "email": "john.smith@techsupplies.com",
        "phone": "555-123-4567",
        "address": {"street": "123 Tech Blvd", "city": "San Francisco", "state": "CA", "zipCode": "94107"},
        "country": "USA",
        "supplierType": "manufacturer",
        "paymentTerms": "Net 30",
        "isActive": True,
    }
