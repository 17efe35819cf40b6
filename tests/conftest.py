import os
from types import SimpleNamespace
from urllib.parse import quote

os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("S3_BUCKET", "test-bucket")
os.environ.setdefault("METADATA_TABLE", "files")
os.environ.setdefault("PRESIGN_EXPIRES_SECONDS", "900")
os.environ.setdefault("MINIO_ACCESS_KEY", "test-access")
os.environ.setdefault("MINIO_SECRET_KEY", "test-secret")
os.environ.setdefault("MONGO_URI", "mongodb://localhost:27017")
os.environ.setdefault("MONGO_DB_NAME", "filegate_test")

import copy

import pytest
from fastapi.testclient import TestClient
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from filegate.core.config import settings
from filegate.core.database import get_db
from filegate.services.files import FileService
from filegate.services.metadata import MetadataStore
from filegate.services.storage import StorageService, get_storage
from main import app


class NoSuchKey(Exception):
    pass


class FakeMinio:
    """Stands in for minio.Minio: presigns deterministically, stats from a dict."""

    def __init__(self):
        self.objects = {}
        self.presign_calls = []

    def put(self, bucket_name, object_name, size, content_type=None):
        self.objects[(bucket_name, object_name)] = SimpleNamespace(size=size, content_type=content_type)

    def get_presigned_url(self, method, bucket_name, object_name, expires, response_headers=None,
                          request_date=None, **kwargs):
        self.presign_calls.append(SimpleNamespace(
            method=method, bucket_name=bucket_name, object_name=object_name, expires=expires,
            response_headers=response_headers, request_date=request_date,
        ))
        url = f"https://s3.test/{bucket_name}/{object_name}?X-Amz-Expires={int(expires.total_seconds())}&method={method}"
        for name, value in (response_headers or {}).items():
            url += f"&{name}={quote(value)}"
        return url

    def presigned_get_object(self, bucket_name, object_name, expires, response_headers=None,
                             request_date=None, **kwargs):
        return self.get_presigned_url("GET", bucket_name, object_name, expires,
                                      response_headers=response_headers, request_date=request_date)

    def stat_object(self, bucket_name, object_name, **kwargs):
        try:
            return self.objects[(bucket_name, object_name)]
        except KeyError:
            raise NoSuchKey(f"Object does not exist: {bucket_name}/{object_name}")


def _matches(doc, query):
    return all(doc.get(key) == value for key, value in query.items())


def _project(doc, projection):
    doc = copy.deepcopy(doc)
    if projection and projection.get("_id") == 0:
        doc.pop("_id", None)
    return doc


class FakeCollection:
    """The subset of AsyncIOMotorCollection the metadata store uses."""

    def __init__(self):
        self.docs = []
        self.indexes = []

    async def create_index(self, keys, unique=False):
        self.indexes.append((keys, unique))
        return f"{keys}_1"

    async def insert_one(self, document):
        if any(doc["fileId"] == document["fileId"] for doc in self.docs):
            raise DuplicateKeyError("duplicate fileId")
        stored = copy.deepcopy(document)
        stored["_id"] = len(self.docs) + 1
        self.docs.append(stored)
        return SimpleNamespace(inserted_id=stored["_id"])

    async def find_one(self, query, projection=None):
        for doc in self.docs:
            if _matches(doc, query):
                return _project(doc, projection)
        return None

    async def find_one_and_update(self, query, update, projection=None,
                                  return_document=ReturnDocument.BEFORE):
        for doc in self.docs:
            if _matches(doc, query):
                before = _project(doc, projection)
                for key, value in update.get("$set", {}).items():
                    doc[key] = value
                for key, value in update.get("$inc", {}).items():
                    doc[key] = doc.get(key, 0) + value
                return _project(doc, projection) if return_document == ReturnDocument.AFTER else before
        return None


class FakeDatabase:
    def __init__(self):
        self.collections = {}

    def __getitem__(self, name):
        return self.collections.setdefault(name, FakeCollection())


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def collection(fake_db):
    return fake_db[settings.METADATA_TABLE]


@pytest.fixture
def minio_client():
    return FakeMinio()


@pytest.fixture
def storage(minio_client):
    return StorageService(client=minio_client)


@pytest.fixture
def file_service(storage, collection):
    return FileService(storage, MetadataStore(collection), settings)


@pytest.fixture
def client(fake_db, storage):
    app.dependency_overrides[get_db] = lambda: fake_db
    app.dependency_overrides[get_storage] = lambda: storage
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()
