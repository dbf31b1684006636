import io
import os

os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from buildmart.database import Base, get_db
from buildmart.services.storage_service import BlobStorage, StaleVersionError, StoredText, get_storage
from main import app

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

CDN = "https://cdn.test"


class InMemoryStorage(BlobStorage):
    """Blob storage double with GCS-style generations"""

    def __init__(self):
        self.objects = {}
        self._generation = 0

    def put_bytes(self, key, data, content_type, if_generation_match=None):
        if if_generation_match is not None:
            current = self.objects[key][2] if key in self.objects else 0
            if current != if_generation_match:
                raise StaleVersionError(f"{key} is at generation {current}, not {if_generation_match}")
        self._generation += 1
        self.objects[key] = (data, content_type, self._generation)
        return self._generation

    def get_text(self, key):
        if key not in self.objects:
            return None
        data, _, generation = self.objects[key]
        return StoredText(text=data.decode("utf-8"), generation=generation)

    def list_keys(self, prefix):
        return sorted(k for k in self.objects if k.startswith(prefix))

    def public_url(self, key):
        return f"{CDN}/{key}"

    def put_text(self, key, text):
        return self.put_bytes(key, text.encode("utf-8"), "text/markdown")

    def key_for(self, url):
        return url[len(CDN) + 1:]


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def client(db, storage):
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_image(size=(10, 10), color=(200, 30, 30), fmt="PNG"):
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


def image_file(name="photo.png", size=(10, 10)):
    return (name, make_image(size), "image/png")


def register(client, username="alice", password="secret123", **extra):
    data = {"username": username, "password": password, **extra}
    response = client.post("/api/register", data=data)
    assert response.status_code == 201, response.text
    return response.json()["id"]


def login(client, username="alice", password="secret123"):
    response = client.post("/api/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return response.json()


def signup(client, username="alice", password="secret123"):
    """Register and start a session; returns the user id"""
    user_id = register(client, username, password)
    login(client, username, password)
    return user_id


def create_company(client, name="Acme Builders", **fields):
    response = client.post("/api/companies", data={"name": name, **fields})
    assert response.status_code == 201, response.text
    return response.json()


def create_product(client, company_id, category_id, name="Portland Cement", images=None, **fields):
    images = images or [image_file()]
    data = {"name": name, "companyId": company_id, "categoryId": category_id, **fields}
    files = [("productImages", img) for img in images]
    response = client.post("/api/products", data=data, files=files)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def seeded(client):
    response = client.post("/api/seed")
    assert response.status_code == 200
    return response.json()
