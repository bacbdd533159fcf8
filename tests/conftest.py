import os

os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET", "test-secret-for-the-storefront-suite-0123456789")
os.environ["RESEND_API_KEY"] = ""

import mongomock
import pytest
from fastapi.testclient import TestClient

from auth import hash_password
from database import utcnow
from main import app

SHIPPING = {
    "fullName": "Rahim Uddin",
    "phone": "01700000000",
    "streetAddress": "12 Lake Road",
    "city": "Dhaka",
    "postalCode": "1212",
    "country": "Bangladesh",
}


@pytest.fixture
def db():
    return mongomock.MongoClient()["storefront_test"]


@pytest.fixture
def client(db):
    app.state.db = db
    with TestClient(app) as c:
        yield c


@pytest.fixture
def login(client):
    def _login(email, password):
        res = client.post("/auth/login", json={"email": email, "password": password})
        assert res.status_code == 200, res.text
        return {"Authorization": f"Bearer {res.json()['token']}"}

    return _login


@pytest.fixture
def make_user(client, login):
    def _make_user(email="shopper@example.com", password="secret123", name="Shopper"):
        res = client.post("/auth/register", json={"name": name, "email": email, "password": password})
        assert res.status_code == 201, res.text
        return login(email, password)

    return _make_user


@pytest.fixture
def user_headers(make_user):
    return make_user()


@pytest.fixture
def admin_headers(db, login):
    db["users"].insert_one(
        {
            "name": "Admin",
            "email": "admin@example.com",
            "hashedPassword": hash_password("adminpass"),
            "role": "admin",
            "createdAt": utcnow(),
        }
    )
    return login("admin@example.com", "adminpass")


@pytest.fixture
def product_payload():
    return {
        "name": "Classic Cotton Tee",
        "description": "A timeless 100% cotton t-shirt.",
        "price": 100,
        "category": "Shirts",
        "imageUrls": ["https://placehold.co/600x800.png"],
        "colors": [{"name": "White", "hex": "#FFFFFF"}],
        "sizes": ["M", "L"],
        "stock": 10,
    }


@pytest.fixture
def make_product(client, admin_headers, product_payload):
    def _make_product(**overrides):
        res = client.post("/admin/products", json={**product_payload, **overrides}, headers=admin_headers)
        assert res.status_code == 201, res.text
        return res.json()

    return _make_product
