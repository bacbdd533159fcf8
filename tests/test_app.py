from bson.objectid import ObjectId

from seed import ADMIN_EMAIL, ADMIN_PASSWORD


def test_root(client):
    assert client.get("/").json() == {"message": "Storefront API running"}


def test_health_reports_database(client):
    body = client.get("/test").json()
    assert body["backend"] == "✅ Running"
    assert body["connection_status"] == "Connected"


def test_unknown_route_uses_error_shape(client):
    res = client.get("/nope")
    assert res.status_code == 404
    assert res.json() == {"detail": "Not Found", "kind": "not_found"}


def test_seed(client, login):
    res = client.post("/seed")
    assert res.json()["seeded"] is True
    assert res.json()["products"] == 6

    products = client.get("/products").json()
    chinos = next(p for p in products if p["name"] == "Slim Fit Chinos")
    assert chinos["discountText"] == "15% OFF"

    headers = login(ADMIN_EMAIL, ADMIN_PASSWORD)
    assert client.get("/admin/users", headers=headers).status_code == 200

    assert client.post("/seed").json()["seeded"] is False


def test_invalid_object_id_is_validation_error(client, user_headers):
    res = client.get("/my-orders/123", headers=user_headers)
    assert res.status_code == 400
    assert res.json() == {"detail": "Invalid order ID format.", "kind": "validation"}
    assert client.get(f"/my-orders/{ObjectId()}", headers=user_headers).status_code == 404
