def test_wishlist_requires_login(client):
    assert client.get("/wishlist").status_code == 401


def test_empty_wishlist(client, db, user_headers):
    assert client.get("/wishlist", headers=user_headers).json() == {"productIds": []}
    assert db["wishlists"].count_documents({}) == 1


def test_add_is_idempotent(client, user_headers):
    client.post("/wishlist", json={"productId": "p-1"}, headers=user_headers)
    res = client.post("/wishlist", json={"productId": "p-1"}, headers=user_headers)
    assert res.json()["productIds"] == ["p-1"]
    client.post("/wishlist", json={"productId": "p-2"}, headers=user_headers)
    assert client.get("/wishlist", headers=user_headers).json()["productIds"] == ["p-1", "p-2"]


def test_remove(client, user_headers):
    client.post("/wishlist", json={"productId": "p-1"}, headers=user_headers)
    res = client.post("/wishlist/remove", json={"productId": "p-1"}, headers=user_headers)
    assert res.status_code == 200
    assert res.json()["productIds"] == []


def test_remove_missing_product(client, user_headers):
    res = client.post("/wishlist/remove", json={"productId": "p-9"}, headers=user_headers)
    assert res.status_code == 400
    assert res.json()["kind"] == "validation"


def test_wishlists_are_per_user(client, make_user, user_headers):
    other = make_user(email="friend@example.com")
    client.post("/wishlist", json={"productId": "p-1"}, headers=user_headers)
    assert client.get("/wishlist", headers=other).json()["productIds"] == []
