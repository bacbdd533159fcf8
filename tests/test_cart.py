from carts import drop_item, merge_item, set_item_quantity


def line(key, quantity=1, **extra):
    return {"cartKey": key, "productId": "p1", "name": "Tee", "price": 10.0, "quantity": quantity, **extra}


def test_merge_item_sums_existing_key():
    items = merge_item([line("p1-white-M", 1)], line("p1-white-M", 2))
    assert len(items) == 1
    assert items[0]["quantity"] == 3


def test_merge_item_appends_new_key():
    items = merge_item([line("p1-white-M")], line("p1-black-M"))
    assert [i["cartKey"] for i in items] == ["p1-white-M", "p1-black-M"]


def test_set_item_quantity():
    items = set_item_quantity([line("a", 1), line("b", 1)], "b", 5)
    assert [i["quantity"] for i in items] == [1, 5]


def test_set_item_quantity_zero_removes_line():
    assert set_item_quantity([line("a"), line("b")], "a", 0) == [line("b")]
    assert set_item_quantity([line("a")], "a", -1) == []


def test_drop_item():
    assert drop_item([line("a"), line("b")], "c") == [line("a"), line("b")]
    assert drop_item([line("a"), line("b")], "a") == [line("b")]


CART_ITEM = {
    "productId": "64b000000000000000000001",
    "name": "Classic Cotton Tee",
    "price": 29.99,
    "image": "https://placehold.co/600x800.png",
    "quantity": 1,
    "size": "M",
    "color": "White",
    "colorHex": "#FFFFFF",
    "cartKey": "64b000000000000000000001-White-M",
}


def test_cart_requires_login(client):
    res = client.get("/cart")
    assert res.status_code == 401
    assert res.json()["kind"] == "unauthenticated"


def test_cart_is_created_lazily(client, user_headers):
    res = client.get("/cart", headers=user_headers)
    assert res.status_code == 200
    assert res.json()["items"] == []


def test_add_same_item_twice_merges_quantity(client, user_headers):
    client.post("/cart/item", json=CART_ITEM, headers=user_headers)
    res = client.post("/cart/item", json={**CART_ITEM, "quantity": 2}, headers=user_headers)
    assert res.status_code == 200
    items = res.json()["items"]
    assert len(items) == 1
    assert items[0]["quantity"] == 3
    assert items[0]["colorHex"] == "#FFFFFF"


def test_update_and_remove_items(client, user_headers):
    client.post("/cart/item", json=CART_ITEM, headers=user_headers)
    other = {**CART_ITEM, "size": "L", "cartKey": "64b000000000000000000001-White-L"}
    client.post("/cart/item", json=other, headers=user_headers)

    res = client.put("/cart/item", json={"cartKey": CART_ITEM["cartKey"], "quantity": 4}, headers=user_headers)
    assert [i["quantity"] for i in res.json()["items"]] == [4, 1]

    res = client.put("/cart/item", json={"cartKey": CART_ITEM["cartKey"], "quantity": 0}, headers=user_headers)
    assert [i["cartKey"] for i in res.json()["items"]] == [other["cartKey"]]

    res = client.request("DELETE", "/cart/item", json={"cartKey": other["cartKey"]}, headers=user_headers)
    assert res.json()["items"] == []


def test_add_item_rejects_zero_quantity(client, user_headers):
    res = client.post("/cart/item", json={**CART_ITEM, "quantity": 0}, headers=user_headers)
    assert res.status_code == 400
    assert res.json()["kind"] == "validation"


def test_clear_cart(client, user_headers):
    client.post("/cart/item", json=CART_ITEM, headers=user_headers)
    res = client.delete("/cart", headers=user_headers)
    assert res.status_code == 200
    assert res.json()["items"] == []
    assert client.get("/cart", headers=user_headers).json()["items"] == []


def test_clear_cart_without_existing_cart(client, user_headers, db):
    res = client.delete("/cart", headers=user_headers)
    assert res.status_code == 200
    assert db["user_carts"].count_documents({}) == 1
