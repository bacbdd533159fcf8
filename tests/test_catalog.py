from bson.objectid import ObjectId


def test_public_product_listing_and_pricing(client, make_product):
    make_product(name="Plain Tee")
    discounted = make_product(name="Sale Tee", discountType="percentage", discountValue=20)

    res = client.get("/products")
    assert res.status_code == 200
    products = res.json()
    assert sorted(p["name"] for p in products) == ["Plain Tee", "Sale Tee"]

    sale = client.get(f"/products/{discounted['id']}").json()
    assert sale["effectivePrice"] == 80.0
    assert sale["discountText"] == "20% OFF"

    plain = next(p for p in products if p["name"] == "Plain Tee")
    assert plain["effectivePrice"] == 100
    assert plain["discountText"] is None
    assert "discountType" not in plain


def test_color_image_and_ai_hint_defaults(make_product):
    product = make_product()
    assert product["colors"][0]["image"] == "https://placehold.co/600x800.png"
    assert product["aiHint"] == "Shirts"
    assert product["specifications"] == []


def test_product_list_limit_and_category(client, make_product):
    make_product(name="A")
    make_product(name="B", category="Pants")
    make_product(name="C")
    assert len(client.get("/products?limit=2").json()) == 2
    assert [p["name"] for p in client.get("/products?category=Pants").json()] == ["B"]


def test_invalid_product_discounts(client, admin_headers, product_payload):
    bad = [
        {"discountType": "percentage", "discountValue": 150},
        {"discountType": "fixed", "discountValue": 100},
        {"discountValue": 10},
    ]
    for overrides in bad:
        res = client.post("/admin/products", json={**product_payload, **overrides}, headers=admin_headers)
        assert res.status_code == 400, overrides
        assert res.json()["kind"] == "validation"


def test_product_requires_image(client, admin_headers, product_payload):
    res = client.post("/admin/products", json={**product_payload, "imageUrls": []}, headers=admin_headers)
    assert res.status_code == 400


def test_update_product_removes_discount(client, db, admin_headers, product_payload, make_product):
    product = make_product(discountType="fixed", discountValue=30)
    assert product["effectivePrice"] == 70

    res = client.put(f"/admin/products/{product['id']}", json={**product_payload, "price": 120}, headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["effectivePrice"] == 120
    stored = db["products"].find_one({"_id": ObjectId(product["id"])})
    assert "discountType" not in stored
    assert "discountValue" not in stored


def test_product_not_found_and_bad_id(client, admin_headers, product_payload):
    assert client.get(f"/products/{ObjectId()}").status_code == 404
    res = client.get("/products/xyz")
    assert res.status_code == 400
    assert res.json()["detail"] == "Invalid product ID format."
    assert client.put(f"/admin/products/{ObjectId()}", json=product_payload, headers=admin_headers).status_code == 404
    assert client.delete(f"/admin/products/{ObjectId()}", headers=admin_headers).status_code == 404


def test_delete_product(client, admin_headers, make_product):
    product = make_product()
    assert client.delete(f"/admin/products/{product['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/products/{product['id']}").status_code == 404


def test_product_admin_requires_admin(client, user_headers, product_payload):
    assert client.post("/admin/products", json=product_payload).status_code == 401
    assert client.post("/admin/products", json=product_payload, headers=user_headers).status_code == 403


def test_search(client, make_product):
    make_product(name="Slim Fit Chinos", category="Pants")
    make_product(name="Linen Shirt", description="Breathable (summer) wear")
    assert [p["name"] for p in client.get("/search?q=chino").json()] == ["Slim Fit Chinos"]
    assert [p["name"] for p in client.get("/search?q=pants").json()] == ["Slim Fit Chinos"]
    assert [p["name"] for p in client.get("/search?q=(summer)").json()] == ["Linen Shirt"]


def test_search_query_too_short(client):
    res = client.get("/search?q=a")
    assert res.status_code == 400
    assert res.json()["detail"] == "Search query must be at least 2 characters long."
    assert client.get("/search").status_code == 400


def test_search_caps_results(client, db, product_payload):
    db["products"].insert_many([{**product_payload, "name": f"Tee {i}"} for i in range(12)])
    assert len(client.get("/search?q=tee").json()) == 10


def test_categories(client, admin_headers, make_product):
    res = client.post("/admin/categories", json={"name": "Shirts", "imageUrl": "https://img/shirts.png"}, headers=admin_headers)
    assert res.status_code == 201
    shirts = res.json()
    assert shirts["aiHint"] == "shirts"
    client.post("/admin/categories", json={"name": "Accessories"}, headers=admin_headers)
    make_product()
    make_product()

    assert [c["name"] for c in client.get("/categories").json()] == ["Accessories", "Shirts"]
    counts = {c["name"]: c["productCount"] for c in client.get("/admin/categories", headers=admin_headers).json()}
    assert counts == {"Accessories": 0, "Shirts": 2}


def test_duplicate_category_names_conflict(client, admin_headers):
    first = client.post("/admin/categories", json={"name": "Shirts"}, headers=admin_headers).json()
    other = client.post("/admin/categories", json={"name": "Pants"}, headers=admin_headers).json()

    res = client.post("/admin/categories", json={"name": "shirts"}, headers=admin_headers)
    assert res.status_code == 409
    assert res.json()["detail"] == 'Category "shirts" already exists.'

    res = client.put(f"/admin/categories/{other['id']}", json={"name": "SHIRTS"}, headers=admin_headers)
    assert res.status_code == 409

    res = client.put(f"/admin/categories/{first['id']}", json={"name": "Shirts", "aiHint": "tops"}, headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["aiHint"] == "tops"


def test_delete_category(client, admin_headers):
    cat = client.post("/admin/categories", json={"name": "Outerwear"}, headers=admin_headers).json()
    assert client.delete(f"/admin/categories/{cat['id']}", headers=admin_headers).status_code == 200
    assert client.delete(f"/admin/categories/{cat['id']}", headers=admin_headers).status_code == 404
