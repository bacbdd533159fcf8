from bson.objectid import ObjectId

from content import DEFAULT_BANNER

SLIDE = {
    "title": "Summer Collection",
    "subtitle": "Fresh looks",
    "imageUrl": "https://placehold.co/1200x600.png",
    "buttonText": "Shop Now",
    "buttonLink": "/shop",
}

BANNER = {
    "title": "Eid Deals",
    "subtitle": "Up to 40% off",
    "imageUrl": "https://placehold.co/600x450.png",
    "buttonText": "Browse",
    "buttonLink": "/shop?filter=deals",
}


def test_hero_slides(client, admin_headers):
    second = client.post("/admin/hero-slides", json={**SLIDE, "displayOrder": "2"}, headers=admin_headers).json()
    first = client.post("/admin/hero-slides", json={**SLIDE, "displayOrder": 1}, headers=admin_headers).json()
    hidden = client.post(
        "/admin/hero-slides", json={**SLIDE, "displayOrder": 0, "isActive": False}, headers=admin_headers
    ).json()
    assert second["displayOrder"] == 2

    admin_ids = [s["id"] for s in client.get("/admin/hero-slides", headers=admin_headers).json()]
    assert admin_ids == [hidden["id"], first["id"], second["id"]]

    public = client.get("/hero-slides").json()
    assert [s["id"] for s in public["slides"]] == [first["id"], second["id"]]


def test_display_order_falls_back_to_zero(client, admin_headers):
    res = client.post("/admin/hero-slides", json={**SLIDE, "displayOrder": "soon"}, headers=admin_headers)
    assert res.status_code == 201
    assert res.json()["displayOrder"] == 0


def test_hero_slide_requires_image(client, admin_headers):
    res = client.post("/admin/hero-slides", json={**SLIDE, "imageUrl": ""}, headers=admin_headers)
    assert res.status_code == 400


def test_update_and_delete_hero_slide(client, admin_headers):
    slide = client.post("/admin/hero-slides", json=SLIDE, headers=admin_headers).json()
    res = client.put(f"/admin/hero-slides/{slide['id']}", json={"isActive": False}, headers=admin_headers)
    assert res.json()["isActive"] is False
    assert res.json()["title"] == "Summer Collection"
    assert client.get("/hero-slides").json() == {"slides": []}

    assert client.delete(f"/admin/hero-slides/{slide['id']}", headers=admin_headers).status_code == 200
    assert client.put(f"/admin/hero-slides/{ObjectId()}", json={}, headers=admin_headers).status_code == 404


def test_null_display_order_keeps_stored_order(client, admin_headers):
    slide = client.post("/admin/hero-slides", json={**SLIDE, "displayOrder": 5}, headers=admin_headers).json()
    res = client.put(f"/admin/hero-slides/{slide['id']}", json={"displayOrder": None}, headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["displayOrder"] == 5


def test_hero_slide_admin_requires_admin(client, user_headers):
    assert client.post("/admin/hero-slides", json=SLIDE, headers=user_headers).status_code == 403


def test_featured_banner(client, admin_headers):
    assert client.get("/featured-banner").json() is None
    assert client.get("/admin/featured-banner", headers=admin_headers).json() == DEFAULT_BANNER

    res = client.post("/admin/featured-banner", json=BANNER, headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["id"] == "homepage_exclusive_deal"

    public = client.get("/featured-banner").json()
    assert public["title"] == "Eid Deals"
    client.post("/admin/featured-banner", json={**BANNER, "title": "Puja Deals"}, headers=admin_headers)
    assert client.get("/featured-banner").json()["title"] == "Puja Deals"


def test_featured_banner_requires_all_fields(client, admin_headers):
    res = client.post("/admin/featured-banner", json={**BANNER, "buttonLink": ""}, headers=admin_headers)
    assert res.status_code == 400


def test_social_links(client, admin_headers):
    empty = {"facebook": "", "instagram": "", "twitter": "", "youtube": ""}
    assert client.get("/social-links").json() == empty

    res = client.post("/admin/social-links", json={"facebook": "https://facebook.com/shop"}, headers=admin_headers)
    assert res.json() == {**empty, "facebook": "https://facebook.com/shop"}
    assert client.get("/social-links").json()["facebook"] == "https://facebook.com/shop"
    assert client.get("/admin/social-links", headers=admin_headers).json()["youtube"] == ""


def test_blog(client):
    posts = client.get("/blog").json()
    assert len(posts) == 3
    post = client.get(f"/blog/{posts[0]['slug']}").json()
    assert post["title"] == posts[0]["title"]
    res = client.get("/blog/no-such-post")
    assert res.status_code == 404
    assert res.json()["kind"] == "not_found"
