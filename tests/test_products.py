import io
import json

from PIL import Image

from buildmart.models.user import User
from tests.conftest import create_company, create_product, image_file, signup

CATEGORY = "cat-portland-cement"


def stored_size(storage, url):
    data = storage.objects[storage.key_for(url)][0]
    return Image.open(io.BytesIO(data)).size


def test_create_requires_a_session(client, seeded):
    response = client.post("/api/products", data={"name": "x"}, files=[("productImages", image_file())])
    assert response.status_code == 401
    assert response.json() == {"message": "Authentication required"}


def test_create_keeps_image_order(client, storage, seeded):
    signup(client)
    company = create_company(client)
    product = create_product(
        client, company["id"], CATEGORY,
        images=[image_file("a.png", (10, 10)), image_file("b.png", (20, 20))],
        price="250", unit="bag",
    )

    assert product["price"] == 250
    assert product["unit"] == "bag"
    assert product["companyName"] == "Acme Builders"
    assert product["categoryName"] == "Portland Cement"
    assert [stored_size(storage, u) for u in product["imageUrls"]] == [(10, 10), (20, 20)]


def test_image_count_limits(client, seeded):
    signup(client)
    company = create_company(client)
    data = {"name": "Cement", "companyId": company["id"], "categoryId": CATEGORY}

    none = client.post("/api/products", data=data)
    too_many = client.post(
        "/api/products", data=data, files=[("productImages", image_file(f"{i}.png")) for i in range(4)]
    )

    assert none.status_code == 400
    assert too_many.status_code == 400


def test_rejects_bad_fields(client, seeded):
    signup(client)
    company = create_company(client)
    files = [("productImages", image_file())]

    bad_unit = client.post(
        "/api/products",
        data={"name": "Cement", "companyId": company["id"], "categoryId": CATEGORY, "unit": "barrel"},
        files=files,
    )
    missing_company = client.post("/api/products", data={"name": "Cement", "categoryId": CATEGORY}, files=files)
    not_an_image = client.post(
        "/api/products",
        data={"name": "Cement", "companyId": company["id"], "categoryId": CATEGORY},
        files=[("productImages", ("notes.png", b"plain text", "image/png"))],
    )

    assert bad_unit.status_code == 400
    assert missing_company.status_code == 400
    assert not_an_image.status_code == 400


def test_update_combines_retained_and_new_images(client, seeded):
    signup(client)
    company = create_company(client)
    product = create_product(client, company["id"], CATEGORY, images=[image_file("a.png"), image_file("b.png")])
    first, second = product["imageUrls"]

    response = client.put(
        f"/api/products/{product['id']}",
        data={"name": "Renamed", "existingImageUrls": json.dumps([second, first])},
        files=[("productImages", image_file("c.png"))],
    )

    assert response.status_code == 200
    updated = response.json()
    assert updated["name"] == "Renamed"
    assert updated["imageUrls"][:2] == [second, first]
    assert len(updated["imageUrls"]) == 3


def test_update_rejects_more_than_three_images(client, seeded):
    signup(client)
    company = create_company(client)
    product = create_product(client, company["id"], CATEGORY, images=[image_file("a.png"), image_file("b.png")])

    response = client.put(
        f"/api/products/{product['id']}",
        data={"existingImageUrls": json.dumps(product["imageUrls"])},
        files=[("productImages", image_file("c.png")), ("productImages", image_file("d.png"))],
    )
    assert response.status_code == 400


def test_only_owner_or_admin_can_change_a_product(client, db, seeded):
    signup(client, "owner")
    company = create_company(client)
    product = create_product(client, company["id"], CATEGORY)
    client.post("/api/logout")

    signup(client, "intruder")
    denied = client.put(f"/api/products/{product['id']}", data={"name": "Hijacked"})
    assert denied.status_code == 403
    assert client.get(f"/api/products/{product['id']}").json()["name"] == "Portland Cement"
    assert client.delete(f"/api/products/{product['id']}").status_code == 403

    db.query(User).filter(User.username == "intruder").update({"role": "admin"})
    db.commit()
    allowed = client.put(f"/api/products/{product['id']}", data={"name": "Moderated"})
    assert allowed.status_code == 200
    assert allowed.json()["name"] == "Moderated"


def test_list_filter_and_delete(client, seeded):
    user_id = signup(client)
    company = create_company(client)
    product = create_product(client, company["id"], CATEGORY)

    assert [p["id"] for p in client.get("/api/products").json()] == [product["id"]]
    assert client.get("/api/products", params={"userId": user_id}).json()[0]["userId"] == user_id
    assert client.get("/api/products", params={"userId": "nobody"}).json() == []

    assert client.delete(f"/api/products/{product['id']}").status_code == 200
    assert client.get(f"/api/products/{product['id']}").status_code == 404
