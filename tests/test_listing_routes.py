from tests.conftest import create_company, create_product, signup

TENDER = "---\ntitle: {title}\ncategory: Supplies\npublished: 2024-01-{day:02d}\nfeatured: {featured}\n---\n\nBody.\n"


def test_products_price_filter_and_sort(client, seeded):
    signup(client)
    company = create_company(client)
    for name, price in (("a", "100"), ("b", "5000"), ("c", "12000")):
        create_product(client, company["id"], "cat-rebar", name=name, price=price)

    body = client.get("/api/listings/products", params={"max_price": 10000, "sort": "price-high"}).json()

    assert [p["name"] for p in body["items"]] == ["b", "a"]
    assert body["total"] == 2
    assert body["pageSize"] == 16
    assert body["filters"]["price_range"] == [0.0, 10000.0]


def test_parent_category_selects_subcategories(client, seeded):
    signup(client)
    company = create_company(client)
    create_product(client, company["id"], "cat-rebar", name="Rebar")
    create_product(client, company["id"], "cat-lumber", name="Lumber")

    body = client.get("/api/listings/products", params={"categories": "Steel & Metals"}).json()
    assert [p["name"] for p in body["items"]] == ["Rebar"]


def test_mine_requires_a_session(client):
    response = client.get("/api/listings/companies", params={"mine": "true"})
    assert response.status_code == 401


def test_mine_returns_own_records(client):
    signup(client, "owner")
    create_company(client, name="Owned")
    client.post("/api/logout")
    signup(client, "other")
    create_company(client, name="Not mine")

    body = client.get("/api/listings/companies", params={"mine": "true"}).json()
    assert [c["name"] for c in body["items"]] == ["Not mine"]


def test_search_and_page_params(client):
    signup(client)
    for i in range(12):
        client.post("/api/jobs", json={"title": f"Mason {i}", "description": "Block laying", "location": "Adama"})
    client.post("/api/jobs", json={"title": "Driver", "description": "Truck", "location": "Jimma"})

    page_two = client.get("/api/listings/jobs", params={"search": "mason", "page": 2, "sort": "title"}).json()
    by_location = client.get("/api/listings/jobs", params={"location": "jim"}).json()

    assert page_two["total"] == 12
    assert page_two["pages"] == 2
    assert page_two["page"] == 2
    assert len(page_two["items"]) == 2
    assert [j["title"] for j in by_location["items"]] == ["Driver"]


def test_tenders_listing_has_featured(client, storage):
    for day in range(1, 8):
        storage.put_text(
            f"tenders/t{day}.md",
            TENDER.format(title=f"Tender {day}", day=day, featured="true" if day <= 4 else "false"),
        )

    body = client.get("/api/listings/tenders").json()

    assert len(body["featured"]) == 3
    assert [t["title"] for t in body["items"]] == ["Tender 7", "Tender 6", "Tender 5"]
    assert body["pageSize"] == 5


def test_unknown_kind(client):
    assert client.get("/api/listings/widgets").status_code == 404
