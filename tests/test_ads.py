import pytest
import yaml

from buildmart.services.ads_store import ADS_KEY, AdNotFoundError, AdStore, parse_if_match
from buildmart.services.storage_service import StaleVersionError
from tests.conftest import InMemoryStorage, image_file, signup


def create_ad(client, title="Cement sale", link="https://example.com", headers=None):
    return client.post(
        "/api/ads",
        data={"title": title, "link": link},
        files={"banner": image_file("banner.png")},
        headers=headers or {},
    )


def test_mutations_require_a_session(client):
    response = create_ad(client)
    assert response.status_code == 401
    assert response.json() == {"message": "Authentication required"}


def test_create_and_list(client, storage):
    signup(client)
    response = create_ad(client)

    assert response.status_code == 201
    body = response.json()
    assert body["ad"]["status"] == "on"
    assert body["ad"]["banner"].startswith("https://cdn.test/ad/banner/")

    listed = client.get("/api/ads")
    assert listed.status_code == 200
    assert listed.json()["version"] == body["version"]
    assert listed.headers["ETag"] == f'"{body["version"]}"'
    assert [ad["title"] for ad in listed.json()["ads"]] == ["Cement sale"]

    stored = yaml.safe_load(storage.get_text(ADS_KEY).text)
    assert stored[0]["id"] == body["ad"]["id"]

    legacy = client.get("/api/ads/markdown")
    assert legacy.json() == listed.json()["ads"]


def test_empty_ad_list(client):
    response = client.get("/api/ads")
    assert response.json() == {"ads": [], "version": None}


def test_banner_is_required(client):
    signup(client)
    response = client.post("/api/ads", data={"title": "t", "link": "l"})
    assert response.status_code == 400


def test_toggling_status_twice_restores_the_ad(client):
    signup(client)
    ad = create_ad(client).json()["ad"]

    off = client.put(f"/api/ads/{ad['id']}/status", json={"status": "off"})
    assert off.json()["ad"]["status"] == "off"
    on = client.put(f"/api/ads/{ad['id']}/status", json={"status": "on"})

    assert on.json()["ad"] == ad


def test_invalid_status_is_rejected(client):
    signup(client)
    ad = create_ad(client).json()["ad"]
    response = client.put(f"/api/ads/{ad['id']}/status", json={"status": "paused"})
    assert response.status_code == 400


def test_stale_if_match_is_a_conflict(client, storage):
    signup(client)
    first = create_ad(client).json()
    create_ad(client, title="Second")
    before = storage.get_text(ADS_KEY)

    response = client.put(
        f"/api/ads/{first['ad']['id']}/status",
        json={"status": "off"},
        headers={"If-Match": f'"{first["version"]}"'},
    )

    assert response.status_code == 409
    assert response.json()["error"] == "ConflictError"
    assert storage.get_text(ADS_KEY) == before


def test_current_if_match_is_accepted(client):
    signup(client)
    created = create_ad(client).json()
    response = client.put(
        f"/api/ads/{created['ad']['id']}",
        data={"title": "Renamed", "link": "https://example.org"},
        headers={"If-Match": f'"{created["version"]}"'},
    )
    assert response.status_code == 200
    assert response.json()["ad"]["title"] == "Renamed"
    assert response.json()["ad"]["banner"] == created["ad"]["banner"]


def test_delete_and_missing_ad(client):
    signup(client)
    ad = create_ad(client).json()["ad"]

    assert client.delete(f"/api/ads/{ad['id']}").status_code == 200
    assert client.get("/api/ads").json()["ads"] == []
    assert client.delete(f"/api/ads/{ad['id']}").status_code == 404


class RacingStorage(InMemoryStorage):
    """Another writer slips in right after each read of the ads document"""

    def get_text(self, key):
        stored = super().get_text(key)
        if key == ADS_KEY and stored is not None:
            self.put_bytes(key, stored.text.encode("utf-8"), "text/markdown")
        return stored


def test_concurrent_writer_loses_without_writing():
    storage = RacingStorage()
    ad, _ = AdStore(InMemoryStorage()).create("x", "y", "z")
    storage.put_text(ADS_KEY, yaml.safe_dump([ad]))

    with pytest.raises(StaleVersionError):
        AdStore(storage).set_status(ad["id"], "off")

    assert yaml.safe_load(InMemoryStorage.get_text(storage, ADS_KEY).text)[0]["status"] == "on"


def test_store_rejects_unknown_ids_and_statuses():
    store = AdStore(InMemoryStorage())
    ad, _ = store.create("x", "y", "z")
    with pytest.raises(AdNotFoundError):
        store.delete("missing")
    with pytest.raises(ValueError):
        store.set_status(ad["id"], "maybe")


def test_parse_if_match():
    assert parse_if_match(None) is None
    assert parse_if_match('"7"') == 7
    assert parse_if_match('W/"7"') == 7
    with pytest.raises(ValueError):
        parse_if_match("abc")
