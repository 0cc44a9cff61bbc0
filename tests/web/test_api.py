import pytest
from fastapi.testclient import TestClient

from homeshelf.config import ConfigPaths, HomeSettings, bootstrap
from homeshelf.services import CatalogError
from homeshelf.web.api import app, get_catalog, get_settings

from ..factories import FakeCatalog, make_genre, make_item


@pytest.fixture
def override_catalog():
    def install(catalog, settings=None):
        app.dependency_overrides[get_catalog] = lambda: catalog
        app.dependency_overrides[get_settings] = lambda: settings or HomeSettings()
        return TestClient(app)

    yield install
    app.dependency_overrides.clear()


def test_home_layout(override_catalog):
    catalog = FakeCatalog(
        by_tag={
            "Featured": [make_item("hero", Overview="Big", BackdropImageTags=["bd"])],
            "FeaturedRow": [make_item("r1", Tags=["row:Classics"])],
        },
        latest=[make_item("new", Tags=["carousel:Just Added"])],
        genres=[make_genre("g1", "Drama")],
    )
    client = override_catalog(catalog)

    response = client.get("/home", params={"day": 4})

    assert response.status_code == 200
    payload = response.json()
    assert payload["day"] == 4
    assert [(s["id"], s["label"], s["featured"]) for s in payload["slides"]] == [
        ("hero", "Featured", True),
        ("new", "Just Added", False),
    ]
    assert payload["slides"][0]["backdrop_url"] == "hero|Backdrop|0|bd"
    assert payload["slides"][0]["overview"] == "Big"

    featured_row, genre_row = payload["groups"]
    assert featured_row["label"] == "Classics"
    assert [item["Id"] for item in featured_row["items"]] == ["r1"]
    assert featured_row["query"] is None
    assert genre_row["label"] == "Drama"
    assert genre_row["items"] == []
    assert genre_row["query"]["genre_ids"] == ["g1"]
    assert payload["errors"] == {}


def test_home_reports_branch_errors(override_catalog):
    catalog = FakeCatalog(
        by_tag={"FeaturedRow": [make_item("r1")]},
        failures={"genres": CatalogError("genres down")},
    )
    client = override_catalog(catalog)

    response = client.get("/home", params={"day": 0})

    assert response.status_code == 200
    payload = response.json()
    assert [group["label"] for group in payload["groups"]] == ["Featured"]
    assert payload["errors"] == {"rows.genres": "genres down"}


def test_group_items_resolves_lazy_query(override_catalog):
    catalog = FakeCatalog(genre_items={"g1": [make_item("x"), make_item("y")]})
    client = override_catalog(catalog)

    response = client.post("/groups/items", json={"genre_ids": ["g1"], "limit": 1, "sort_by": "Random"})

    assert response.status_code == 200
    assert [item["Id"] for item in response.json()["items"]] == ["x"]


def test_group_items_upstream_failure(override_catalog):
    catalog = FakeCatalog(failures={"genre_items": CatalogError("timeout")})
    client = override_catalog(catalog)

    response = client.post("/groups/items", json={"genre_ids": ["g1"]})

    assert response.status_code == 502
    assert response.json()["detail"] == "timeout"


def test_group_items_rejects_unknown_fields(override_catalog):
    client = override_catalog(FakeCatalog())

    response = client.post("/groups/items", json={"genre": "g1"})

    assert response.status_code == 422


def test_missing_config_is_bad_request(tmp_path):
    client = TestClient(app)

    response = client.get("/home", params={"config_dir": str(tmp_path / "missing")})

    assert response.status_code == 400
    assert "not found" in response.json()["detail"]


def test_unconfigured_credentials_are_bad_request(tmp_path):
    paths = ConfigPaths.from_base_dir(tmp_path / "homeshelf")
    bootstrap(paths)
    client = TestClient(app)

    response = client.get("/home", params={"config_dir": str(paths.base_dir)})

    assert response.status_code == 400
    assert "not configured" in response.json()["detail"]
