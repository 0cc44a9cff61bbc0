import asyncio

from homeshelf.models import DisplayGroup
from homeshelf.rows import (
    bucket_by_row_label,
    genre_query,
    load_rows,
    select_featured_rows,
    select_genre_rows,
)
from homeshelf.services import CatalogError

from .factories import FakeCatalog, make_genre, make_item


def test_bucket_by_row_label_keeps_first_seen_order():
    items = [
        make_item("1", Tags=["FeaturedRow", "row: Staff Picks"]),
        make_item("2", Tags=["FeaturedRow"]),
        make_item("3", Tags=["row:Staff Picks", "row:Ignored"]),
        make_item("4", Tags=None),
    ]

    buckets = bucket_by_row_label(items)

    assert list(buckets) == ["Staff Picks", "Featured"]
    assert [item.id for item in buckets["Staff Picks"]] == ["1", "3"]
    assert [item.id for item in buckets["Featured"]] == ["2", "4"]


def test_featured_rows_are_windowed_and_truncated():
    items = []
    for row in range(8):
        items.extend(make_item(f"{row}-{n}", Tags=[f"row:Row {row}"]) for n in range(20))

    groups = select_featured_rows(items, max_rows=6, max_items_per_row=16, day=2)

    # span is 3, day 2 starts at the third label
    assert [group.label for group in groups] == [f"Row {n}" for n in range(2, 8)]
    assert all(len(group.items) == 16 for group in groups)
    assert all(group.kind == "featured" and not group.is_lazy for group in groups)


def test_featured_rows_skip_empty_rows():
    items = [make_item("1", Tags=["row:Solo"])]
    assert select_featured_rows(items, max_rows=6, max_items_per_row=0, day=0) == []


def test_genre_rows_skip_incomplete_genres_and_defer_fetch(settings):
    genres = [make_genre(str(n)) for n in range(6)]
    genres.insert(1, make_genre(None, "No Id"))

    groups = select_genre_rows(genres, settings, day=1)

    # span is 4, day 1 starts at the id-less genre, which keeps its slot
    assert [group.label for group in groups] == ["Genre 1", "Genre 2", "Genre 3"]
    query = groups[0].query
    assert query.genre_ids == ["1"]
    assert query.limit == 16
    assert query.sort_by == "Random"
    assert query.image_type_limit == 1
    assert query.enable_image_types == ["Primary", "Backdrop", "Thumb"]
    assert query.include_item_types == ["Movie", "Series"]


def test_lazy_group_fetches_on_each_load(settings):
    catalog = FakeCatalog(genre_items={"g": [make_item("x"), make_item("y")]})
    group = select_genre_rows([make_genre("g", "Drama")], settings, day=0)[0]

    first = asyncio.run(group.load_items(catalog))
    second = asyncio.run(group.load_items(catalog))

    assert [item.id for item in first] == ["x", "y"]
    assert first == second
    assert len(catalog.calls) == 2


def test_eager_group_returns_its_items_without_fetching():
    catalog = FakeCatalog()
    group = DisplayGroup(label="Featured", kind="featured", items=(make_item("a"),))

    assert [item.id for item in asyncio.run(group.load_items(catalog))] == ["a"]
    assert catalog.calls == []


def test_load_rows_orders_featured_before_genres(settings):
    catalog = FakeCatalog(
        by_tag={"FeaturedRow": [make_item("1", Tags=["row:Picks"]), make_item("2")]},
        genres=[make_genre("g1", "Drama"), make_genre("g2", "Comedy")],
    )

    selection = asyncio.run(load_rows(catalog, settings, day=0))

    assert [(group.kind, group.label) for group in selection.groups] == [
        ("featured", "Picks"),
        ("featured", "Featured"),
        ("genre", "Drama"),
        ("genre", "Comedy"),
    ]
    assert selection.errors == {}
    pool_query = next(query for kind, query in catalog.calls if kind == "items")
    assert pool_query.tags == ["FeaturedRow"]
    assert pool_query.limit == 80


def test_genre_failure_does_not_block_featured_rows(settings):
    catalog = FakeCatalog(
        by_tag={"FeaturedRow": [make_item("1")]},
        failures={"genres": CatalogError("genres unavailable", status_code=503)},
    )

    selection = asyncio.run(load_rows(catalog, settings, day=0))

    assert [group.label for group in selection.groups] == ["Featured"]
    assert selection.featured.ok
    assert not selection.genres.ok
    assert selection.errors == {"genres": "genres unavailable"}


def test_featured_failure_does_not_block_genre_rows(settings):
    catalog = FakeCatalog(
        genres=[make_genre("g1", "Drama")],
        failures={"FeaturedRow": RuntimeError()},
    )

    selection = asyncio.run(load_rows(catalog, settings, day=0))

    assert [group.label for group in selection.groups] == ["Drama"]
    assert selection.errors == {"featured": "RuntimeError"}


def test_empty_pools_produce_no_rows(settings):
    selection = asyncio.run(load_rows(FakeCatalog(), settings, day=3))
    assert selection.groups == []
    assert selection.errors == {}


def test_genre_row_with_blank_name_leaves_a_gap(settings):
    genres = [make_genre("a"), make_genre("blank", ""), make_genre("b")]

    groups = select_genre_rows(genres, settings, day=0)

    assert [group.label for group in groups] == ["Genre a", "Genre b"]


def test_genre_query_renders_server_parameters(settings):
    params = genre_query(make_genre("g7", "Noir"), settings).to_params()

    assert params == {
        "GenreIds": "g7",
        "IncludeItemTypes": "Movie,Series",
        "Fields": "PrimaryImageAspectRatio,Path",
        "EnableImageTypes": "Primary,Backdrop,Thumb",
        "Limit": "16",
        "Recursive": "true",
        "SortBy": "Random",
        "ImageTypeLimit": "1",
    }


def test_bare_row_tag_joins_the_featured_bucket():
    items = [make_item("1", Tags=["row:", "row:Late"]), make_item("2")]

    buckets = bucket_by_row_label(items)

    assert list(buckets) == ["Featured"]
    assert [item.id for item in buckets["Featured"]] == ["1", "2"]
