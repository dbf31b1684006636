import pytest

from buildmart.services.listing import (
    PROFILES,
    FilterState,
    ResetFilters,
    SetCategories,
    SetLocation,
    SetOwnerOnly,
    SetPage,
    SetPriceRange,
    SetSearch,
    SetSort,
    filter_records,
    filter_sort_paginate,
    paginate,
    reduce_filters,
)

PRODUCTS = PROFILES["products"]


def product(name, price=None, created="2024-01-01T00:00:00", category="Portland Cement", **extra):
    record = {
        "name": name,
        "description": extra.pop("description", ""),
        "categoryName": category,
        "companyName": extra.pop("companyName", "Acme"),
        "price": price,
        "createdAt": created,
        "userId": extra.pop("userId", "u1"),
    }
    record.update(extra)
    return record


class TestReducer:
    def test_actions_merge_into_existing_state(self):
        state = reduce_filters(FilterState(), SetSearch("cement"))
        state = reduce_filters(state, SetCategories(("Rebar",)))
        state = reduce_filters(state, SetSort("price-low"))

        assert state.search == "cement"
        assert state.categories == ("Rebar",)
        assert state.sort == "price-low"

    def test_every_change_except_page_resets_to_first_page(self):
        state = reduce_filters(FilterState(), SetPage(4))
        assert state.page == 4

        for action in (
            SetSearch("x"),
            SetCategories(("a",)),
            SetPriceRange(0, 10),
            SetOwnerOnly(True, "u1"),
            SetLocation("Adama"),
            SetSort("oldest"),
        ):
            paged = reduce_filters(state, SetPage(3))
            assert reduce_filters(paged, action).page == 1

    def test_set_page_keeps_filters(self):
        state = reduce_filters(FilterState(), SetSearch("steel"))
        state = reduce_filters(state, SetPage(2))
        assert state.search == "steel"
        assert state.page == 2

    def test_reset_clears_everything(self):
        state = reduce_filters(FilterState(), SetSearch("steel"))
        state = reduce_filters(state, SetPriceRange(5, 50))
        assert reduce_filters(state, ResetFilters()) == FilterState()

    def test_owner_filter_needs_a_user(self):
        with pytest.raises(ValueError):
            reduce_filters(FilterState(), SetOwnerOnly(True))

    def test_price_bounds_are_ordered(self):
        state = reduce_filters(FilterState(), SetPriceRange(500, 100))
        assert state.price_range == (100.0, 500.0)


class TestFiltering:
    def test_adding_a_word_never_widens_the_result(self):
        records = [
            product("Portland Cement", description="grey bag"),
            product("White Cement", description="white bag"),
            product("Steel Rebar", description="grade 60"),
        ]
        previous = None
        for query in ("cement", "cement bag", "cement bag white"):
            state = reduce_filters(FilterState(), SetSearch(query))
            names = {r["name"] for r in filter_records(records, state, PRODUCTS)}
            if previous is not None:
                assert names <= previous
            previous = names
        assert previous == {"White Cement"}

    def test_words_match_across_fields_case_insensitively(self):
        records = [product("Cement", companyName="Derba"), product("Cement", companyName="Mugher")]
        state = reduce_filters(FilterState(), SetSearch("CEMENT derba"))
        result = filter_records(records, state, PRODUCTS)
        assert [r["companyName"] for r in result] == ["Derba"]

    def test_price_range_scenario(self):
        records = [product("a", 100), product("b", 5000), product("c", 12000)]
        state = reduce_filters(FilterState(), SetPriceRange(0, 10000))
        assert [r["price"] for r in filter_records(records, state, PRODUCTS)] == [100, 5000]

    def test_missing_price_counts_as_zero(self):
        records = [product("free", None), product("paid", 50)]
        state = reduce_filters(FilterState(), SetPriceRange(0, 10))
        assert [r["name"] for r in filter_records(records, state, PRODUCTS)] == ["free"]

    def test_categories_are_or_combined(self):
        records = [product("a", category="Rebar"), product("b", category="Lumber"), product("c", category="MDF")]
        state = reduce_filters(FilterState(), SetCategories(("Rebar", "MDF")))
        assert [r["name"] for r in filter_records(records, state, PRODUCTS)] == ["a", "c"]

    def test_owner_filter(self):
        records = [product("mine", userId="u1"), product("theirs", userId="u2")]
        state = reduce_filters(FilterState(), SetOwnerOnly(True, "u2"))
        assert [r["name"] for r in filter_records(records, state, PRODUCTS)] == ["theirs"]

    def test_location_substring_for_companies(self):
        companies = [
            {"name": "A", "location": "Addis Ababa, Bole", "createdAt": None},
            {"name": "B", "location": "Adama", "createdAt": None},
        ]
        state = reduce_filters(FilterState(), SetLocation("bole"))
        assert [c["name"] for c in filter_records(companies, state, PROFILES["companies"])] == ["A"]

    def test_article_slug_categories_match_their_label(self):
        articles = [
            {"title": "Bricks", "category": "materials", "published_date": "2024-02-01"},
            {"title": "Loans", "category": "housing", "published_date": "2024-02-02"},
        ]
        state = reduce_filters(FilterState(), SetCategories(("Construction Materials",)))
        result = filter_records(articles, state, PROFILES["articles"])
        assert [a["title"] for a in result] == ["Bricks"]


class TestSorting:
    def test_latest_puts_undated_records_last(self):
        records = [
            product("old", created="2023-01-01T00:00:00"),
            product("undated", created=None),
            product("new", created="2024-06-01T00:00:00"),
        ]
        result = filter_records(records, FilterState(), PRODUCTS)
        assert [r["name"] for r in result] == ["new", "old", "undated"]

    def test_oldest_puts_undated_records_first(self):
        records = [product("new", created="2024-06-01"), product("undated", created="not a date")]
        state = reduce_filters(FilterState(), SetSort("oldest"))
        assert [r["name"] for r in filter_records(records, state, PRODUCTS)] == ["undated", "new"]

    def test_name_sort_ignores_case(self):
        records = [product("beta"), product("Alpha"), product("gamma")]
        state = reduce_filters(FilterState(), SetSort("name"))
        assert [r["name"] for r in filter_records(records, state, PRODUCTS)] == ["Alpha", "beta", "gamma"]

    def test_price_sorts(self):
        records = [product("a", 30), product("b", None), product("c", 10)]
        low = reduce_filters(FilterState(), SetSort("price-low"))
        high = reduce_filters(FilterState(), SetSort("price-high"))
        assert [r["name"] for r in filter_records(records, low, PRODUCTS)] == ["b", "c", "a"]
        assert [r["name"] for r in filter_records(records, high, PRODUCTS)] == ["a", "c", "b"]

    def test_unknown_sort_falls_back_to_latest(self):
        state = reduce_filters(FilterState(), SetSort("price-low"))
        jobs = [{"title": "old", "createdAt": "2020-01-01"}, {"title": "new", "createdAt": "2024-01-01"}]
        result = filter_records(jobs, state, PROFILES["jobs"])
        assert [r["title"] for r in result] == ["new", "old"]


class TestPagination:
    def test_pages_cover_every_record_exactly_once(self):
        records = [{"n": i} for i in range(37)]
        pages = [paginate(records, p, 16) for p in range(1, 4)]

        assert all(p.pages == 3 and p.total == 37 for p in pages)
        seen = [r["n"] for p in pages for r in p.items]
        assert seen == list(range(37))

    def test_page_past_the_end_is_empty(self):
        page = paginate([{"n": 1}], 5, 16)
        assert page.items == []
        assert page.pages == 1

    def test_empty_input(self):
        page = paginate([], 1, 9)
        assert page.items == [] and page.pages == 0 and page.total == 0

    def test_featured_records_are_split_out(self):
        tenders = [
            {"title": f"t{i}", "publishedOn": f"2024-01-{i + 1:02d}", "featured": i < 4}
            for i in range(8)
        ]
        listing = filter_sort_paginate(tenders, FilterState(), PROFILES["tenders"])

        assert len(listing.featured) == 3
        assert all(t["featured"] for t in listing.featured)
        assert listing.page.total == 4
        assert not any(t["featured"] for t in listing.page.items)
        assert [t["title"] for t in listing.page.items] == ["t7", "t6", "t5", "t4"]
