import pytest
from app.models.search import ListingFilters, MapFilters
from app.modules.properties.query_builder import PropertyQueryBuilder, _contains


@pytest.fixture
def builder():
    return PropertyQueryBuilder()


def run(session, query):
    return session.execute(query).scalars().all()


class TestLikePattern:
    def test_escapes_wildcards(self):
        assert _contains("50%_off") == "%50\\%\\_off%"

    def test_plain_value(self):
        assert _contains("Pune") == "%Pune%"


class TestListingQuery:
    """Test the listing query against real rows"""

    def test_conditions_always_require_availability(self, builder):
        conditions = builder.build_conditions(ListingFilters())
        assert len(conditions) == 1
        assert "is_available" in str(conditions[0])

    def test_each_filter_adds_a_condition(self, builder):
        filters = ListingFilters(
            city="Pune", area="Baner", pin_code="411045", property_type="flat",
            min_rent=1, max_rent=2, facilities="wifi,gym",
        )
        assert len(builder.build_conditions(filters)) == 9

    def test_count_matches_page_total(self, builder, test_db_session, make_user, make_property):
        owner = make_user()
        for rent in (5000, 10000, 15000):
            make_property(owner, rent=rent)

        filters = ListingFilters(min_rent=6000, limit=1)

        assert len(run(test_db_session, builder.build_listing_query(filters))) == 1
        assert test_db_session.execute(builder.build_count_query(filters)).scalar_one() == 2

    def test_ties_are_broken_by_id(self, builder, test_db_session, make_user, make_property):
        owner = make_user()
        rows = [make_property(owner, rent=9000) for _ in range(4)]

        asc = run(test_db_session, builder.build_listing_query(ListingFilters(sort_by="rent", sort_order="asc")))
        desc = run(test_db_session, builder.build_listing_query(ListingFilters(sort_by="rent", sort_order="desc")))

        assert [r.id for r in asc] == sorted(r.id for r in rows)
        assert [r.id for r in desc] == sorted((r.id for r in rows), reverse=True)

    def test_sort_by_views(self, builder, test_db_session, make_user, make_property):
        owner = make_user()
        low = make_property(owner, views=1)
        high = make_property(owner, views=9)

        result = run(test_db_session, builder.build_listing_query(ListingFilters(sort_by="views")))

        assert [r.id for r in result] == [high.id, low.id]

    def test_facility_filter_uses_column_mapping(self, builder, test_db_session, make_user, make_property):
        owner = make_user()
        pets = make_property(owner, pet_friendly=True)
        make_property(owner)

        result = run(test_db_session, builder.build_listing_query(ListingFilters(facilities="petFriendly")))

        assert [r.id for r in result] == [pets.id]


class TestMapAndFeaturedQueries:
    def test_map_city_and_bounds(self, builder, test_db_session, make_user, make_property):
        owner = make_user()
        inside = make_property(owner, city="Pune", latitude=18.5, longitude=73.8)
        make_property(owner, city="Pune", latitude=19.5, longitude=73.8)
        make_property(owner, city="Mumbai", latitude=18.5, longitude=73.8)

        filters = MapFilters(city="pune", bounds="18,73,19,74")
        result = run(test_db_session, builder.build_map_query(filters))

        assert [r.id for r in result] == [inside.id]

    def test_map_limit(self, builder, test_db_session, make_user, make_property):
        owner = make_user()
        for _ in range(3):
            make_property(owner)

        result = run(test_db_session, builder.build_map_query(MapFilters(limit=2)))

        assert len(result) == 2

    def test_featured_order(self, builder, test_db_session, make_user, make_property):
        owner = make_user()
        older = make_property(owner, is_verified=True, views=5)
        newer = make_property(owner, is_verified=True, views=5)
        top = make_property(owner, is_verified=True, views=8)

        result = run(test_db_session, builder.build_featured_query())

        assert [r.id for r in result] == [top.id, newer.id, older.id]

    def test_owner_query_ignores_availability(self, builder, test_db_session, make_user, make_property):
        owner = make_user()
        other = make_user()
        mine = [make_property(owner), make_property(owner, is_available=False)]
        make_property(other)

        result = run(test_db_session, builder.build_owner_query(owner.id))

        assert {r.id for r in result} == {p.id for p in mine}
