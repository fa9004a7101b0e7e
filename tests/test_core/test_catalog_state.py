"""Tests for CatalogState reducers and snapshot."""

from catalog_sync.core.catalog_state import SEARCH_SECTION_TITLE, CatalogState
from catalog_sync.core.errors import ErrorKind
from catalog_sync.schemas.catalog import CatalogMode, ModeKind

from conftest import build_product


class TestInitialState:
    def test_starts_empty_in_all_mode(self, state: CatalogState):
        assert state.all_products == []
        assert state.products_by_category == {}
        assert state.categories == []
        assert state.mode == CatalogMode.all()
        assert state.current_page == 0
        assert state.has_more is True
        assert state.loading is False
        assert state.error is None


class TestPagination:
    def test_publish_page_appends_at_base(self, state: CatalogState):
        page0 = [build_product(1), build_product(2)]
        page1 = [build_product(3)]

        state.publish_page(page0, base=0)
        state.publish_page(page1, base=2)

        assert [p.id for p in state.all_products] == [1, 2, 3]

    def test_publish_page_twice_at_same_base_replaces(self, state: CatalogState):
        state.publish_page([build_product(1)], base=0)
        state.publish_page([build_product(2)], base=1)
        state.publish_page([build_product(9)], base=1)

        assert [p.id for p in state.all_products] == [1, 9]

    def test_complete_page_advances_cursor(self, state: CatalogState):
        state.complete_page(0, result_count=10)

        assert state.current_page == 1
        assert state.has_more is True

    def test_empty_page_ends_pagination(self, state: CatalogState):
        state.complete_page(3, result_count=0)

        assert state.has_more is False

    def test_reset_all_products(self, state: CatalogState):
        state.publish_page([build_product(1)], base=0)
        state.complete_page(0, 1)
        state.publish_category("laptops", [build_product(2, "laptops")])

        state.reset_all_products()

        assert state.all_products == []
        assert state.current_page == 0
        assert state.has_more is True
        assert "laptops" in state.products_by_category


class TestModes:
    def test_enter_mode_resets_pagination(self, state: CatalogState):
        state.complete_page(4, 10)

        state.enter_mode(CatalogMode.category("laptops"))

        assert state.selected_category == "laptops"
        assert state.search_query == ""
        assert state.current_page == 0
        assert state.has_more is True

    def test_modes_are_exclusive(self, state: CatalogState):
        state.enter_mode(CatalogMode.category("laptops"))
        state.enter_mode(CatalogMode.search("phone"))

        assert state.selected_category is None
        assert state.search_query == "phone"

    def test_leaving_all_parks_cursor_for_restore(self, state: CatalogState):
        state.publish_page([build_product(1), build_product(2)], base=0)
        state.complete_page(0, 2)
        state.publish_page([build_product(3)], base=2)
        state.complete_page(1, 1)

        state.enter_mode(CatalogMode.category("laptops"))
        state.publish_category("laptops", [build_product(4, "laptops")])

        assert state.restore_all_view() is True
        assert state.mode.kind is ModeKind.ALL
        assert state.current_page == 2
        assert state.has_more is True
        assert [p.id for p in state.all_products] == [1, 2, 3]

    def test_restore_fails_after_search_overwrote_slot(self, state: CatalogState):
        state.publish_page([build_product(1)], base=0)
        state.complete_page(0, 1)
        state.enter_mode(CatalogMode.search("phone"))
        state.publish_search([build_product(7)])
        state.enter_mode(CatalogMode.category("laptops"))

        assert state.restore_all_view() is False
        assert state.mode == CatalogMode.all()
        assert state.current_page == 0

    def test_restore_fails_when_buffer_empty(self, state: CatalogState):
        state.enter_mode(CatalogMode.category("laptops"))

        assert state.restore_all_view() is False

    def test_search_forces_no_more_pages(self, state: CatalogState):
        state.enter_mode(CatalogMode.search("phone"))
        state.publish_search([build_product(1)])

        assert state.has_more is False
        assert state.all_products_origin == "search"


class TestSignals:
    def test_loading_tracks_in_flight_count(self, state: CatalogState):
        state.begin_fetch()
        state.begin_fetch()
        state.end_fetch()

        assert state.loading is True

        state.end_fetch()

        assert state.loading is False

    def test_error_set_and_clear(self, state: CatalogState):
        state.set_error("Request timed out after 10s", ErrorKind.NETWORK)

        assert state.snapshot().error == "Request timed out after 10s"
        assert state.snapshot().error_kind == "network"

        state.clear_error()

        assert state.error is None
        assert state.error_kind is None


class TestObservation:
    def test_subscribers_see_every_mutation(self, state: CatalogState):
        seen: list[int] = []
        unsubscribe = state.subscribe(lambda s: seen.append(s.revision))

        state.set_refreshing(True)
        state.set_refreshing(False)
        unsubscribe()
        state.set_refreshing(True)

        assert seen == [1, 2]

    def test_failing_listener_does_not_break_mutation(self, state: CatalogState):
        def broken(_: CatalogState) -> None:
            raise RuntimeError("listener bug")

        state.subscribe(broken)
        state.publish_page([build_product(1)], base=0)

        assert len(state.all_products) == 1

    def test_snapshot_is_a_copy(self, state: CatalogState):
        state.publish_page([build_product(1)], base=0)
        snap = state.snapshot()

        state.publish_page([build_product(2)], base=1)

        assert [p.id for p in snap.all_products] == [1]

    def test_find_product_searches_all_buffers(self, state: CatalogState):
        state.publish_page([build_product(1)], base=0)
        state.publish_category("laptops", [build_product(5, "laptops")])

        assert state.find_product(5).id == 5
        assert state.find_product(99) is None


class TestSections:
    def test_all_mode_groups_by_category_in_first_seen_order(self, state: CatalogState):
        state.publish_page(
            [
                build_product(1, "smartphones"),
                build_product(2, "laptops"),
                build_product(3, "smartphones"),
            ],
            base=0,
        )

        sections = state.sections()

        assert [s.title for s in sections] == ["smartphones", "laptops"]
        assert [p.id for p in sections[0].products] == [1, 3]

    def test_search_mode_single_section(self, state: CatalogState):
        state.enter_mode(CatalogMode.search("phone"))
        state.publish_search([build_product(1), build_product(2, "laptops")])

        sections = state.sections()

        assert len(sections) == 1
        assert sections[0].title == SEARCH_SECTION_TITLE

    def test_category_mode_uses_category_buffer(self, state: CatalogState):
        state.publish_page([build_product(1)], base=0)
        state.publish_category("laptops", [build_product(2, "laptops")])
        state.enter_mode(CatalogMode.category("laptops"))

        sections = state.sections()

        assert sections[0].title == "laptops"
        assert [p.id for p in sections[0].products] == [2]
