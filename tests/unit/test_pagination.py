"""Unit tests for page-number pagination state."""

from catalog.schemas.common_schemas import PaginationResponse
from catalog.utils.pagination import PaginationState


class TestPaginationState:
    def test_defaults(self):
        state = PaginationState()
        assert state.total_pages == 1
        assert state.offset == 0
        assert not state.has_next_page
        assert not state.has_previous_page

    def test_pages_and_offset(self):
        state = PaginationState(current_page=2, page_size=10, total_items=35)
        assert state.total_pages == 4
        assert state.offset == 10
        assert state.has_next_page
        assert state.has_previous_page

    def test_invalid_values_are_clamped(self):
        state = PaginationState(current_page=0, page_size=0, total_items=-4)
        assert (state.current_page, state.page_size, state.total_items) == (1, 1, 0)

    def test_set_page_clamps_to_range(self):
        state = PaginationState(page_size=10, total_items=25)
        state.set_page(7)
        assert state.current_page == 3
        state.set_page(-2)
        assert state.current_page == 1

    def test_next_and_previous_stop_at_edges(self):
        state = PaginationState(page_size=10, total_items=15)
        state.previous_page()
        assert state.current_page == 1
        state.next_page()
        state.next_page()
        assert state.current_page == 2

    def test_set_page_size_returns_to_first_page(self):
        state = PaginationState(current_page=3, page_size=10, total_items=50)
        state.set_page_size(0)
        assert state.page_size == 1
        assert state.current_page == 1

    def test_shrinking_total_pulls_page_back(self):
        state = PaginationState(current_page=5, page_size=10, total_items=50)
        state.set_total_items(12)
        assert state.current_page == 2
        state.set_total_items(-1)
        assert state.total_items == 0
        assert state.current_page == 1

    def test_reset_restores_initial_values(self):
        state = PaginationState(current_page=2, page_size=10, total_items=30)
        state.next_page()
        state.set_page_size(5)
        state.reset()
        assert (state.current_page, state.page_size, state.total_items) == (2, 10, 30)

    def test_response_model(self):
        state = PaginationState(current_page=2, page_size=10, total_items=35)
        response = PaginationResponse.from_state(state)
        assert response.model_dump() == {
            "current_page": 2,
            "page_size": 10,
            "total_items": 35,
            "total_pages": 4,
            "has_next_page": True,
            "has_previous_page": True,
        }
        assert state.to_dict()["offset"] == 10
