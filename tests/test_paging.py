"""Tests for the shared pagination helpers."""

from virgo_articles.utils.paging import (
    PageScope,
    compute_paging,
    exceeds_ceiling,
    last_page,
    page_offset,
    position_in_page,
    retrievable_total,
)


class TestRetrievableTotal:
    def test_unbounded(self):
        assert retrievable_total(5000) == 5000

    def test_ceiling(self):
        assert retrievable_total(5000, 2000) == 2000
        assert retrievable_total(150, 2000) == 150

    def test_negative_total(self):
        assert retrievable_total(-3) == 0


class TestLastPage:
    def test_partial_last_page(self):
        assert last_page(41, 20) == 3

    def test_no_results_is_first_page(self):
        assert last_page(0, 20) == 1

    def test_ceiling_applies(self):
        assert last_page(5000, 20, 2000) == 100


class TestComputePaging:
    def test_first_page(self):
        assert compute_paging(100, 20, 0) == PageScope(1, 5, 20)

    def test_middle_page(self):
        assert compute_paging(100, 20, 40) == PageScope(3, 5, 20)

    def test_clamped_to_last_page(self):
        assert compute_paging(30, 20, 200).current_page == 2

    def test_clamped_to_ceiling(self):
        scope = compute_paging(5000, 20, 4000, max_accessible=2000)
        assert scope.total_pages == 100
        assert scope.current_page == 100

    def test_empty_result_set(self):
        assert compute_paging(0, 20, 0) == PageScope(1, 0, 20)

    def test_zero_per_page_treated_as_one(self):
        assert compute_paging(3, 0, 2) == PageScope(3, 3, 1)


class TestOffsets:
    def test_page_offset(self):
        assert page_offset(1, 20) == 0
        assert page_offset(3, 20) == 40

    def test_exceeds_ceiling(self):
        assert exceeds_ceiling(2000, 2000)
        assert not exceeds_ceiling(1999, 2000)
        assert not exceeds_ceiling(10**6, None)


class TestPositionInPage:
    def test_index_on_second_page(self):
        assert position_in_page(73, 50) == (2, 23)

    def test_index_on_first_page(self):
        assert position_in_page(7, 50) == (1, 7)

    def test_index_at_page_boundary(self):
        assert position_in_page(50, 50) == (1, 50)
        assert position_in_page(100, 50) == (2, 50)

    def test_far_index(self):
        assert position_in_page(1000, 50) == (20, 50)
        assert position_in_page(999, 50) == (20, 49)
