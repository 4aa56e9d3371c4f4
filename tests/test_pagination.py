import pytest

from quartermaster.views.pagination import Pagination, request_window


def test_page_count_rounds_up():
    assert Pagination(total=21, page_size=10).page_count == 3
    assert Pagination(total=20, page_size=10).page_count == 2
    assert Pagination(total=0, page_size=10).page_count == 0


def test_page_is_clamped_to_available_range():
    assert Pagination(total=21, page=9, page_size=10).page == 3
    assert Pagination(total=21, page=0, page_size=10).page == 1
    assert Pagination(total=0, page=4, page_size=10).page == 1


def test_skip_is_never_negative():
    p = Pagination(total=5, page=-3, page_size=10)
    assert p.skip == 0
    assert request_window(-2, 10) == (1, 0)
    assert request_window(3, 20) == (3, 40)


def test_navigation():
    p = Pagination(total=35, page=2, page_size=10)
    assert (p.previous_page, p.next_page) == (1, 3)
    last = p.go_to(99)
    assert last.page == 4
    assert last.next_page is None
    assert last.as_dict()["to"] == 35


def test_empty_listing_window():
    info = Pagination(total=0).as_dict()
    assert info["from"] == 0 and info["to"] == 0
    assert info["previousPage"] is None and info["nextPage"] is None


def test_page_size_must_be_positive():
    with pytest.raises(ValueError):
        Pagination(total=10, page_size=0)
