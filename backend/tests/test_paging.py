import pytest

from availit.errors import ValidationError
from availit.repositories import Direction, Order, Page, PageRequest, Sort
from availit.repositories.paging import to_snake


def test_sort_parse_maps_camel_case_and_direction():
    sort = Sort.parse("hospitalName,desc")

    assert sort.orders == (Order("hospital_name", Direction.DESC),)


def test_sort_parse_defaults_to_ascending():
    assert Sort.parse("availableBeds").orders == (Order("available_beds", Direction.ASC),)


def test_sort_parse_multiple_expressions():
    sort = Sort.parse(["icuBeds,DESC", "totalBeds,hospitalName,asc"])

    assert sort.fields() == ["icu_beds", "total_beds", "hospital_name"]
    assert [o.descending for o in sort] == [True, False, False]


def test_sort_parse_empty():
    assert not Sort.parse(None)
    assert not Sort.parse("")


def test_sort_parse_rejects_direction_without_field():
    with pytest.raises(ValidationError):
        Sort.parse("asc")


def test_direction_parse_rejects_unknown_value():
    with pytest.raises(ValidationError):
        Sort.by("hospital_name", direction="sideways")


@pytest.mark.parametrize("page,size", [(-1, 10), (0, 0)])
def test_page_request_rejects_bad_arguments(page, size):
    with pytest.raises(ValidationError):
        PageRequest(page=page, size=size)


def test_page_request_from_offset():
    request = PageRequest.of_offset(40, 20)

    assert request.page == 2
    assert request.offset == 40
    assert request.limit == 20
    assert request.next().offset == 60


def test_page_request_from_unaligned_offset():
    with pytest.raises(ValidationError):
        PageRequest.of_offset(5, 20)


def test_page_totals():
    page = Page(["a", "b"], PageRequest(page=0, size=2), total_elements=5)

    assert page.total_pages == 3
    assert page.has_next
    assert not page.has_previous
    assert list(page) == ["a", "b"]


def test_empty_page():
    page = Page([], PageRequest(), total_elements=0)

    assert page.total_pages == 0
    assert not page.has_next


@pytest.mark.parametrize(
    "name,expected",
    [
        ("hospitalName", "hospital_name"),
        ("ICUBeds", "icu_beds"),
        ("icuBeds", "icu_beds"),
        ("available_beds", "available_beds"),
        ("id", "id"),
    ],
)
def test_to_snake(name, expected):
    assert to_snake(name) == expected


def test_sort_parse_acronym_field():
    assert Sort.parse("ICUBeds,desc").orders == (Order("icu_beds", Direction.DESC),)
