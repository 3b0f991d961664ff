import pytest

from src.payment_client.errors import InvalidArgument
from src.payment_client.pagination import Pageable, parse_sort


class TestParseSort:
    """Tests for parse_sort()."""

    @pytest.mark.unit
    def test_field_and_direction_are_split_on_comma(self):
        assert parse_sort("amount,asc") == ("amount", "asc")

    @pytest.mark.unit
    def test_only_first_entry_of_a_sequence_is_used(self):
        assert parse_sort(["status,asc", "amount,desc"]) == ("status", "asc")
        assert parse_sort(("updated_at,desc",)) == ("updated_at", "desc")

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "sort",
        [None, "", "amount", "amount,asc,extra", ",asc", "amount,", [], ["amount"], 17],
    )
    def test_malformed_sort_falls_back_to_created_at_desc(self, sort):
        assert parse_sort(sort) == ("created_at", "desc")

    @pytest.mark.unit
    def test_whitespace_around_parts_is_stripped(self):
        assert parse_sort(" amount , asc ") == ("amount", "asc")


class TestPageable:
    """Tests for the pagination descriptor."""

    @pytest.mark.unit
    def test_defaults(self):
        assert Pageable().to_params() == {
            "page": 0,
            "size": 10,
            "sortBy": "created_at",
            "direction": "desc",
        }

    @pytest.mark.unit
    def test_to_params_uses_parsed_sort(self):
        params = Pageable(page=2, size=25, sort="amount,asc").to_params()
        assert params == {"page": 2, "size": 25, "sortBy": "amount", "direction": "asc"}

    @pytest.mark.unit
    @pytest.mark.parametrize("page", [-1, 1.5, "0", True])
    def test_invalid_page_rejected(self, page):
        with pytest.raises(InvalidArgument):
            Pageable(page=page)

    @pytest.mark.unit
    @pytest.mark.parametrize("size", [0, -5, "10", None])
    def test_invalid_size_rejected(self, size):
        with pytest.raises(InvalidArgument):
            Pageable(size=size)

    @pytest.mark.unit
    def test_coerce_accepts_mapping(self):
        pageable = Pageable.coerce({"page": 1, "size": 5, "sort": ["amount,asc"]})
        assert pageable.to_params()["sortBy"] == "amount"
        assert pageable.page == 1

    @pytest.mark.unit
    def test_coerce_none_gives_defaults(self):
        assert Pageable.coerce(None) == Pageable()

    @pytest.mark.unit
    def test_coerce_returns_same_instance(self):
        pageable = Pageable(page=3)
        assert Pageable.coerce(pageable) is pageable

    @pytest.mark.unit
    def test_coerce_rejects_unknown_keys(self):
        with pytest.raises(InvalidArgument, match="limit"):
            Pageable.coerce({"page": 0, "limit": 10})

    @pytest.mark.unit
    def test_coerce_rejects_other_types(self):
        with pytest.raises(InvalidArgument):
            Pageable.coerce("page=0")

    @pytest.mark.unit
    def test_invalid_argument_is_a_value_error(self):
        with pytest.raises(ValueError):
            Pageable(size=0)
