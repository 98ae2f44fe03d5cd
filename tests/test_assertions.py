"""Tests for the assertion layer."""

import pytest

from restchain.assertions import MISSING, assert_equal, assert_field, assert_status, extract, find
from restchain.client import ApiResponse
from restchain.core.exceptions import AssertionMismatch


@pytest.fixture
def user_response() -> ApiResponse:
    return ApiResponse(
        status_code=200,
        body={"id": "42", "name": "John Doe", "address": {"city": "Springfield"}, "tags": [{"id": 7}]},
        method="GET",
        url="http://users.test/users/42",
    )


def test_assert_equal_match_is_noop() -> None:
    assert_equal("a", "a", "should match")


def test_assert_equal_mismatch_carries_message_and_values() -> None:
    with pytest.raises(AssertionMismatch) as exc_info:
        assert_equal(500, 201, "Create user should return 201")

    error = exc_info.value
    assert error.expected == 201
    assert error.actual == 500
    assert error.message == "Create user should return 201: expected 201 but was 500"


def test_assert_status(user_response: ApiResponse) -> None:
    assert_status(user_response, 200)
    with pytest.raises(AssertionMismatch, match="GET http://users.test/users/42"):
        assert_status(user_response, 404)


def test_find_navigates_dotted_paths(user_response: ApiResponse) -> None:
    assert find(user_response.body, "name") == "John Doe"
    assert find(user_response.body, "address.city") == "Springfield"
    assert find(user_response.body, "tags.0.id") == 7
    assert find(user_response.body, "tags.5.id") is MISSING
    assert find(user_response.body, "name.first") is MISSING
    assert find(None, "id") is MISSING


def test_assert_field(user_response: ApiResponse) -> None:
    assert_field(user_response, "name", "John Doe")
    with pytest.raises(AssertionMismatch) as exc_info:
        assert_field(user_response, "name", "Jane Doe", "Fetched user name")
    assert exc_info.value.actual == "John Doe"


def test_assert_field_missing_path_is_mismatch(user_response: ApiResponse) -> None:
    with pytest.raises(AssertionMismatch) as exc_info:
        assert_field(user_response, "email", None)
    assert exc_info.value.actual == "<missing>"


def test_extract(user_response: ApiResponse) -> None:
    assert extract(user_response, "id") == "42"
    with pytest.raises(AssertionMismatch, match="'uuid' missing"):
        extract(user_response, "uuid")
