"""Scenarios for the ``/users`` resource.

create_user publishes the new user's id; the read, update and delete
scenarios depend on it and are skipped when the create fails.
"""

from __future__ import annotations

from restchain.assertions import assert_field, assert_status, extract
from restchain.models import RunContext, Scenario

CREATED_USER_ID = "created resource id"

USER_NAME = "John Doe"
USER_JOB = "QA Engineer"
UPDATED_JOB = "Senior QA Engineer"
INVALID_USER_ID = "invalidId"


def create_user(ctx: RunContext) -> None:
    response = ctx.client.post("/users", json={"name": USER_NAME, "job": USER_JOB})
    assert_status(response, 201, "Create user should return 201")
    assert_field(response, "name", USER_NAME, "Created user name")
    ctx.publish(CREATED_USER_ID, str(extract(response, "id")))


def get_user(ctx: RunContext) -> None:
    user_id = ctx.require(CREATED_USER_ID)
    response = ctx.client.get(f"/users/{user_id}")
    assert_status(response, 200, "Get user should return 200")
    assert_field(response, "name", USER_NAME, "Fetched user name")


def update_user(ctx: RunContext) -> None:
    user_id = ctx.require(CREATED_USER_ID)
    response = ctx.client.put(f"/users/{user_id}", json={"name": USER_NAME, "job": UPDATED_JOB})
    assert_status(response, 200, "Update user should return 200")
    assert_field(response, "job", UPDATED_JOB, "Updated user job")


def delete_user(ctx: RunContext) -> None:
    user_id = ctx.require(CREATED_USER_ID)
    response = ctx.client.delete(f"/users/{user_id}")
    assert_status(response, 204, "Delete user should return 204")


def get_invalid_user(ctx: RunContext) -> None:
    # Non-numeric and out-of-range ids are both expected to be 404
    response = ctx.client.get(f"/users/{INVALID_USER_ID}")
    assert_status(response, 404, "Unknown user should return 404")


def build_user_scenarios() -> list[Scenario]:
    return [
        Scenario("create_user", create_user, priority=1, description="POST /users"),
        Scenario("get_user", get_user, priority=2, depends_on="create_user", description="GET /users/{id}"),
        Scenario("update_user", update_user, priority=3, depends_on="create_user", description="PUT /users/{id}"),
        Scenario("delete_user", delete_user, priority=4, depends_on="create_user", description="DELETE /users/{id}"),
        Scenario("get_invalid_user", get_invalid_user, priority=5, description="GET /users/invalidId"),
    ]
