"""Scenario registration lists, one module per API resource."""

from restchain.suites.users import CREATED_USER_ID, build_user_scenarios

SUITES = {
    "users": build_user_scenarios,
}

__all__ = ["CREATED_USER_ID", "SUITES", "build_user_scenarios"]
