"""
Tests for role ordering and the elevation threshold.
"""

import pytest

from taskgrid.access.elevation import ELEVATED_ROLES, is_elevated
from taskgrid_shared.schemas.common import ROLE_ORDER, Role, highest_role


class TestRoleOrder:
    def test_order_is_total_and_owner_highest(self):
        ranks = [r.rank for r in ROLE_ORDER]
        assert ranks == sorted(ranks, reverse=True)
        assert len(set(ranks)) == len(Role)
        assert ROLE_ORDER[0] is Role.OWNER
        assert ROLE_ORDER[-1] is Role.VIEWER

    def test_highest_role_ignores_missing(self):
        assert highest_role(None, Role.VIEWER, Role.MANAGER, None) is Role.MANAGER
        assert highest_role(Role.MEMBER) is Role.MEMBER

    def test_highest_role_of_nothing_is_none(self):
        assert highest_role() is None
        assert highest_role(None, None) is None


class TestElevation:
    @pytest.mark.parametrize(
        "role,expected",
        [
            (Role.OWNER, True),
            (Role.MANAGER, True),
            (Role.MEMBER, False),
            (Role.VIEWER, False),
            (None, False),
        ],
    )
    def test_threshold(self, role, expected):
        assert is_elevated(role) is expected

    def test_threshold_matches_owner_or_manager_for_every_role(self):
        for role in Role:
            assert is_elevated(role) == (role in (Role.OWNER, Role.MANAGER))
        assert ELEVATED_ROLES == {Role.OWNER, Role.MANAGER}
