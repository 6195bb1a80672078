# tests/core/test_permissions.py
import pytest

from salonbook.core.enums import Capability, RoleName
from salonbook.core.exceptions import ForbiddenException
from salonbook.core.permissions import (
    Actor,
    ResourceScope,
    actor_owns,
    has_capability,
    require_capability,
)


class TestCapabilityTable:
    @pytest.mark.parametrize(
        "role, capability, allowed",
        [
            (RoleName.CUSTOMER, Capability.CREATE_BOOKING, True),
            (RoleName.CUSTOMER, Capability.MANAGE_AVAILABILITY, False),
            (RoleName.PROVIDER, Capability.CANCEL_BOOKING, True),
            (RoleName.PROVIDER, Capability.CREATE_BOOKING, False),
            (RoleName.PROVIDER, Capability.MANAGE_BUSINESS_HOURS, False),
            (RoleName.OWNER, Capability.MANAGE_BUSINESS_HOURS, True),
            (RoleName.OWNER, Capability.RESCHEDULE_BOOKING, False),
            (RoleName.ADMIN, Capability.CONFIRM_BOOKING, True),
        ],
    )
    def test_role_capabilities(self, role, capability, allowed):
        assert has_capability(role, capability) is allowed

    def test_require_capability_raises_forbidden(self):
        with pytest.raises(ForbiddenException) as exc_info:
            require_capability(Actor("p-1", RoleName.PROVIDER), Capability.CREATE_BOOKING)
        assert exc_info.value.code == "CAPABILITY_DENIED"


class TestOwnership:
    scope = ResourceScope(
        customer_id="c-1", provider_user_ids=frozenset({"p-1", "p-2"}), owner_id="o-1"
    )

    def test_customer_owns_only_their_booking(self):
        assert actor_owns(Actor("c-1", RoleName.CUSTOMER), self.scope)
        assert not actor_owns(Actor("c-2", RoleName.CUSTOMER), self.scope)

    def test_provider_owns_bookings_they_perform(self):
        assert actor_owns(Actor("p-2", RoleName.PROVIDER), self.scope)
        assert not actor_owns(Actor("p-3", RoleName.PROVIDER), self.scope)

    def test_owner_owns_business_bookings(self):
        assert actor_owns(Actor("o-1", RoleName.OWNER), self.scope)
        assert not actor_owns(Actor("o-2", RoleName.OWNER), self.scope)

    def test_admin_owns_everything(self):
        assert actor_owns(Actor("anyone", RoleName.ADMIN), ResourceScope())
