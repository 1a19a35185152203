"""Unit tests for the authorization gates."""

import pytest

from rolegraph.core.exceptions import ForbiddenError
from rolegraph.domain.entities import RoleContainer
from rolegraph.domain.services import (
    Capability,
    CapabilitySet,
    ClientAuthorizationGate,
    RealmAuthorizationGate,
    client_scope,
    gate_for,
    realm_scope,
)

REALM = RoleContainer.realm("r1", "demo")
CLIENT = RoleContainer.client("c1", "web-app", "r1")


class TestCapabilitySet:
    def test_manage_implies_view(self):
        caps = CapabilitySet.of("alice", [(realm_scope("r1"), "manage")])

        assert caps.allows(realm_scope("r1"), Capability.VIEW)
        assert caps.allows(realm_scope("r1"), Capability.MANAGE)

    def test_view_does_not_imply_manage(self):
        caps = CapabilitySet.of("alice", [(realm_scope("r1"), Capability.VIEW)])

        assert not caps.allows(realm_scope("r1"), Capability.MANAGE)

    def test_unknown_capability_rejected(self):
        with pytest.raises(ValueError):
            CapabilitySet.of("alice", [(realm_scope("r1"), "administer")])


class TestRealmGate:
    def test_gate_for_picks_realm_gate(self):
        assert isinstance(gate_for(REALM, CapabilitySet()), RealmAuthorizationGate)

    def test_empty_capabilities_are_denied(self):
        gate = gate_for(REALM, CapabilitySet())

        with pytest.raises(ForbiddenError):
            gate.require_view()
        with pytest.raises(ForbiddenError):
            gate.require_manage()

    def test_grants_on_another_realm_do_not_apply(self):
        caps = CapabilitySet.of("alice", [(realm_scope("r2"), Capability.MANAGE)])

        assert not gate_for(REALM, caps).can_view()

    def test_client_grant_does_not_open_realm(self):
        caps = CapabilitySet.of("alice", [(client_scope("c1"), Capability.MANAGE)])

        assert not gate_for(REALM, caps).can_manage()

    def test_viewer_may_view_only(self):
        gate = gate_for(REALM, CapabilitySet.of("bob", [(realm_scope("r1"), Capability.VIEW)]))

        gate.require_view()
        with pytest.raises(ForbiddenError, match="manage"):
            gate.require_manage()


class TestClientGate:
    def test_gate_for_picks_client_gate(self):
        assert isinstance(gate_for(CLIENT, CapabilitySet()), ClientAuthorizationGate)

    def test_client_grant(self):
        caps = CapabilitySet.of("alice", [(client_scope("c1"), Capability.MANAGE)])

        assert gate_for(CLIENT, caps).can_manage()

    def test_realm_grant_covers_its_clients(self):
        caps = CapabilitySet.of("alice", [(realm_scope("r1"), Capability.VIEW)])
        gate = gate_for(CLIENT, caps)

        assert gate.can_view()
        assert not gate.can_manage()

    def test_other_client_grant_is_denied(self):
        caps = CapabilitySet.of("alice", [(client_scope("c2"), Capability.MANAGE)])

        with pytest.raises(ForbiddenError):
            gate_for(CLIENT, caps).require_view()
