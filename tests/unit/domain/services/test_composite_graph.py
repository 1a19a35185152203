"""Unit tests for CompositeGraphEngine."""

from unittest.mock import patch

import pytest
import pytest_asyncio

from rolegraph.core.config import get_settings
from rolegraph.core.exceptions import CyclicCompositionError, NotFoundError
from rolegraph.domain.services import CompositeGraphEngine


@pytest_asyncio.fixture
async def roles(role_store, realm, client_container):
    """Realm roles a, b, c, d and client role reader."""
    async with role_store.atomic():
        created = {name: await role_store.create_role(realm, name) for name in "abcd"}
        created["reader"] = await role_store.create_role(client_container, "reader")
    return created


@pytest.fixture
def engine(role_store):
    return CompositeGraphEngine(role_store, traversal_limit=100)


async def _add(engine, role_store, parent, *children):
    async with role_store.atomic():
        return await engine.add_composites(parent, list(children))


class TestAddComposites:
    @pytest.mark.asyncio
    async def test_add_marks_parent_composite(self, engine, role_store, roles):
        updated = await _add(engine, role_store, roles["a"], roles["b"], roles["reader"])

        assert updated.composite
        assert updated.composite_ids == {roles["b"].id, roles["reader"].id}
        assert await role_store.get_composite_ids(roles["a"].id) == {
            roles["b"].id,
            roles["reader"].id,
        }

    @pytest.mark.asyncio
    async def test_adding_existing_edge_is_noop(self, engine, role_store, roles):
        await _add(engine, role_store, roles["a"], roles["b"])
        updated = await _add(engine, role_store, roles["a"], roles["b"])

        assert updated.composite_ids == {roles["b"].id}

    @pytest.mark.asyncio
    async def test_self_composite_rejected(self, engine, role_store, roles):
        with pytest.raises(CyclicCompositionError):
            await _add(engine, role_store, roles["a"], roles["a"])

        assert await role_store.get_composite_ids(roles["a"].id) == set()

    @pytest.mark.asyncio
    async def test_direct_cycle_rejected(self, engine, role_store, roles):
        await _add(engine, role_store, roles["a"], roles["b"])

        with pytest.raises(CyclicCompositionError) as exc_info:
            await _add(engine, role_store, roles["b"], roles["a"])

        assert exc_info.value.role_id == roles["b"].id
        assert exc_info.value.child_id == roles["a"].id
        assert await role_store.get_composite_ids(roles["b"].id) == set()

    @pytest.mark.asyncio
    async def test_transitive_cycle_rejected(self, engine, role_store, roles):
        await _add(engine, role_store, roles["a"], roles["b"])
        await _add(engine, role_store, roles["b"], roles["c"])

        with pytest.raises(CyclicCompositionError):
            await _add(engine, role_store, roles["c"], roles["a"])

    @pytest.mark.asyncio
    async def test_batch_is_all_or_nothing(self, engine, role_store, roles):
        await _add(engine, role_store, roles["a"], roles["b"])

        with pytest.raises(CyclicCompositionError):
            await _add(engine, role_store, roles["b"], roles["c"], roles["a"])

        assert await role_store.get_composite_ids(roles["b"].id) == set()

    @pytest.mark.asyncio
    async def test_diamond_is_allowed(self, engine, role_store, roles):
        await _add(engine, role_store, roles["a"], roles["b"], roles["c"])
        await _add(engine, role_store, roles["b"], roles["d"])
        await _add(engine, role_store, roles["c"], roles["d"])

        assert await role_store.get_composite_ids(roles["c"].id) == {roles["d"].id}

    @pytest.mark.asyncio
    async def test_child_from_other_realm_rejected(
        self, engine, role_store, roles, other_realm
    ):
        async with role_store.atomic():
            foreign = await role_store.create_role(other_realm, "foreign")

        with pytest.raises(NotFoundError):
            await _add(engine, role_store, roles["a"], foreign)

    @pytest.mark.asyncio
    async def test_traversal_limit_fails_closed(self, role_store, roles):
        engine = CompositeGraphEngine(role_store, traversal_limit=100)
        await _add(engine, role_store, roles["a"], roles["b"])
        await _add(engine, role_store, roles["b"], roles["c"])

        tight = CompositeGraphEngine(role_store, traversal_limit=1)
        with pytest.raises(CyclicCompositionError, match="traversal exceeded"):
            await _add(tight, role_store, roles["d"], roles["a"])


class TestQueries:
    @pytest.mark.asyncio
    async def test_remove_ignores_absent_edges(self, engine, role_store, roles):
        await _add(engine, role_store, roles["a"], roles["b"], roles["c"])

        async with role_store.atomic():
            updated = await engine.remove_composites(roles["a"], [roles["b"], roles["d"]])

        assert updated.composite_ids == {roles["c"].id}

    @pytest.mark.asyncio
    async def test_realm_and_client_filters_partition_composites(
        self, engine, role_store, roles, client_container
    ):
        await _add(engine, role_store, roles["a"], roles["b"], roles["reader"])

        all_children = await engine.get_composites(roles["a"])
        realm_children = await engine.get_realm_composites(roles["a"])
        client_children = await engine.get_client_composites(roles["a"], client_container)

        assert {r.name for r in all_children} == {"b", "reader"}
        assert {r.name for r in realm_children} == {"b"}
        assert {r.name for r in client_children} == {"reader"}
        assert realm_children | client_children == all_children

    @pytest.mark.asyncio
    async def test_expand_composites(self, engine, role_store, roles):
        await _add(engine, role_store, roles["a"], roles["b"])
        await _add(engine, role_store, roles["b"], roles["c"], roles["reader"])

        expanded = await engine.expand_composites(roles["a"])

        assert {r.name for r in expanded} == {"b", "c", "reader"}
        assert await engine.expand_composites(roles["d"]) == set()

    @pytest.mark.asyncio
    async def test_creates_cycle(self, engine, role_store, roles):
        await _add(engine, role_store, roles["a"], roles["b"])

        assert await engine.creates_cycle(roles["b"], [roles["a"].id])
        assert await engine.creates_cycle(roles["c"], [roles["c"].id])
        assert not await engine.creates_cycle(roles["c"], [roles["a"].id])

    @pytest.mark.asyncio
    async def test_add_and_creates_cycle_share_one_search(self, engine, role_store, roles):
        await _add(engine, role_store, roles["a"], roles["b"])

        with patch.object(engine, "_find_cycle", wraps=engine._find_cycle) as find_cycle:
            assert await engine.creates_cycle(roles["b"], [roles["c"].id, roles["a"].id])
            with pytest.raises(CyclicCompositionError) as exc_info:
                await _add(engine, role_store, roles["b"], roles["c"], roles["a"])

        assert find_cycle.await_count == 2
        # The error names the child that closes the cycle, not the first child
        assert exc_info.value.child_id == roles["a"].id
        assert "Adding a to b" in str(exc_info.value)


class TestTraversalLimit:
    def test_explicit_limit_is_kept(self, role_store):
        assert CompositeGraphEngine(role_store, traversal_limit=3).traversal_limit == 3

    def test_default_comes_from_settings(self, role_store):
        engine = CompositeGraphEngine(role_store)

        assert engine.traversal_limit == get_settings().composite_traversal_limit

    @pytest.mark.parametrize("limit", [0, -1])
    def test_non_positive_limit_rejected(self, role_store, limit):
        with pytest.raises(ValueError, match="traversal_limit"):
            CompositeGraphEngine(role_store, traversal_limit=limit)
