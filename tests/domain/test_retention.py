"""Tests for release retention."""

import pytest
from slipway.domain.errors import FleetDivergence, RetentionViolation
from slipway.domain.services.fleet_consistency import FleetConsistencyChecker
from slipway.domain.services.release_store import ReleaseStore
from slipway.domain.services.retention import RetentionManager, select_prune_set
from slipway.domain.value_objects.deploy_layout import DeployLayout

SIX = ["r1", "r2", "r3", "r4", "r5", "r6"]


def _manager(executor, keep=3):
    store = ReleaseStore(
        executor, FleetConsistencyChecker(executor), DeployLayout("/srv/app")
    )
    return RetentionManager(store, keep)


class TestSelectPruneSet:
    def test_keeps_quota_plus_current(self):
        assert select_prune_set(SIX, 3, "r6") == ["r1", "r2"]

    def test_nothing_to_prune(self):
        assert select_prune_set(["r1", "r2", "r3", "r4"], 3, "r4") == []

    def test_keep_zero(self):
        assert select_prune_set(["r1", "r2", "r3"], 0, "r3") == ["r1", "r2"]

    def test_unsorted_input(self):
        assert select_prune_set(["r6", "r1", "r4", "r2", "r5", "r3"], 3) == ["r1", "r2"]

    def test_never_prunes_current(self):
        with pytest.raises(RetentionViolation):
            select_prune_set(SIX, 3, "r1")

    def test_negative_keep(self):
        with pytest.raises(ValueError):
            select_prune_set(SIX, -1)


class TestDiscardStaleUpcoming:
    @pytest.mark.asyncio
    async def test_nothing_staged(self, scripted_executor, fleet):
        manager = _manager(scripted_executor)
        assert await manager.discard_stale_upcoming(fleet) is None
        assert not scripted_executor.ran("rm ")

    @pytest.mark.asyncio
    async def test_abandoned_deploy_is_removed(self, scripted_executor, fleet):
        scripted_executor.on_remote("readlink /srv/app/current", "releases/r5")
        scripted_executor.on_remote("readlink /srv/app/upcoming", "releases/r6")
        manager = _manager(scripted_executor)

        assert await manager.discard_stale_upcoming(fleet) == "r6"

        assert scripted_executor.ran("rm -rf /srv/app/releases/r6")
        assert scripted_executor.ran("rm -f upcoming")

    @pytest.mark.asyncio
    async def test_abandoned_rollback_keeps_directory(self, scripted_executor, fleet):
        scripted_executor.on_remote("readlink /srv/app/current", "releases/r5")
        scripted_executor.on_remote("readlink /srv/app/upcoming", "releases/r4")
        manager = _manager(scripted_executor)

        await manager.discard_stale_upcoming(fleet)

        assert not scripted_executor.ran("rm -rf")
        assert scripted_executor.ran("rm -f upcoming")

    @pytest.mark.asyncio
    async def test_failure_is_swallowed(self, scripted_executor, fleet):
        scripted_executor.on_remote("readlink /srv/app/upcoming", "releases/r6", "")
        manager = _manager(scripted_executor)

        assert await manager.discard_stale_upcoming(fleet) is None


class TestCleanup:
    @pytest.mark.asyncio
    async def test_prunes_oldest(self, scripted_executor, fleet):
        scripted_executor.on_remote("ls -1", "\n".join(SIX))
        scripted_executor.on_remote("readlink /srv/app/current", "releases/r6")
        manager = _manager(scripted_executor)

        assert await manager.cleanup(fleet) == ["r1", "r2"]
        assert scripted_executor.matching("rm -rf") == [
            "rm -rf /srv/app/releases/r1 /srv/app/releases/r2"
        ]

    @pytest.mark.asyncio
    async def test_within_quota(self, scripted_executor, fleet):
        scripted_executor.on_remote("ls -1", "r1\nr2\nr3\nr4")
        scripted_executor.on_remote("readlink /srv/app/current", "releases/r4")
        manager = _manager(scripted_executor)

        assert await manager.cleanup(fleet) == []
        assert not scripted_executor.ran("rm -rf")

    @pytest.mark.asyncio
    async def test_divergent_listing_removes_nothing(self, scripted_executor, fleet):
        scripted_executor.on_remote("ls -1", "\n".join(SIX), "\n".join(SIX[1:]))
        scripted_executor.on_remote("readlink /srv/app/current", "releases/r6")
        manager = _manager(scripted_executor)

        with pytest.raises(FleetDivergence):
            await manager.cleanup(fleet)

        assert not scripted_executor.ran("rm -rf")

    @pytest.mark.asyncio
    async def test_divergent_current_removes_nothing(self, scripted_executor, fleet):
        scripted_executor.on_remote("ls -1", "\n".join(SIX))
        scripted_executor.on_remote("readlink /srv/app/current", "releases/r6", "releases/r5")
        manager = _manager(scripted_executor)

        with pytest.raises(FleetDivergence):
            await manager.cleanup(fleet)

        assert not scripted_executor.ran("rm -rf")
