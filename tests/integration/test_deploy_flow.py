"""Integration tests for deployment flows.

These tests wire the real container with a shell executor that runs every
"remote" command on this machine against a deployment root in tmp_path.
Only the source control checkout is faked.
"""

import itertools
import os
from datetime import UTC, datetime, timedelta

import pytest

from slipway.application.orchestration.dag_orchestrator import OrchestrationError
from slipway.composition_root import create_container
from slipway.domain.entities.deployment_state import ReleaseStatus
from slipway.domain.errors import CommandFailure, NoRollbackTarget, UnsafeRemoteState
from slipway.domain.ports.source_control_port import SourceControlPort
from slipway.domain.value_objects import release_name
from slipway.infrastructure.config import DeployConfig, FleetConfig, SlipwayConfig

REPO = "ssh://hg@example.com/app"

# Revision ids below sort in reverse of deploy order, so every ordering
# assertion has to come from the release timestamps.


@pytest.fixture(autouse=True)
def ticking_clock(monkeypatch):
    minutes = itertools.count()

    class TickingClock(datetime):
        @classmethod
        def now(cls, tz=None):
            return datetime(2024, 1, 1, tzinfo=UTC) + timedelta(minutes=next(minutes))

    monkeypatch.setattr(release_name, "datetime", TickingClock)


class FakeCheckout(SourceControlPort):
    def __init__(self) -> None:
        self.rev = "f001"
        self.pulls = 0

    async def revision(self, workspace: str) -> str:
        return self.rev

    async def init(self, workspace: str, repository: str) -> None:
        pass

    async def default_path(self, workspace: str) -> str:
        return REPO

    async def pull(self, workspace: str) -> None:
        self.pulls += 1

    async def update(self, workspace: str, bookmark: str = "") -> None:
        pass


@pytest.fixture
def workspace(tmp_path):
    path = tmp_path / "ws"
    (path / "src").mkdir(parents=True)
    (path / "src" / "app.txt").write_text("v1")
    (path / ".hg").mkdir()
    return path


@pytest.fixture
def deploy_to(tmp_path):
    return tmp_path / "srv"


@pytest.fixture
def checkout():
    return FakeCheckout()


def _container(local_executor, checkout, workspace, deploy_to, **deploy_overrides):
    settings = dict(
        deploy_to=str(deploy_to),
        repository=REPO,
        workspace=str(workspace),
        dirs_to_copy=("src",),
        keep_releases=3,
        setup=("touch SETUP_DONE",),
    )
    settings.update(deploy_overrides)
    config = SlipwayConfig(
        deploy=DeployConfig(**settings),
        fleet=FleetConfig(targets=("localhost",)),
    )
    return create_container(config, executor=local_executor, vcs=checkout)


async def _deploy(container, checkout, revision):
    checkout.rev = revision
    results = await container.deploy.execute()
    return str(results["deploy:update"].name)


def _current(deploy_to):
    return os.readlink(deploy_to / "current")


def _releases(deploy_to):
    return sorted(os.listdir(deploy_to / "releases"))


class TestDeployFlow:
    @pytest.mark.asyncio
    async def test_first_deploy(self, local_executor, checkout, workspace, deploy_to):
        container = _container(local_executor, checkout, workspace, deploy_to)

        name = await _deploy(container, checkout, "f001")

        assert name.endswith("-f001")
        assert _current(deploy_to) == f"releases/{name}"
        assert not os.path.lexists(deploy_to / "upcoming")
        release = deploy_to / "releases" / name
        assert (release / "src" / "app.txt").read_text() == "v1"
        assert (release / "SETUP_DONE").exists()
        assert checkout.pulls == 1

    @pytest.mark.asyncio
    async def test_second_deploy_seeds_from_current(
        self, local_executor, checkout, workspace, deploy_to
    ):
        container = _container(local_executor, checkout, workspace, deploy_to)
        first = await _deploy(container, checkout, "f001")
        (deploy_to / "releases" / first / "var.log").write_text("kept")
        (workspace / "src" / "app.txt").write_text("v2")

        second = await _deploy(container, checkout, "e002")

        release = deploy_to / "releases" / second
        assert _current(deploy_to) == f"releases/{second}"
        assert (release / "src" / "app.txt").read_text() == "v2"
        assert (release / "var.log").read_text() == "kept"
        assert (deploy_to / "releases" / first / "src" / "app.txt").read_text() == "v1"

    @pytest.mark.asyncio
    async def test_upload_mirrors_workspace(
        self, local_executor, checkout, workspace, deploy_to
    ):
        container = _container(local_executor, checkout, workspace, deploy_to)
        (workspace / "src" / "old.txt").write_text("gone soon")
        first = await _deploy(container, checkout, "f001")
        (workspace / "src" / "old.txt").unlink()

        second = await _deploy(container, checkout, "e002")

        assert (deploy_to / "releases" / first / "src" / "old.txt").exists()
        assert not (deploy_to / "releases" / second / "src" / "old.txt").exists()

    @pytest.mark.asyncio
    async def test_retention_keeps_quota_plus_current(
        self, local_executor, checkout, workspace, deploy_to
    ):
        container = _container(
            local_executor, checkout, workspace, deploy_to, keep_releases=1
        )

        names = []
        for revision in ("f001", "e002", "d003", "c004"):
            names.append(await _deploy(container, checkout, revision))

        assert _releases(deploy_to) == names[-2:]
        assert _current(deploy_to) == f"releases/{names[-1]}"

    @pytest.mark.asyncio
    async def test_unsafe_remote_aborts(
        self, local_executor, checkout, workspace, deploy_to
    ):
        container = _container(local_executor, checkout, workspace, deploy_to)
        first = await _deploy(container, checkout, "f001")
        os.symlink(f"releases/{first}", deploy_to / "upcoming")

        with pytest.raises(OrchestrationError) as exc:
            await _deploy(container, checkout, "e002")

        assert exc.value.step == "deploy:check-remote"
        assert isinstance(exc.value.__cause__, UnsafeRemoteState)
        assert _releases(deploy_to) == [first]

    @pytest.mark.asyncio
    async def test_failed_setup_leaves_current_untouched(
        self, local_executor, checkout, workspace, deploy_to
    ):
        container = _container(local_executor, checkout, workspace, deploy_to)
        first = await _deploy(container, checkout, "f001")

        broken = _container(
            local_executor, checkout, workspace, deploy_to, setup=("exit 1",)
        )
        with pytest.raises(OrchestrationError) as exc:
            await _deploy(broken, checkout, "e002")

        assert exc.value.step == "deploy:setup"
        assert isinstance(exc.value.__cause__, CommandFailure)
        assert _current(deploy_to) == f"releases/{first}"
        assert os.path.lexists(deploy_to / "upcoming")

        await container.tasks["deploy:cleanup"].execute()

        assert not os.path.lexists(deploy_to / "upcoming")
        assert _releases(deploy_to) == [first]
        third = await _deploy(container, checkout, "d003")
        assert _current(deploy_to) == f"releases/{third}"

    @pytest.mark.asyncio
    async def test_status(self, local_executor, checkout, workspace, deploy_to):
        container = _container(local_executor, checkout, workspace, deploy_to)

        state = await container.release_store.inspect_state(container.nodes)
        assert state.status == ReleaseStatus.NO_RELEASE

        name = await _deploy(container, checkout, "f001")

        state = await container.release_store.inspect_state(container.nodes)
        assert state.status == ReleaseStatus.PUBLISHED
        assert state.current == name


class TestRollbackFlow:
    @pytest.mark.asyncio
    async def test_rollback_to_previous(
        self, local_executor, checkout, workspace, deploy_to
    ):
        container = _container(local_executor, checkout, workspace, deploy_to)
        first = await _deploy(container, checkout, "f001")
        second = await _deploy(container, checkout, "e002")

        results = await container.rollback.execute()

        assert results["rollback:prepare"] == first
        assert _current(deploy_to) == f"releases/{first}"
        assert not os.path.lexists(deploy_to / "upcoming")
        assert _releases(deploy_to) == [first, second]

    @pytest.mark.asyncio
    async def test_rollback_walks_back_one_release_at_a_time(
        self, local_executor, checkout, workspace, deploy_to
    ):
        container = _container(local_executor, checkout, workspace, deploy_to)
        names = []
        for revision in ("f001", "e002", "d003"):
            names.append(await _deploy(container, checkout, revision))

        await container.rollback.execute()
        assert _current(deploy_to) == f"releases/{names[1]}"

        await container.rollback.execute()
        assert _current(deploy_to) == f"releases/{names[0]}"

        with pytest.raises(OrchestrationError) as exc:
            await container.rollback.execute()
        assert isinstance(exc.value.__cause__, NoRollbackTarget)

    @pytest.mark.asyncio
    async def test_rollback_with_single_release(
        self, local_executor, checkout, workspace, deploy_to
    ):
        container = _container(local_executor, checkout, workspace, deploy_to)
        first = await _deploy(container, checkout, "f001")

        with pytest.raises(OrchestrationError) as exc:
            await container.rollback.execute()

        assert isinstance(exc.value.__cause__, NoRollbackTarget)
        assert _current(deploy_to) == f"releases/{first}"
        assert not os.path.lexists(deploy_to / "upcoming")
