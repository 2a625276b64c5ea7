"""
Composition Root

Architectural Intent:
- Dependency injection composition root for the Slipway application
- Single place where adapters, domain services and steps are wired together
- Every step is registered under its task name; composites look them up

Design Decisions:
- Uses a simple dataclass container instead of a DI framework
- The immutable SlipwayConfig is the only source of settings
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from slipway.application.use_cases.check_environment import CheckConfig, CheckRemote
from slipway.application.use_cases.cleanup_releases import CleanupReleases
from slipway.application.use_cases.deploy_fleet import DeployFleet
from slipway.application.use_cases.prepare_source import (
    BuildWorkspace,
    FetchSource,
    PrepareWorkspace,
)
from slipway.application.use_cases.publish_release import PublishRelease, RestartServices
from slipway.application.use_cases.rollback_deployment import (
    PrepareRollback,
    RollbackDeployment,
)
from slipway.application.use_cases.stage_release import RunSetup, StageRelease
from slipway.domain.errors import ConfigurationError
from slipway.domain.events import RELEASE_EVENTS, DomainEvent
from slipway.domain.ports.remote_executor_port import RemoteExecutorPort
from slipway.domain.ports.source_control_port import SourceControlPort
from slipway.domain.services.fleet_consistency import FleetConsistencyChecker
from slipway.domain.services.release_staging import ReleaseStagingEngine
from slipway.domain.services.release_state_machine import ReleaseStateMachine
from slipway.domain.services.release_store import ReleaseStore
from slipway.domain.services.remote_sanity import RemoteSanityCheck
from slipway.domain.services.retention import RetentionManager
from slipway.domain.value_objects.command_result import CopyOptions
from slipway.domain.value_objects.deploy_layout import DeployLayout
from slipway.domain.value_objects.node import Node
from slipway.infrastructure.adapters.fabric_adapter import FabricExecutor
from slipway.infrastructure.adapters.mercurial_adapter import MercurialAdapter
from slipway.infrastructure.config import SlipwayConfig
from slipway.infrastructure.event_bus import EventBus
from slipway.infrastructure.telemetry.otel_exporter import (
    OTELConfig,
    OTELExporter,
    TracedTask,
)

logger = logging.getLogger(__name__)


@dataclass
class SlipwayContainer:
    """DI container holding all wired dependencies."""

    config: SlipwayConfig
    nodes: list[Node]
    executor: RemoteExecutorPort
    vcs: SourceControlPort
    event_bus: EventBus
    release_store: ReleaseStore
    tasks: dict[str, Any]
    deploy: DeployFleet
    rollback: RollbackDeployment
    telemetry: OTELExporter


async def _log_event(event: DomainEvent) -> None:
    logger.info("Event %s: %s", event.event_type, event.to_dict())


def _create_telemetry(config: SlipwayConfig) -> OTELExporter:
    settings = config.telemetry
    try:
        otel = OTELConfig(
            endpoint=settings.endpoint,
            insecure=settings.insecure,
            environment=settings.environment,
        )
    except ValueError as e:
        raise ConfigurationError(str(e)) from e
    exporter = OTELExporter(otel)
    exporter.initialize()
    return exporter


def _parse_targets(targets: tuple[str, ...]) -> list[Node]:
    nodes = []
    for target in targets:
        try:
            nodes.append(Node.parse(target))
        except ValueError as e:
            raise ConfigurationError(f"invalid fleet target {target!r}: {e}") from e
    return nodes


def create_container(
    config: SlipwayConfig,
    executor: Optional[RemoteExecutorPort] = None,
    vcs: Optional[SourceControlPort] = None,
) -> SlipwayContainer:
    """Create and wire all dependencies.

    `executor` and `vcs` default to the Fabric and Mercurial adapters.
    """
    deploy = config.deploy
    if not deploy.deploy_to:
        raise ConfigurationError("no deployment path defined!")

    nodes = _parse_targets(config.fleet.targets)
    layout = DeployLayout(deploy.deploy_to)

    executor = executor or FabricExecutor()
    vcs = vcs or MercurialAdapter(executor)
    event_bus = EventBus()
    for event_type in RELEASE_EVENTS:
        event_bus.subscribe(event_type, _log_event)

    checker = FleetConsistencyChecker(executor)
    store = ReleaseStore(executor, checker, layout)
    staging = ReleaseStagingEngine(
        executor,
        store,
        workspace=deploy.workspace,
        dirs_to_copy=deploy.dirs_to_copy,
        copy_options=CopyOptions(
            delete_extraneous=config.remote_copy.delete_extraneous,
            excludes=config.remote_copy.excludes,
        ),
    )
    state_machine = ReleaseStateMachine(store)
    retention = RetentionManager(store, keep_releases=deploy.keep_releases)

    tasks: dict[str, Any] = {
        "deploy:check-config": CheckConfig(config),
        "deploy:check-remote": CheckRemote(RemoteSanityCheck(executor, layout), nodes),
        "deploy:create-workspace": PrepareWorkspace(vcs, deploy, event_bus),
        "deploy:fetch": FetchSource(vcs, deploy, event_bus),
        "deploy:build": BuildWorkspace(executor, vcs, deploy, event_bus),
        "deploy:update": StageRelease(
            vcs, staging, deploy.workspace, nodes, layout.deploy_to, event_bus
        ),
        "deploy:setup": RunSetup(executor, layout, deploy.setup, nodes, event_bus),
        "deploy:publish": PublishRelease(
            state_machine, nodes, layout.deploy_to, event_bus
        ),
        "deploy:restart": RestartServices(
            executor, deploy.restart, nodes, layout.deploy_to, event_bus
        ),
        "deploy:cleanup": CleanupReleases(
            retention, nodes, layout.deploy_to, event_bus
        ),
        "rollback:prepare": PrepareRollback(
            state_machine, nodes, layout.deploy_to, event_bus
        ),
    }

    telemetry = _create_telemetry(config)
    if telemetry.enabled:
        tasks = {name: TracedTask(name, task, telemetry) for name, task in tasks.items()}

    return SlipwayContainer(
        config=config,
        nodes=nodes,
        executor=executor,
        vcs=vcs,
        event_bus=event_bus,
        release_store=store,
        tasks=tasks,
        deploy=DeployFleet(tasks),
        rollback=RollbackDeployment(tasks),
        telemetry=telemetry,
    )
