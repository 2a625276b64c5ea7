"""
Application Orchestration Package

Architectural Intent:
- Contains workflow orchestration components
- Sequences named lifecycle steps into deploy and rollback runs
"""

from slipway.application.orchestration.dag_orchestrator import (
    DAGOrchestrator,
    WorkflowStep,
    OrchestrationError,
)

__all__ = ["DAGOrchestrator", "WorkflowStep", "OrchestrationError"]
