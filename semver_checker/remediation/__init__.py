"""Remediation planning and execution.

Key Components:
    - RemediationAction and its variants: One repository change each
    - RemediationPlanner: Orders actionable issues by priority and dependencies
    - RemediationExecutor: Renders manual commands or applies the plan
"""

from semver_checker.remediation.actions import (
    ACTION_HANDLERS,
    ConvertRefKindAction,
    CreateRefAction,
    CreateReleaseAction,
    DeleteRefAction,
    DeleteReleaseAction,
    PublishReleaseAction,
    RemediationAction,
    RepublishReleaseAction,
    UpdateRefAction,
    execute_action,
)
from semver_checker.remediation.executor import RemediationExecutor
from semver_checker.remediation.planner import RemediationPlanner, plan_remediation

__all__ = [
    "ACTION_HANDLERS",
    "ConvertRefKindAction",
    "CreateRefAction",
    "CreateReleaseAction",
    "DeleteRefAction",
    "DeleteReleaseAction",
    "PublishReleaseAction",
    "RemediationAction",
    "RemediationExecutor",
    "RemediationPlanner",
    "RepublishReleaseAction",
    "UpdateRefAction",
    "execute_action",
    "plan_remediation",
]
