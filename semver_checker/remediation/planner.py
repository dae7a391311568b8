"""Remediation planning: order issues' actions for execution.

The plan satisfies two constraints:

1. Explicit issue-to-issue dependencies (convert a branch to a tag before
   retargeting it, delete a release before moving its tag).
2. Ascending action priority, with ties kept in evaluation order.

Dependencies win over priority. A dependency cycle or a reference to an
unknown issue makes planning fail with PlanningError; nothing is dropped.
"""

import heapq

import structlog

from semver_checker.exceptions import PlanningError
from semver_checker.models.domain import ValidationIssue

log = structlog.get_logger(__name__)


class RemediationPlanner:
    """Build the execution order of remediation actions.

    Issues are stored in an arena (a list) and dependencies as adjacency
    lists of arena indices.
    """

    def __init__(self, issues: list[ValidationIssue]) -> None:
        """Initialize planner.

        Args:
            issues: All issues of the run, actionable or not

        Raises:
            PlanningError: If two issues share an id
        """
        self.issues = list(issues)
        self.index: dict[str, int] = {}
        for position, issue in enumerate(self.issues):
            if issue.id in self.index:
                raise PlanningError(f"Duplicate issue id {issue.id}")
            self.index[issue.id] = position
        self.depends_on: list[list[int]] = [[] for _ in self.issues]
        self.dependents: list[list[int]] = [[] for _ in self.issues]

    def _build_graph(self) -> None:
        self.depends_on = [[] for _ in self.issues]
        self.dependents = [[] for _ in self.issues]
        for position, issue in enumerate(self.issues):
            for dep_id in issue.dependencies:
                if dep_id not in self.index:
                    raise PlanningError(f"Invalid dependency: {dep_id} referenced by {issue.id} but not found")
                dep = self.index[dep_id]
                self.depends_on[position].append(dep)
                self.dependents[dep].append(position)

    def validate_dependencies(self) -> None:
        """Check for unknown references and cycles.

        Raises:
            PlanningError: If a dependency is unknown or a cycle exists
        """
        self._build_graph()

        white, grey, black = 0, 1, 2
        color = [white] * len(self.issues)

        def visit(node: int, path: list[int]) -> None:
            color[node] = grey
            path.append(node)
            for dep in self.depends_on[node]:
                if color[dep] == grey:
                    cycle = [self.issues[i].id for i in path[path.index(dep) :]]
                    cycle.append(self.issues[dep].id)
                    log.error("circular_dependency_detected", cycle=cycle)
                    raise PlanningError("Circular dependency detected", cycle=cycle)
                if color[dep] == white:
                    visit(dep, path)
            path.pop()
            color[node] = black

        for node in range(len(self.issues)):
            if color[node] == white:
                visit(node, [])

    def _priority(self, node: int) -> int:
        action = self.issues[node].action
        return action.priority if action is not None and action.priority is not None else 0

    def plan(self) -> list[ValidationIssue]:
        """Return actionable issues in execution order.

        Returns:
            Issues with an action, ordered by priority and dependencies

        Raises:
            PlanningError: If the dependencies cannot be satisfied
        """
        self.validate_dependencies()

        remaining = [len(deps) for deps in self.depends_on]
        ready = [(self._priority(node), node) for node, count in enumerate(remaining) if count == 0]
        heapq.heapify(ready)

        order: list[int] = []
        while ready:
            _, node = heapq.heappop(ready)
            order.append(node)
            for dependent in self.dependents[node]:
                remaining[dependent] -= 1
                if remaining[dependent] == 0:
                    heapq.heappush(ready, (self._priority(dependent), dependent))

        if len(order) != len(self.issues):
            # validate_dependencies already rejects cycles
            stuck = [self.issues[i].id for i, count in enumerate(remaining) if count > 0]
            raise PlanningError("Dependencies cannot be satisfied", cycle=stuck)

        planned = [self.issues[node] for node in order if self.issues[node].is_actionable]
        log.info("remediation_planned", actions=len(planned), issues=len(self.issues))
        return planned


def plan_remediation(issues: list[ValidationIssue]) -> list[ValidationIssue]:
    """Convenience wrapper around RemediationPlanner."""
    return RemediationPlanner(issues).plan()
