"""Rule evaluation and state collection.

Key Components:
    - RuleEngine: Runs the validation rules and seals the state
    - collect_state: Builds a RepositoryState from a repository provider
"""

from semver_checker.engine.collector import collect_state
from semver_checker.engine.rule_engine import RuleEngine

__all__ = ["RuleEngine", "collect_state"]
