# rules.py
from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Set, Union

import yaml

from .constants import logger
from .models import Snapshot
from .oracle import expected_removals_for_colors


@dataclass(frozen=True)
class ClassRule:
    """Clicking a ``trigger`` node removes every node of the ``removes`` colours."""
    trigger: str
    removes: FrozenSet[str] = frozenset()
    requires: FrozenSet[str] = frozenset()
    excludes: FrozenSet[str] = frozenset()

    def expected_removals(self, snapshot: Snapshot) -> Set[int]:
        return expected_removals_for_colors(snapshot, self.removes)


@dataclass(frozen=True)
class InstanceRule:
    """Clicking a ``trigger`` node removes that node alone.

    A class filter cannot single out one node among identical siblings, so the
    clicked node's identity has to be captured before acting.
    """
    trigger: str
    requires: FrozenSet[str] = frozenset()
    excludes: FrozenSet[str] = frozenset()

    def expected_removals(self, clicked: int) -> Set[int]:
        return {clicked}


Rule = Union[ClassRule, InstanceRule]

DEFAULT_RULES: List[Rule] = [
    InstanceRule("orange", requires=frozenset({"border"})),
    ClassRule("purple", removes=frozenset({"purple"})),
    ClassRule("green", removes=frozenset({"green", "blue"})),
    ClassRule("blue"),
    ClassRule("orange", excludes=frozenset({"border"})),
]


def matches(rule: Rule, classes) -> bool:
    classes = set(classes)
    return (
        rule.trigger in classes
        and rule.requires <= classes
        and not (rule.excludes & classes)
    )


def rule_for(classes, rules: Optional[List[Rule]] = None) -> Optional[Rule]:
    for rule in rules if rules is not None else DEFAULT_RULES:
        if matches(rule, classes):
            return rule
    return None


def predict_removals(rule: Optional[Rule], before: Snapshot, clicked: int) -> Set[int]:
    if rule is None:
        return set()
    if isinstance(rule, InstanceRule):
        return rule.expected_removals(clicked)
    return rule.expected_removals(before)


def load_rules(path: str) -> List[Rule]:
    """Read a rule table from YAML.

    rules:
      - trigger: green
        removes: [green, blue]
      - trigger: orange
        scope: instance
        requires: [border]
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    rules: List[Rule] = []
    for entry in data.get("rules", []):
        if "trigger" not in entry:
            raise ValueError(f"Rule without trigger in {path}: {entry}")
        scope = entry.get("scope", "class")
        requires = frozenset(entry.get("requires", []))
        excludes = frozenset(entry.get("excludes", []))
        if scope == "instance":
            rules.append(InstanceRule(entry["trigger"], requires=requires, excludes=excludes))
        elif scope == "class":
            rules.append(ClassRule(entry["trigger"], removes=frozenset(entry.get("removes", [])),
                                   requires=requires, excludes=excludes))
        else:
            raise ValueError(f"Unknown rule scope {scope!r} in {path}")

    logger.info(f"Loaded {len(rules)} removal rules from {path}")
    return rules
