"""The merged plan tree and the resolver that walks it."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from masterplan.errors import NoPlanFound

from .models import ParentPlan, Plan

ROOT_NAME = "INTERNAL PLAN HOLDER"


class PlanTree(ParentPlan):
    """Anonymous root holding every plan loaded for an invocation."""

    def __init__(self, plans: Iterable[Plan] = ()) -> None:
        super().__init__(ROOT_NAME)
        self.add_children(plans)

    def filter(self, pattern: str | re.Pattern[str]) -> "PlanTree":
        """Return a copy keeping only plans whose name matches ``pattern``.

        A parent survives when any descendant matches. Plans with neither a
        description nor children are never displayed and are dropped.
        """

        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        tree = PlanTree()
        tree.children = _filter_children(self, regex)
        return tree


def _filter_children(parent: ParentPlan, regex: re.Pattern[str]) -> dict[str, Plan]:
    kept: dict[str, Plan] = {}
    for name, plan in parent.children.items():
        if not (plan.has_children or plan.description):
            continue
        if regex.search(name):
            kept[name] = plan
            continue
        if not isinstance(plan, ParentPlan):
            continue
        children = _filter_children(plan, regex)
        if children:
            pruned = ParentPlan(plan.name, plan.description, plan.filename)
            pruned.aliases = set(plan.aliases)
            pruned.children = children
            kept[name] = pruned
    return kept


@dataclass(frozen=True)
class Resolution:
    """Outcome of walking the tree with a queue of plan names."""

    plan: Optional[Plan]
    path: tuple[str, ...] = ()

    @property
    def is_executable(self) -> bool:
        return self.plan is not None and not self.plan.has_children


def resolve(tree: ParentPlan, names: Sequence[str]) -> Resolution:
    """Follow ``names`` down from ``tree``, checking names before aliases."""

    current: Optional[Plan] = None
    node: Plan = tree
    path: list[str] = []
    for name in names:
        path.append(name)
        current = node.get_child(name) if isinstance(node, ParentPlan) else None
        if current is None:
            raise NoPlanFound(path)
        node = current
    return Resolution(plan=current, path=tuple(path))
