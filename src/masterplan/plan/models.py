"""Plan node types making up the plan tree."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, Iterator, Optional, Sequence

from masterplan.errors import InvalidPlan
from masterplan.plan.actions import invoke

if TYPE_CHECKING:
    from masterplan.config import Configuration

logger = logging.getLogger(__name__)

Action = Callable[..., Any]


class Plan:
    """Common interface for every node in the plan tree.

    A plan is addressed on the command line by its ``name`` or by any of its
    ``aliases``. ``filename`` records where the plan was declared and is only
    used in diagnostics.
    """

    def __init__(
        self,
        name: str,
        description: Optional[str] = None,
        filename: Optional[Path | str] = None,
    ) -> None:
        text = str(name).strip()
        if not text:
            raise InvalidPlan("Plan names cannot be empty")
        self._name = text
        self.description = description
        self.filename = Path(filename) if filename else None
        self.aliases: set[str] = set()

    @property
    def name(self) -> str:
        return self._name

    @property
    def has_children(self) -> bool:
        return False

    def add_alias(self, alias: str) -> None:
        self.aliases.add(str(alias))

    def add_children(self, plans: Iterable["Plan"]) -> None:
        raise InvalidPlan(f"Cannot add child plans to '{self.name}', a plan with an action")

    def __call__(
        self, arguments: Optional[Sequence[str]] = None, config: Optional["Configuration"] = None
    ) -> object:  # pragma: no cover - interface
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class ExecutablePlan(Plan):
    """Leaf plan owning the action that performs the task.

    The action takes the argument list, plus ``config=`` when it declares it.
    """

    def __init__(
        self,
        name: str,
        action: Action,
        description: Optional[str] = None,
        filename: Optional[Path | str] = None,
    ) -> None:
        super().__init__(name, description, filename)
        self.action = action

    def __call__(
        self, arguments: Optional[Sequence[str]] = None, config: Optional["Configuration"] = None
    ) -> object:
        return invoke(self.action, list(arguments or ()), config)


class ParentPlan(Plan):
    """Intermediate node grouping other plans under a shared name."""

    def __init__(
        self,
        name: str,
        description: Optional[str] = None,
        filename: Optional[Path | str] = None,
    ) -> None:
        super().__init__(name, description, filename)
        self.children: Dict[str, Plan] = {}

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    def get_child(self, name: str) -> Optional[Plan]:
        """Return the child called ``name``, falling back to child aliases."""

        if name in self.children:
            return self.children[name]
        for child in self.children.values():
            if name in child.aliases:
                return child
        return None

    def add_children(self, plans: Iterable[Plan]) -> None:
        for plan in plans:
            self.incorporate(plan)

    def incorporate(self, plan: Plan) -> Plan:
        """Add ``plan`` to the children, resolving name collisions.

        Two colliding plans that both have children are merged into the
        existing entry. In every other case the incoming plan replaces the
        existing one and a warning is logged.
        """

        existing = self.children.get(plan.name)
        if existing is None:
            self.children[plan.name] = plan
            return plan
        if existing.has_children and plan.has_children:
            existing.add_children(list(plan.children.values()))  # type: ignore[attr-defined]
            return existing
        logger.warning(
            'Plan name collision encountered when loading plans from "%s" that cannot be merged. '
            '"%s" was previously defined in "%s". Plan "%s" from "%s" will be used instead.',
            plan.filename,
            plan.name,
            existing.filename,
            plan.name,
            plan.filename,
        )
        self.children[plan.name] = plan
        return plan

    def __getitem__(self, name: str) -> Plan:
        child = self.get_child(name)
        if child is None:
            raise KeyError(name)
        return child

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get_child(name) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self.children)

    def __len__(self) -> int:
        return len(self.children)

    def items(self):
        return self.children.items()
