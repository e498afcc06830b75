"""Per-invocation context tying configuration, plans and the presenter together."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Union

from masterplan.cli.display import format_configuration, format_plans, titleize
from masterplan.cli.presenter import Presenter
from masterplan.config import Configuration
from masterplan.errors import InvalidPlan
from masterplan.expansion import expand
from masterplan.plan import Plan, PlanTree, Resolution, resolve

logger = logging.getLogger(__name__)


@dataclass
class Arguments:
    """Parsed command line, as produced by the CLI layer."""

    plan_names: List[str] = field(default_factory=list)
    plan_arguments: List[str] = field(default_factory=list)
    ask: bool = True
    display_ui: bool = True
    pattern: Optional[str] = None
    show_configuration: bool = False
    resolve_callable_attributes: bool = False

    @property
    def display_plans(self) -> bool:
        return self.pattern is not None


class MasterplanSession:
    """Runs one invocation: load configuration and plans, pick a plan, execute it."""

    def __init__(
        self,
        arguments: Arguments,
        presenter: Presenter,
        *,
        base_path: Optional[Union[Path, str]] = None,
        base_plan: Optional[str] = None,
        configuration_factory: Callable[..., Configuration] = Configuration,
    ) -> None:
        self.arguments = arguments
        self.presenter = presenter
        self.base_path = base_path
        self.base_plan = base_plan
        self._configuration_factory = configuration_factory
        self.config: Optional[Configuration] = None
        self.plans: Optional[PlanTree] = None
        self.plan_stack: List[str] = []

    def run(self) -> int:
        return self.presenter.frame("Masterplan", self._run)

    def _run(self) -> int:
        self.config = self.presenter.report_progress(
            "Loading configuration", lambda: self._configuration_factory(self.base_path)
        )
        if self.arguments.show_configuration:
            self.presenter.frame("Configuration", self._print_configuration)
            return 0
        self.plans = self.presenter.report_progress("Loading plans", self.config.load_plans)
        if self.arguments.display_plans:
            return self._display_plans()
        selected = self.select_plan()
        if not self._user_is_sure():
            self.presenter.echo("aborted!")
            return 1
        logger.debug("executing %s with %s", "/".join(self.plan_stack), self.arguments.plan_arguments)
        selected(self.arguments.plan_arguments, config=self.config)
        return 0

    def select_plan(self) -> Plan:
        """Resolve the command line to an executable plan, prompting while it is ambiguous."""

        assert self.config is not None and self.plans is not None
        expansion = expand(self.config.aliases, self.arguments.plan_names, self.arguments.plan_arguments)
        names = list(expansion.plan_names)
        self.arguments.plan_arguments = list(expansion.plan_arguments)
        if self.base_plan is not None:
            names.insert(0, self.base_plan)
        resolution = resolve(self.plans, names)
        self.plan_stack = [titleize(name) for name in resolution.path]
        selected = resolution.plan
        while not Resolution(selected).is_executable:
            selected = self._interactive_selection(selected)
        return selected  # type: ignore[return-value]

    def _interactive_selection(self, current: Optional[Plan]) -> Plan:
        assert self.plans is not None
        parent = current if current is not None else self.plans
        options = {titleize(name): plan for name, plan in parent.children.items()}  # type: ignore[attr-defined]
        if not options:
            raise InvalidPlan(f"No plans to select under {'/'.join(self.plan_stack) or 'the root'}")
        selected = self.presenter.select_one(f"Select a plan under {'/'.join(self.plan_stack)}", options)
        self.plan_stack.append(titleize(selected.name))
        return selected

    def _user_is_sure(self) -> bool:
        assert self.config is not None
        if not self.arguments.ask or not self.config.ask:
            return True
        return self.presenter.confirm(f"Execute plan {'/'.join(self.plan_stack)}?")

    def _display_plans(self) -> int:
        assert self.plans is not None and self.arguments.pattern is not None
        filtered = self.plans.filter(self.arguments.pattern)
        if not filtered.children:
            self.presenter.echo(f"No plans match {self.arguments.pattern}")
            return 0
        self.presenter.frame("Plans", lambda: self._echo_lines(format_plans(filtered, self.presenter.use_color)))
        return 0

    def _print_configuration(self) -> None:
        assert self.config is not None
        lines = format_configuration(
            self.config,
            resolve=self.arguments.resolve_callable_attributes,
            use_color=self.presenter.use_color,
        )
        self._echo_lines(lines)

    def _echo_lines(self, lines: List[str]) -> None:
        for line in lines:
            self.presenter.echo(line)
