"""Text rendering for plan listings and configuration dumps."""
from __future__ import annotations

import re
from typing import TYPE_CHECKING, List, Mapping

import click

from masterplan.plan import Plan

if TYPE_CHECKING:  # pragma: no cover
    from masterplan.config import Configuration


def titleize(text: str) -> str:
    """Turn ``foo_bar-baz`` into ``Foo Bar Baz``."""

    return " ".join(word.capitalize() for word in re.split(r"[-_\s]+", text) if word)


def format_plans(plans: Plan, use_color: bool = True, prefix: str = "") -> List[str]:
    """Render the children of ``plans`` as an indented bullet list."""

    lines: List[str] = []
    children: Mapping[str, Plan] = getattr(plans, "children", {})
    for name, plan in children.items():
        if not (plan.has_children or plan.description):
            continue
        title = f"{titleize(name)} " + _style(f"({name})", "bright_black", use_color)
        lines.append(f"{prefix}• " + _style(title, "yellow", use_color))
        if plan.aliases:
            aliases = ", ".join(sorted(plan.aliases))
            lines.append(f"{prefix}  - " + _style(f"aliases: {aliases}", "bright_black", use_color))
        if plan.description:
            lines.append(f"{prefix}  - " + _style(plan.description, "blue", use_color))
        if plan.has_children:
            lines.extend(format_plans(plan, use_color, "  " + prefix))
        lines.append("")
    return lines


def format_configuration(config: "Configuration", *, resolve: bool = False, use_color: bool = True) -> List[str]:
    """Render every configured attribute; ``*`` marks values computed lazily."""

    lines = [
        _style("Values marked with * were lazily loaded.", "bright_black", use_color),
        "",
    ]
    for name, value in config.attributes():
        lazy = config.is_deferred(name)
        if lazy and resolve:
            try:
                value = config.get(name)
            except Exception as exc:  # noqa: BLE001 - shown to the user instead of aborting the dump
                value = f"UNABLE TO LOAD: {exc}"
        marker = "*" if lazy else " "
        lines.append(_style(name, "yellow", use_color))
        lines.append(f"\t {marker} " + _style(repr(value), "blue", use_color))
        lines.append("")
    return lines


def _style(text: str, color: str, use_color: bool) -> str:
    return click.style(text, fg=color) if use_color else text
