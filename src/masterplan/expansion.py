"""User alias table and command expansion.

User aliases are defined in masterplans and are more powerful than the
aliases set in plan files: they can stand for whole plan paths and may carry
plan arguments after a ``--``::

    - define_alias: {2-add-2: calculator add -- 2 2}

Expansion is recursive and does not detect cycles. An alias that expands to
itself, directly or through other aliases, never terminates.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Sequence, Tuple, Union

SEPARATOR = "--"

AliasTarget = Union[str, Tuple[str, ...]]


class AliasTable:
    """Mapping from an alias to the tokens it stands for; first definition wins."""

    def __init__(self) -> None:
        self._aliases: Dict[str, Tuple[str, ...]] = {}

    def define(self, alias: str, target: Union[str, Sequence[str]]) -> bool:
        if alias in self._aliases:
            return False
        tokens = tuple(target.split()) if isinstance(target, str) else tuple(str(t) for t in target)
        self._aliases[alias] = tokens
        return True

    def lookup(self, token: str) -> AliasTarget:
        """Return the tokens ``token`` expands to, or ``token`` itself when undefined."""

        return self._aliases.get(token, token)

    def __contains__(self, token: object) -> bool:
        return token in self._aliases

    def __iter__(self) -> Iterator[str]:
        return iter(self._aliases)

    def __len__(self) -> int:
        return len(self._aliases)

    def items(self):
        return self._aliases.items()


@dataclass(frozen=True)
class Expansion:
    plan_names: Tuple[str, ...]
    plan_arguments: Tuple[str, ...]


def split_arguments(argv: Sequence[str]) -> Tuple[List[str], List[str]]:
    """Split ``argv`` at the first ``--`` into plan names and passthrough arguments."""

    args = list(argv)
    if SEPARATOR not in args:
        return args, []
    index = args.index(SEPARATOR)
    return args[:index], args[index + 1 :]


def expand(
    table: AliasTable,
    plan_names: Sequence[str],
    plan_arguments: Sequence[str] = (),
) -> Expansion:
    """Expand user aliases in ``plan_names``.

    Arguments contributed by aliases come first, in the order they were
    expanded, followed by ``plan_arguments`` from the command line.
    """

    alias_arguments: List[str] = []
    names: List[str] = []
    for token in plan_names:
        names.extend(_expand_token(table, token, alias_arguments))
    return Expansion(tuple(names), tuple(alias_arguments) + tuple(plan_arguments))


def _expand_token(table: AliasTable, token: str, alias_arguments: List[str]) -> List[str]:
    dealiased = table.lookup(token)
    if isinstance(dealiased, str):
        return [dealiased]
    head, tail = split_arguments(dealiased)
    names: List[str] = []
    for part in head:
        names.extend(_expand_token(table, part, alias_arguments))
    alias_arguments.extend(tail)
    return names
