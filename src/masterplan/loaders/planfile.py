"""YAML loader for the default ``.plan`` format.

A plan file is a list of directives evaluated top to bottom::

    - description: Build the project
    - plot: build
      plans:
        - desc: Compile sources
        - plan: compile
          command: make all
        - set_alias: c

``plot``/``namespace`` create parent plans, ``plan``/``task`` create
executable plans, ``description``/``desc`` describe the next plan declared in
the same scope and ``set_alias`` adds aliases to the previous one.
"""
from __future__ import annotations

import shlex
from pathlib import Path
from typing import Any, List, Mapping, NoReturn, Optional, Sequence

import yaml
from jsonschema import Draft7Validator

from masterplan.errors import InvalidPlanFile
from masterplan.plan import CallAction, CommandAction, ExecutablePlan, ParentPlan, Plan, SourceAction
from masterplan.plan.models import Action

EXTENSION = ".plan"

PARENT_KEYS = ("plot", "namespace")
LEAF_KEYS = ("plan", "task")
DESCRIPTION_KEYS = ("description", "desc")
ACTION_KEYS = ("command", "call", "source")
PARENT_OPTIONS = {"plans", "aliases", *DESCRIPTION_KEYS}
LEAF_OPTIONS = {"aliases", "function", "env", "cwd", *ACTION_KEYS, *DESCRIPTION_KEYS}

_STRING_LIST = {"type": "array", "items": {"type": "string", "minLength": 1}}

DIRECTIVE_SCHEMA = {
    "type": "object",
    "minProperties": 1,
    "additionalProperties": False,
    "properties": {
        "plot": {"type": "string", "minLength": 1},
        "namespace": {"type": "string", "minLength": 1},
        "plan": {"type": "string", "minLength": 1},
        "task": {"type": "string", "minLength": 1},
        "description": {"type": "string"},
        "desc": {"type": "string"},
        "set_alias": {"anyOf": [{"type": "string", "minLength": 1}, _STRING_LIST]},
        "aliases": _STRING_LIST,
        "plans": {"type": ["array", "null"], "items": {"$ref": "#/definitions/directive"}},
        "command": {"anyOf": [{"type": "string", "minLength": 1}, {**_STRING_LIST, "minItems": 1}]},
        "call": {"type": "string", "minLength": 1},
        "source": {"type": "string", "minLength": 1},
        "function": {"type": "string", "minLength": 1},
        "env": {"type": "object", "additionalProperties": {"type": ["string", "number", "boolean"]}},
        "cwd": {"type": "string"},
    },
}

PLANFILE_SCHEMA = {
    "type": "array",
    "items": {"$ref": "#/definitions/directive"},
    "definitions": {"directive": DIRECTIVE_SCHEMA},
}
_validator = Draft7Validator(PLANFILE_SCHEMA)


def load(path: Path | str) -> List[Plan]:
    """Load the plans declared in a ``.plan`` file."""

    plan_path = Path(path).expanduser().resolve()
    if not plan_path.is_file():
        raise InvalidPlanFile(plan_path, "file does not exist")
    try:
        raw = yaml.safe_load(plan_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise InvalidPlanFile(plan_path, str(exc)) from exc
    return parse(raw, plan_path)


def parse(raw: Any, filename: Path) -> List[Plan]:
    """Evaluate already-decoded plan file content."""

    if raw is None:
        return []
    if isinstance(raw, Mapping):
        raw = [raw]
    errors = sorted(_validator.iter_errors(raw), key=lambda e: [str(p) for p in e.path])
    if errors:
        messages = "; ".join(f"{'/'.join(map(str, err.path)) or 'root'}: {err.message}" for err in errors)
        raise InvalidPlanFile(filename, f"schema validation failed: {messages}")
    return _Scope(filename).evaluate(raw, "root")


class _Scope:
    """Evaluation state for one list of directives.

    Each nested ``plans`` list gets its own scope, so a pending description
    never leaks into a parent or sibling scope.
    """

    def __init__(self, filename: Path) -> None:
        self.filename = filename
        self.plans: List[Plan] = []
        self._description: Optional[str] = None

    def evaluate(self, directives: Sequence[Mapping[str, Any]], location: str) -> List[Plan]:
        for index, directive in enumerate(directives):
            self._apply(directive, f"{location}/{index}")
        return self.plans

    def _apply(self, directive: Mapping[str, Any], where: str) -> None:
        keys = set(directive)
        primary = [key for key in (*PARENT_KEYS, *LEAF_KEYS) if key in keys]
        if len(primary) > 1:
            self._fail(where, f"only one of {', '.join(primary)} may be given")
        if primary and primary[0] in PARENT_KEYS:
            self._plot(directive, primary[0], where)
        elif primary:
            self._plan(directive, primary[0], where)
        elif len(keys) == 1 and keys <= set(DESCRIPTION_KEYS):
            self._description = str(directive[keys.pop()])
        elif keys == {"set_alias"}:
            self._set_alias(directive["set_alias"], where)
        else:
            self._fail(where, f"unexpected directive keys {sorted(keys)}")

    def _plot(self, directive: Mapping[str, Any], key: str, where: str) -> None:
        self._check_options(directive, key, PARENT_OPTIONS, where)
        plan = ParentPlan(directive[key], self._take_description(directive, where), self.filename)
        children = _Scope(self.filename).evaluate(directive.get("plans") or [], f"{where}/plans")
        plan.add_children(children)
        self._add(plan, directive)

    def _plan(self, directive: Mapping[str, Any], key: str, where: str) -> None:
        self._check_options(directive, key, LEAF_OPTIONS, where)
        action = self._build_action(directive, where)
        plan = ExecutablePlan(directive[key], action, self._take_description(directive, where), self.filename)
        self._add(plan, directive)

    def _build_action(self, directive: Mapping[str, Any], where: str) -> Action:
        given = [key for key in ACTION_KEYS if key in directive]
        if len(given) != 1:
            self._fail(where, f"a plan needs exactly one of {', '.join(ACTION_KEYS)}")
        base = self.filename.parent
        if "function" in directive and given[0] != "source":
            self._fail(where, "'function' is only valid together with 'source'")
        if given[0] == "call":
            return CallAction(directive["call"])
        if given[0] == "source":
            return SourceAction((base / directive["source"]).resolve(), directive.get("function", "main"))
        command = directive["command"]
        argv = tuple(shlex.split(command)) if isinstance(command, str) else tuple(command)
        cwd_raw = directive.get("cwd")
        env = {str(k): str(v) for k, v in (directive.get("env") or {}).items()}
        return CommandAction(argv=argv, cwd=(base / cwd_raw).resolve() if cwd_raw else None, env=env)

    def _set_alias(self, raw: Any, where: str) -> None:
        if not self.plans:
            self._fail(where, "set_alias must follow a plan declaration")
        aliases = [raw] if isinstance(raw, str) else raw
        for alias in aliases:
            self.plans[-1].add_alias(alias)

    def _add(self, plan: Plan, directive: Mapping[str, Any]) -> None:
        for alias in directive.get("aliases") or ():
            plan.add_alias(alias)
        self.plans.append(plan)

    def _take_description(self, directive: Mapping[str, Any], where: str) -> Optional[str]:
        inline = [key for key in DESCRIPTION_KEYS if key in directive]
        if len(inline) > 1:
            self._fail(where, "only one of description, desc may be given")
        pending, self._description = self._description, None
        if inline:
            return str(directive[inline[0]])
        return pending

    def _check_options(self, directive: Mapping[str, Any], key: str, allowed: set[str], where: str) -> None:
        extra = set(directive) - allowed - {key}
        if extra:
            self._fail(where, f"'{key}' does not accept {sorted(extra)}")

    def _fail(self, where: str, message: str) -> NoReturn:
        raise InvalidPlanFile(self.filename, f"{where}: {message}")
