"""Interpreter for ``.masterplan`` files.

A masterplan is a YAML list of single-key directives applied in order to a
:class:`~masterplan.config.configuration.Configuration`::

    - at_project_root: true
    - has_plan_files: true
    - configure:
        deploy_target: staging
        git_sha: {shell: git rev-parse HEAD}
    - define_alias: {dep: deploy -- --verbose}

Relative paths are resolved against the directory holding the masterplan.
"""
from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping

import yaml
from jsonschema import Draft7Validator

from masterplan.errors import InvalidDirectory, InvalidMasterplan
from masterplan.plan.actions import import_string

from .attributes import Deferred
from .configuration import PROJECT_ROOT

if TYPE_CHECKING:  # pragma: no cover
    from .configuration import Configuration

logger = logging.getLogger(__name__)

_PATHS = {"anyOf": [{"type": "string", "minLength": 1}, {"type": "array", "items": {"type": "string", "minLength": 1}}]}

MASTERPLAN_SCHEMA = {
    "type": "array",
    "items": {
        "type": "object",
        "minProperties": 1,
        "maxProperties": 1,
        "additionalProperties": False,
        "properties": {
            "see_also": _PATHS,
            "project_root": {"type": "string", "minLength": 1},
            "at_project_root": {"type": "boolean"},
            "plan_files": _PATHS,
            "has_plan_files": {"type": "boolean"},
            "plan_file": _PATHS,
            "configure": {"type": "object"},
            "set": {"type": "object"},
            "define_alias": {"type": "object", "additionalProperties": _PATHS},
            "skip_confirmation": {"type": "boolean"},
        },
    },
}
_validator = Draft7Validator(MASTERPLAN_SCHEMA)

DEFERRED_KEYS = ("shell", "call")


def evaluate(config: "Configuration", filename: Path) -> None:
    """Apply every directive of the masterplan at ``filename`` to ``config``."""

    raw = yaml.safe_load(filename.read_text(encoding="utf-8"))
    _Masterplan(config, filename).run(raw)


class _Masterplan:
    def __init__(self, config: "Configuration", filename: Path) -> None:
        self.config = config
        self.filename = filename
        self.directory = filename.parent
        self._handlers: Dict[str, Callable[[Any], None]] = {
            "see_also": self.see_also,
            "project_root": self.project_root,
            "at_project_root": self.at_project_root,
            "plan_files": self.plan_files,
            "has_plan_files": self.has_plan_files,
            "plan_file": self.plan_file,
            "configure": self.configure,
            "set": self.configure,
            "define_alias": self.define_alias,
            "skip_confirmation": self.skip_confirmation,
        }

    def run(self, raw: Any) -> None:
        if raw is None:
            return
        if isinstance(raw, Mapping):
            raw = [{key: value} for key, value in raw.items()]
        errors = sorted(_validator.iter_errors(raw), key=lambda e: [str(p) for p in e.path])
        if errors:
            messages = "; ".join(f"{'/'.join(map(str, err.path)) or 'root'}: {err.message}" for err in errors)
            raise InvalidMasterplan(self.filename, f"schema validation failed: {messages}")
        for directive in raw:
            (key, value), = directive.items()
            self._handlers[key](value)

    def see_also(self, value: Any) -> None:
        for path in self._paths(value):
            self.config.load_masterplan(path)

    def project_root(self, value: str) -> None:
        self.config.configure(PROJECT_ROOT, self._directory(value))

    def at_project_root(self, value: bool) -> None:
        if value:
            self.config.configure(PROJECT_ROOT, self.directory)

    def plan_files(self, value: Any) -> None:
        supported = self.config.registry.supported_extensions()
        for raw in self._as_list(value):
            directory = self._directory(raw)
            found = sorted(p for p in directory.rglob("*") if p.is_file() and p.suffix in supported)
            logger.debug("found %d plan file(s) under %s", len(found), directory)
            self.config.add_plans(found)

    def has_plan_files(self, value: bool) -> None:
        if value:
            self.plan_files(str(self.directory / "plans"))

    def plan_file(self, value: Any) -> None:
        self.config.add_plans(self._paths(value))

    def configure(self, values: Mapping[str, Any]) -> None:
        for name, value in values.items():
            self.config.configure(str(name), self._attribute_value(str(name), value))

    def define_alias(self, values: Mapping[str, Any]) -> None:
        for alias, target in values.items():
            self.config.define_alias(str(alias), target)

    def skip_confirmation(self, value: bool) -> None:
        if value:
            self.config.skip_confirmation()

    def _attribute_value(self, name: str, value: Any) -> Any:
        if not (isinstance(value, Mapping) and len(value) == 1 and next(iter(value)) in DEFERRED_KEYS):
            return value
        (kind, spec), = value.items()
        if kind == "shell":
            return Deferred(_shell(str(spec), self.directory), label=f"shell: {spec}")
        return Deferred(lambda: import_string(str(spec))(), label=f"call: {spec}")

    def _paths(self, value: Any) -> List[Path]:
        return [self._resolve(raw) for raw in self._as_list(value)]

    def _directory(self, raw: str) -> Path:
        path = self._resolve(raw)
        if not path.is_dir():
            raise InvalidDirectory(path)
        return path

    def _resolve(self, raw: str) -> Path:
        return (self.directory / Path(raw).expanduser()).resolve()

    @staticmethod
    def _as_list(value: Any) -> List[str]:
        return [value] if isinstance(value, str) else list(value)


def _shell(command: str, cwd: Path) -> Callable[[], str]:
    def run() -> str:
        proc = subprocess.run(command, shell=True, cwd=str(cwd), capture_output=True, text=True, check=True)
        return proc.stdout.strip()

    return run
