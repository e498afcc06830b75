"""Callables attached to executable plans.

Actions are called with the passthrough argument list. When the session
runs a plan it also hands over the loaded ``Configuration``: ``call`` and
``source`` targets receive it as ``config=`` if their signature accepts that
keyword, and commands see plain attributes as ``MASTERPLAN_<NAME>`` variables.
"""
from __future__ import annotations

import importlib
import importlib.util
import inspect
import logging
import os
import re
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional, Sequence

from masterplan.errors import PlanExecutionError

if TYPE_CHECKING:
    from masterplan.config import Configuration

logger = logging.getLogger(__name__)

ENV_PREFIX = "MASTERPLAN_"
_EXPORTABLE = (str, int, float, bool, Path)


@dataclass(frozen=True)
class CommandAction:
    """Run an external command, appending the passthrough arguments."""

    argv: Sequence[str]
    cwd: Optional[Path] = None
    env: Mapping[str, str] = field(default_factory=dict)

    def __call__(self, arguments: Sequence[str], config: Optional["Configuration"] = None) -> int:
        command = [*self.argv, *arguments]
        environ = os.environ.copy()
        if config is not None:
            environ.update(config_environment(config))
        environ.update(self.env)
        logger.debug("running %s in %s", command, self.cwd or os.getcwd())
        proc = subprocess.run(command, cwd=str(self.cwd) if self.cwd else None, env=environ)
        if proc.returncode != 0:
            raise PlanExecutionError(command, proc.returncode)
        return proc.returncode


@dataclass(frozen=True)
class CallAction:
    """Import ``target`` on first use and call it with the passthrough arguments."""

    target: str

    def __call__(self, arguments: Sequence[str], config: Optional["Configuration"] = None) -> Any:
        func = import_string(self.target)
        if not callable(func):
            raise TypeError(f"'{self.target}' is not callable")
        return invoke(func, list(arguments), config)


@dataclass(frozen=True)
class SourceAction:
    """Load ``function`` from a Python file and call it with the passthrough arguments."""

    source: Path
    function: str

    def __call__(self, arguments: Sequence[str], config: Optional["Configuration"] = None) -> Any:
        func = load_from_source(self.source, self.function)
        return invoke(func, list(arguments), config)


def accepts_config(func: Callable[..., Any]) -> bool:
    try:
        parameters = inspect.signature(func).parameters.values()
    except (TypeError, ValueError):
        return False
    return any(p.name == "config" or p.kind is inspect.Parameter.VAR_KEYWORD for p in parameters)


def invoke(func: Callable[..., Any], arguments: Sequence[str], config: Optional["Configuration"] = None) -> Any:
    """Call ``func`` with ``arguments``, adding ``config=`` when it can take it."""

    if config is not None and accepts_config(func):
        return func(arguments, config=config)
    return func(arguments)


def config_environment(config: "Configuration") -> Dict[str, str]:
    """Map plain configured values to ``MASTERPLAN_<NAME>`` variables.

    Deferred values that were never read are left out so that exporting
    never runs their computation.
    """

    environ: Dict[str, str] = {}
    for name, value in config.attributes():
        if isinstance(value, bool):
            value = "1" if value else "0"
        elif not isinstance(value, _EXPORTABLE):
            continue
        environ[ENV_PREFIX + re.sub(r"[^A-Za-z0-9]", "_", name).upper()] = str(value)
    return environ


def import_string(path: str) -> Any:
    """Return the attribute at the given dotted path.

    Supports ``module:attr`` or ``module.attr`` syntax.
    """

    if not path:
        raise ValueError("Empty import path provided")
    module_name, sep, attr = path.partition(":")
    if not sep:
        module_name, sep, attr = path.rpartition(".")
    if not module_name or not attr:
        raise ValueError(f"Invalid import path '{path}'")
    module = importlib.import_module(module_name)
    try:
        return getattr(module, attr)
    except AttributeError as exc:
        raise AttributeError(f"Module '{module_name}' has no attribute '{attr}'") from exc


def load_from_source(source: Path, func_name: str) -> Callable:
    """Load a callable named ``func_name`` from a Python file at ``source``."""

    path = source.expanduser().resolve()
    if not path.exists():
        raise FileNotFoundError(f"Plan source file not found: {path}")
    module_name = f"masterplan_source_{path.stem}_{hash(str(path)) & 0xFFFF:x}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Unable to load module from {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    if not hasattr(module, func_name):
        raise AttributeError(f"Function '{func_name}' not found in {path}")
    func = getattr(module, func_name)
    if not callable(func):
        raise TypeError(f"Attribute '{func_name}' in {path} is not callable")
    return func
