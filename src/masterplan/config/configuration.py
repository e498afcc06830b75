"""Configuration assembled from masterplans found above the working directory.

Masterplans are evaluated from the working directory upwards, so settings
closest to the point of invocation take precedence over farther ones. The
global masterplan in the home directory is evaluated last and is used for
plans and settings that should be available everywhere.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Optional, Sequence, Tuple, Union

from masterplan.expansion import AliasTable, AliasTarget
from masterplan.loaders import LoaderRegistry, registry as default_registry
from masterplan.plan import PlanTree

from .attributes import AttributeBag

logger = logging.getLogger(__name__)

PLANFILE = ".masterplan"
PROJECT_ROOT = "project_root"


class Configuration:
    """Per-invocation settings, plan file locations and user aliases."""

    def __init__(
        self,
        base_path: Optional[Union[Path, str]] = None,
        *,
        working_dir: Optional[Union[Path, str]] = None,
        home: Optional[Union[Path, str]] = None,
        registry: Optional[LoaderRegistry] = None,
    ) -> None:
        self.base_path = Path(base_path).expanduser().resolve() if base_path else None
        self.working_dir = Path(working_dir or os.getcwd()).expanduser().resolve()
        self.home = Path(home or Path.home()).expanduser().resolve()
        self.registry = registry or default_registry
        self.ask = True
        self._attributes = AttributeBag()
        self._aliases = AliasTable()
        self._loaded_masterplans: set[Path] = set()
        self._plan_files: Dict[Path, None] = {}

        self._lookup_and_load_masterplans()
        self.load_masterplan(self.global_masterplan)

    @property
    def global_masterplan(self) -> Path:
        return self.home / PLANFILE

    # -- masterplans -----------------------------------------------------

    def load_masterplan(self, filename: Union[Path, str]) -> bool:
        """Evaluate the masterplan at ``filename`` if it exists and was not seen before."""

        from .masterplan import evaluate  # noqa: WPS433

        path = Path(filename).expanduser().resolve()
        if path in self._loaded_masterplans:
            logger.debug("masterplan %s already loaded", path)
            return False
        if not path.is_file():
            return False
        self.masterplan_loaded(path)
        logger.debug("loading masterplan %s", path)
        evaluate(self, path)
        return True

    def masterplan_loaded(self, filename: Union[Path, str]) -> None:
        self._loaded_masterplans.add(Path(filename).expanduser().resolve())

    @property
    def loaded_masterplans(self) -> frozenset[Path]:
        return frozenset(self._loaded_masterplans)

    def _lookup_and_load_masterplans(self) -> None:
        directory = self.working_dir
        while True:
            self.load_masterplan(directory / PLANFILE)
            if self._is_walk_boundary(directory):
                break
            directory = directory.parent

    def _is_walk_boundary(self, directory: Path) -> bool:
        if directory == self.home or directory.parent == directory:
            return True
        if self._attributes.is_set(PROJECT_ROOT):
            root = Path(str(self.get(PROJECT_ROOT))).expanduser().resolve()
            return directory == root
        return False

    # -- plan files ------------------------------------------------------

    def add_plans(self, planfiles: Iterable[Union[Path, str]]) -> None:
        for raw in planfiles:
            path = Path(raw).expanduser().resolve()
            if self.base_path and not path.is_relative_to(self.base_path):
                logger.debug("skipping plan file %s outside %s", path, self.base_path)
                continue
            self._plan_files.setdefault(path, None)

    @property
    def plan_files(self) -> Tuple[Path, ...]:
        return tuple(self._plan_files)

    def load_plans(self) -> PlanTree:
        """Parse every registered plan file and merge the results into one tree."""

        return self.registry.load_tree(self.plan_files)

    # -- attributes ------------------------------------------------------

    def configure(self, name: str, value: Any = None) -> bool:
        """Latch ``value`` (a literal or zero-argument callable) under ``name``."""

        stored = self._attributes.set(name, value)
        if not stored:
            logger.debug("ignoring later value for configured attribute %s", name)
        return stored

    set = configure

    def get(self, name: str) -> Any:
        return self._attributes.get(name)

    def is_configured(self, name: str) -> bool:
        return self._attributes.is_set(name)

    def is_deferred(self, name: str) -> bool:
        return self._attributes.is_deferred(name)

    def attributes(self) -> Iterator[Tuple[str, Any]]:
        """Raw attribute values, without evaluating deferred ones."""

        return self._attributes.raw_items()

    # -- aliases ---------------------------------------------------------

    def define_alias(self, alias: str, target: Union[str, Sequence[str]]) -> bool:
        return self._aliases.define(alias, target)

    def map_alias(self, token: str) -> AliasTarget:
        return self._aliases.lookup(token)

    @property
    def aliases(self) -> AliasTable:
        return self._aliases

    # -- confirmation ----------------------------------------------------

    def skip_confirmation(self) -> None:
        self.ask = False
