"""Example plugin teaching masterplan to read ``.plan.json`` style files.

Enable it with ``MASTERPLAN_PLUGINS=json_plans`` (the module must be importable).
The JSON document uses the same directives as the YAML ``.plan`` format.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import List

from masterplan.loaders import LoaderRegistry
from masterplan.loaders.planfile import parse
from masterplan.plan import Plan


def load(path: Path) -> List[Plan]:
    plan_path = Path(path).resolve()
    return parse(json.loads(plan_path.read_text(encoding="utf-8")), plan_path)


def register(registry: LoaderRegistry) -> None:
    registry.register([".json"], load)
