"""Registry mapping plan file extensions to parsers."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, List, Sequence, Tuple

from masterplan.errors import UnsupportedFileType
from masterplan.plan import Plan, PlanTree

logger = logging.getLogger(__name__)

ParseFn = Callable[[Path], List[Plan]]


def _normalize_extension(extension: str) -> str:
    text = extension.strip()
    if not text:
        raise ValueError("File extensions cannot be empty")
    return text if text.startswith(".") else f".{text}"


class LoaderRegistry:
    """Stores plan file parsers keyed by the extensions they handle."""

    def __init__(self) -> None:
        self._loaders: List[Tuple[frozenset[str], ParseFn]] = []

    def register(self, extensions: Iterable[str] | str, parse_fn: ParseFn) -> ParseFn:
        if isinstance(extensions, str):
            extensions = [extensions]
        normalized = frozenset(_normalize_extension(ext) for ext in extensions)
        if not normalized:
            raise ValueError("A loader must handle at least one extension")
        self._loaders.append((normalized, parse_fn))
        return parse_fn

    def resolve(self, extension: str) -> ParseFn:
        key = _normalize_extension(extension) if extension.strip() else extension
        for extensions, parse_fn in self._loaders:
            if key in extensions:
                return parse_fn
        raise UnsupportedFileType(extension)

    def supported_extensions(self) -> frozenset[str]:
        supported: set[str] = set()
        for extensions, _ in self._loaders:
            supported |= extensions
        return frozenset(supported)

    def load_all(self, paths: Sequence[Path | str]) -> List[Plan]:
        """Parse every path, failing on the first file that cannot be loaded."""

        plans: List[Plan] = []
        for raw in paths:
            path = Path(raw)
            parse_fn = self.resolve(path.suffix)
            loaded = parse_fn(path)
            logger.debug("loaded %d plan(s) from %s", len(loaded), path)
            plans.extend(loaded)
        return plans

    def load_tree(self, paths: Sequence[Path | str]) -> PlanTree:
        return PlanTree(self.load_all(paths))

    def clear(self) -> None:
        self._loaders.clear()


registry = LoaderRegistry()


def register_loader(extensions: Iterable[str] | str) -> Callable[[ParseFn], ParseFn]:
    """Decorator registering the decorated parse function with the default registry."""

    def decorator(parse_fn: ParseFn) -> ParseFn:
        return registry.register(extensions, parse_fn)

    return decorator


def load_builtins() -> None:
    from . import planfile  # noqa: WPS433

    if planfile.EXTENSION not in registry.supported_extensions():
        registry.register([planfile.EXTENSION], planfile.load)
