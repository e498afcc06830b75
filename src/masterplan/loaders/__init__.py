"""Plan file loaders."""
from .registry import LoaderRegistry, ParseFn, load_builtins, register_loader, registry

load_builtins()

__all__ = [
    "LoaderRegistry",
    "ParseFn",
    "load_builtins",
    "register_loader",
    "registry",
]
