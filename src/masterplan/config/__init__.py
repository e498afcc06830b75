"""Configuration cascade built from masterplan files."""
from .attributes import AttributeBag, Deferred
from .configuration import PLANFILE, PROJECT_ROOT, Configuration

__all__ = [
    "AttributeBag",
    "Configuration",
    "Deferred",
    "PLANFILE",
    "PROJECT_ROOT",
]
