"""Exception types raised by masterplan."""
from __future__ import annotations

from pathlib import Path
from typing import Sequence


class MasterplanError(Exception):
    """Base class for every error surfaced by masterplan."""


class UnsupportedFileType(MasterplanError):
    def __init__(self, extension: str) -> None:
        self.extension = extension.lstrip(".")
        super().__init__(f"Unsupported file type: .{self.extension}")


class InvalidDirectory(MasterplanError):
    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(f"{self.path} is not a directory")


class InvalidPlan(MasterplanError):
    """A plan was assembled in a way the tree cannot represent."""


class InvalidPlanFile(MasterplanError):
    def __init__(self, path: Path | str, message: str) -> None:
        self.path = Path(path)
        super().__init__(f"Invalid plan file {self.path}: {message}")


class InvalidMasterplan(MasterplanError):
    def __init__(self, path: Path | str, message: str) -> None:
        self.path = Path(path)
        super().__init__(f"Invalid masterplan {self.path}: {message}")


class MissingConfiguration(MasterplanError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"'{name}' has not been configured. "
            f"Add `- configure: {{{name}: <value>}}` to a .masterplan file to set it."
        )


class NoPlanFound(MasterplanError):
    def __init__(self, path: Sequence[str]) -> None:
        self.path = tuple(path)
        super().__init__(f"No plan found at {'/'.join(self.path)}")


class PlanExecutionError(MasterplanError):
    def __init__(self, command: Sequence[str], returncode: int) -> None:
        self.command = tuple(command)
        self.returncode = returncode
        super().__init__(f"command '{' '.join(self.command)}' failed (code {returncode})")
