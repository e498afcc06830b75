"""Python-backed plans for the example project."""
from typing import Sequence


def greet(arguments: Sequence[str]) -> None:
    name = " ".join(arguments) or "world"
    print(f"hello, {name}")


def release(arguments: Sequence[str], config) -> None:
    channel = config.get("release_channel")
    print(f"releasing {config.get('git_sha')} to {channel}", *arguments)
