"""Terminal presenters used to report progress and ask the user questions."""
from __future__ import annotations

from typing import Callable, Mapping, Optional, Protocol, TypeVar

import click
from colorama import just_fix_windows_console

T = TypeVar("T")
V = TypeVar("V")


class Presenter(Protocol):
    use_color: bool

    def report_progress(self, title: str, work: Callable[[], T]) -> T: ...

    def confirm(self, question: str) -> bool: ...

    def select_one(self, question: str, options: Mapping[str, V], default: Optional[V] = None) -> V: ...

    def frame(self, title: str, body: Callable[[], T]) -> T: ...

    def echo(self, message: str = "") -> None: ...


class TerminalPresenter:
    """Presenter drawing frames and progress markers with ANSI colors."""

    def __init__(self, *, use_color: bool = True) -> None:
        self.use_color = use_color
        self._depth = 0
        if use_color:
            just_fix_windows_console()

    def report_progress(self, title: str, work: Callable[[], T]) -> T:
        self.echo(self._styled(f"⋯ {title}", "cyan"))
        try:
            result = work()
        except Exception:
            self.echo(self._styled(f"✗ {title}", "red"))
            raise
        self.echo(self._styled(f"✓ {title}", "green"))
        return result

    def frame(self, title: str, body: Callable[[], T]) -> T:
        self.echo(self._styled(f"┏━━ {title} ", "cyan"))
        self._depth += 1
        try:
            return body()
        finally:
            self._depth -= 1
            self.echo(self._styled("┗━━", "cyan"))

    def confirm(self, question: str) -> bool:
        return click.confirm(self._prefixed(question), default=True)

    def select_one(self, question: str, options: Mapping[str, V], default: Optional[V] = None) -> V:
        """Ask the user to pick one of ``options``; the default is listed first.

        With fewer than two options to choose from the default (or the only
        option) is returned without prompting.
        """

        labels = list(options)
        if default is None and labels:
            default = options[labels[0]]
        if len(labels) < 2:
            if default is None:
                raise ValueError("No options to select from")
            return default
        default_labels = [label for label in labels if options[label] is default]
        if default_labels:
            labels.remove(default_labels[0])
            labels.insert(0, default_labels[0])
        self.echo(self._styled(question, "yellow"))
        for index, label in enumerate(labels, start=1):
            self.echo(f"  {index}. {label}")
        choice = click.prompt(
            self._prefixed("Choose"),
            type=click.IntRange(1, len(labels)),
            default=1,
            show_default=True,
        )
        return options[labels[choice - 1]]

    def echo(self, message: str = "") -> None:
        click.echo(self._prefixed(message))

    def _prefixed(self, message: str) -> str:
        return "┃ " * self._depth + message

    def _styled(self, text: str, color: str) -> str:
        if not self.use_color:
            return text
        return click.style(text, fg=color)


class PlainPresenter(TerminalPresenter):
    """Presenter used with ``--no-fancy-ui``: no frames, colors or progress markers."""

    def __init__(self) -> None:
        super().__init__(use_color=False)

    def report_progress(self, title: str, work: Callable[[], T]) -> T:
        return work()

    def frame(self, title: str, body: Callable[[], T]) -> T:
        return body()
