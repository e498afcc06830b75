"""CLI entry point for masterplan."""
from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

import click

from masterplan import __version__, bootstrap
from masterplan.errors import MasterplanError, NoPlanFound
from masterplan.expansion import split_arguments
from masterplan.session import Arguments, MasterplanSession

from .presenter import PlainPresenter, TerminalPresenter

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
PASSTHROUGH_KEY = "masterplan.plan_arguments"


@dataclass
class CliState:
    """Settings supplied by tools embedding the masterplan CLI."""

    base_path: Optional[Union[Path, str]] = None
    base_plan: Optional[str] = None


class PlanCommand(click.Command):
    """Command that hands everything after the first ``--`` to the plan untouched."""

    def parse_args(self, ctx: click.Context, args: List[str]) -> List[str]:
        names, plan_arguments = split_arguments(args)
        ctx.meta[PASSTHROUGH_KEY] = plan_arguments
        return super().parse_args(ctx, names)

    def format_usage(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        formatter.write_usage(ctx.command_path, "[OPTIONS] [PLAN]... [-- PLAN ARGUMENTS...]")


def _print_version(_: click.Context, __: click.Parameter, value: bool) -> None:
    if not value or click.get_current_context().resilient_parsing:
        return
    click.echo(f"masterplan {__version__}")
    raise click.exceptions.Exit()


@click.command(cls=PlanCommand, context_settings=CONTEXT_SETTINGS)
@click.argument("plan_names", nargs=-1)
@click.option("-A", "--no-ask", is_flag=True, help="Don't ask before executing a plan.")
@click.option("-U", "--no-fancy-ui", is_flag=True, help="Don't display the fancy UI.")
@click.option(
    "-P",
    "-T",
    "--plans",
    "--tasks",
    "pattern",
    is_flag=False,
    flag_value=".",
    default=None,
    metavar="[PATTERN]",
    help="Display plans. The optional regular expression filters the displayed plans.",
)
@click.option(
    "-C",
    "--show-configuration",
    count=True,
    help="Print the loaded configuration. Give twice to resolve lazy attributes as well.",
)
@click.option("--verbose", is_flag=True, help="Enable verbose logging output.")
@click.option(
    "--version",
    is_flag=True,
    callback=_print_version,
    expose_value=False,
    is_eager=True,
    help="Show the masterplan version and exit.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    plan_names: tuple[str, ...],
    no_ask: bool,
    no_fancy_ui: bool,
    pattern: Optional[str],
    show_configuration: int,
    verbose: bool,
) -> None:
    """Find, select and execute plans declared in masterplans."""

    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format="%(levelname)s: %(message)s")
    bootstrap()
    state = ctx.ensure_object(CliState)
    arguments = Arguments(
        plan_names=list(plan_names),
        plan_arguments=list(ctx.meta.get(PASSTHROUGH_KEY, [])),
        ask=not no_ask,
        display_ui=not no_fancy_ui,
        pattern=pattern,
        show_configuration=show_configuration > 0,
        resolve_callable_attributes=show_configuration > 1,
    )
    presenter = TerminalPresenter() if arguments.display_ui else PlainPresenter()
    session = MasterplanSession(arguments, presenter, base_path=state.base_path, base_plan=state.base_plan)
    try:
        exit_code = session.run()
    except NoPlanFound as exc:
        click.echo(str(exc), err=True)
        click.echo(ctx.get_usage(), err=True)
        raise click.exceptions.Exit(1) from exc
    except MasterplanError as exc:
        raise click.ClickException(str(exc)) from exc
    except (click.ClickException, click.Abort, click.exceptions.Exit):
        raise
    except Exception as exc:
        raise click.ClickException(f"{type(exc).__name__}: {exc}") from exc
    raise click.exceptions.Exit(exit_code)


def main(
    argv: Optional[List[str]] = None,
    *,
    base_path: Optional[Union[Path, str]] = None,
    base_plan: Optional[str] = None,
) -> int:
    """Program entry point for console_scripts shim."""

    argv = argv if argv is not None else sys.argv[1:]
    state = CliState(base_path=base_path, base_plan=base_plan)
    try:
        cli.main(args=argv, prog_name="masterplan", obj=state, standalone_mode=True)
    except SystemExit as exc:
        return int(exc.code or 0)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
