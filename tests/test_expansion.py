from __future__ import annotations

import pytest

from masterplan.expansion import AliasTable, expand, split_arguments


@pytest.fixture()
def table() -> AliasTable:
    aliases = AliasTable()
    aliases.define("sao", "shorter argument option")
    aliases.define("ssao", "shorter sao")
    aliases.define("swa", "shorter with -- arguments")
    aliases.define("sswa", "swa -- another")
    aliases.define("x", ["y", "z"])
    return aliases


def test_lookup_is_total(table: AliasTable) -> None:
    assert table.lookup("undefined") == "undefined"
    assert table.lookup("sao") == ("shorter", "argument", "option")


def test_first_definition_wins(table: AliasTable) -> None:
    assert not table.define("sao", "something else")
    assert table.lookup("sao") == ("shorter", "argument", "option")


def test_expansion_flattens_in_order(table: AliasTable) -> None:
    assert expand(table, ["x"]).plan_names == ("y", "z")
    assert expand(table, ["sao"]).plan_names == ("shorter", "argument", "option")


def test_unaliased_tokens_pass_through(table: AliasTable) -> None:
    result = expand(table, ["build", "x", "release"], ["--dry-run"])
    assert result.plan_names == ("build", "y", "z", "release")
    assert result.plan_arguments == ("--dry-run",)


def test_recursive_expansion(table: AliasTable) -> None:
    assert expand(table, ["ssao"]).plan_names == ("shorter", "shorter", "argument", "option")


def test_alias_arguments(table: AliasTable) -> None:
    result = expand(table, ["swa"])
    assert result.plan_names == ("shorter", "with")
    assert result.plan_arguments == ("arguments",)


def test_alias_arguments_come_before_command_line_arguments(table: AliasTable) -> None:
    result = expand(table, ["swa"], ["second"])
    assert result.plan_names == ("shorter", "with")
    assert result.plan_arguments == ("arguments", "second")


def test_alias_arguments_keep_expansion_order(table: AliasTable) -> None:
    assert expand(table, ["sswa"]).plan_arguments == ("arguments", "another")


def test_only_first_separator_splits(table: AliasTable) -> None:
    table.define("nested", "run -- a -- b")
    result = expand(table, ["nested"])
    assert result.plan_names == ("run",)
    assert result.plan_arguments == ("a", "--", "b")


def test_split_arguments() -> None:
    assert split_arguments(["a", "b", "--", "c", "--", "d"]) == (["a", "b"], ["c", "--", "d"])
    assert split_arguments(["a"]) == (["a"], [])
    assert split_arguments(["--"]) == ([], [])


def test_cyclic_aliases_are_not_detected(table: AliasTable) -> None:
    table.define("ping", "pong")
    table.define("pong", "ping -- again")
    with pytest.raises(RecursionError):
        expand(table, ["ping"])
