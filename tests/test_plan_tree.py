from __future__ import annotations

import pytest

from masterplan.errors import NoPlanFound
from masterplan.plan import ExecutablePlan, ParentPlan, PlanTree, resolve


def _noop(arguments):
    return arguments


@pytest.fixture()
def tree() -> PlanTree:
    leaf = ExecutablePlan("do_thing", _noop, "Does the thing")
    leaf.add_alias("dt")
    top = ParentPlan("top_level", "Top level plans")
    top.add_children([leaf, ExecutablePlan("hidden", _noop)])
    other = ExecutablePlan("release", _noop, "Cut a release")
    return PlanTree([top, other])


def test_resolves_by_name_and_alias(tree: PlanTree) -> None:
    by_name = resolve(tree, ["top_level", "do_thing"])
    by_alias = resolve(tree, ["top_level", "dt"])
    assert by_name.plan is by_alias.plan
    assert by_name.plan is tree["top_level"]["do_thing"]
    assert by_name.is_executable
    assert by_alias.path == ("top_level", "dt")


def test_partial_path_resolves_to_parent(tree: PlanTree) -> None:
    resolution = resolve(tree, ["top_level"])
    assert resolution.plan is tree["top_level"]
    assert not resolution.is_executable


def test_empty_queue_selects_nothing(tree: PlanTree) -> None:
    resolution = resolve(tree, [])
    assert resolution.plan is None
    assert not resolution.is_executable


def test_unknown_plan_on_empty_tree() -> None:
    with pytest.raises(NoPlanFound) as exc:
        resolve(PlanTree(), ["nope"])
    assert exc.value.path == ("nope",)
    assert str(exc.value) == "No plan found at nope"


def test_unknown_nested_plan_reports_partial_path(tree: PlanTree) -> None:
    with pytest.raises(NoPlanFound) as exc:
        resolve(tree, ["top_level", "missing", "deeper"])
    assert exc.value.path == ("top_level", "missing")


def test_cannot_descend_below_an_executable_plan(tree: PlanTree) -> None:
    with pytest.raises(NoPlanFound) as exc:
        resolve(tree, ["release", "more"])
    assert exc.value.path == ("release", "more")


def test_filter_keeps_matching_plans_and_their_parents(tree: PlanTree) -> None:
    filtered = tree.filter("do_")
    assert list(filtered.children) == ["top_level"]
    assert list(filtered["top_level"].children) == ["do_thing"]
    assert "hidden" in tree["top_level"]


def test_filter_hides_undescribed_leaves(tree: PlanTree) -> None:
    tree.add_children([ExecutablePlan("bare", _noop)])
    filtered = tree.filter(".")
    assert set(filtered.children) == {"top_level", "release"}


def test_filter_without_matches_is_empty(tree: PlanTree) -> None:
    assert not tree.filter("^zzz$").children
