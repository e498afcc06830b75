from __future__ import annotations

import textwrap
from pathlib import Path

import pytest
import yaml

from masterplan.config import PLANFILE, PROJECT_ROOT, Configuration
from masterplan.errors import InvalidDirectory, InvalidMasterplan, MissingConfiguration, UnsupportedFileType


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


def _masterplan(directory: Path, content: str) -> Path:
    return _write(directory / PLANFILE, content)


@pytest.fixture()
def home(tmp_path: Path) -> Path:
    return tmp_path


@pytest.fixture()
def workdir(home: Path) -> Path:
    path = home / "projects" / "app" / "service"
    path.mkdir(parents=True)
    return path


def _config(workdir: Path, home: Path, **kwargs) -> Configuration:
    return Configuration(working_dir=workdir, home=home, **kwargs)


def test_no_masterplans(workdir: Path, home: Path) -> None:
    config = _config(workdir, home)
    assert config.plan_files == ()
    assert config.ask
    assert not config.loaded_masterplans
    assert len(config.load_plans()) == 0


def test_closest_masterplan_wins(workdir: Path, home: Path) -> None:
    _masterplan(workdir, "- configure: {target: service}\n")
    _masterplan(workdir.parent, "- configure: {target: app, region: eu}\n")
    _masterplan(home, "- configure: {target: global, owner: me}\n")
    config = _config(workdir, home)
    assert config.get("target") == "service"
    assert config.get("region") == "eu"
    assert config.get("owner") == "me"


def test_global_masterplan_is_loaded_last_and_once(workdir: Path, home: Path) -> None:
    _masterplan(home, "- define_alias: {b: global}\n")
    _masterplan(workdir, "- define_alias: {b: local}\n")
    config = _config(workdir, home)
    assert config.map_alias("b") == ("local",)
    assert config.loaded_masterplans == {(home / PLANFILE).resolve(), (workdir / PLANFILE).resolve()}


def test_walk_stops_at_project_root(workdir: Path, home: Path) -> None:
    _masterplan(workdir.parent, "- at_project_root: true\n")
    _masterplan(workdir.parent.parent, "- configure: {beyond_root: true}\n")
    config = _config(workdir, home)
    assert config.get(PROJECT_ROOT) == workdir.parent.resolve()
    assert not config.is_configured("beyond_root")


def test_project_root_must_exist(workdir: Path, home: Path) -> None:
    _masterplan(workdir, "- project_root: ../missing\n")
    with pytest.raises(InvalidDirectory) as exc:
        _config(workdir, home)
    assert exc.value.path == (workdir.parent / "missing").resolve()


def test_plan_files_are_globbed_recursively(workdir: Path, home: Path) -> None:
    _write(workdir / "plans" / "b.plan", "- plan: b\n  command: echo b\n")
    _write(workdir / "plans" / "nested" / "a.plan", "- plan: a\n  command: echo a\n")
    _write(workdir / "plans" / "notes.txt", "not a plan")
    _masterplan(workdir, "- has_plan_files: true\n")
    config = _config(workdir, home)
    assert config.plan_files == (
        (workdir / "plans" / "b.plan").resolve(),
        (workdir / "plans" / "nested" / "a.plan").resolve(),
    )
    assert set(config.load_plans().children) == {"a", "b"}


def test_plan_files_directory_must_exist(workdir: Path, home: Path) -> None:
    _masterplan(workdir, "- plan_files: nowhere\n")
    with pytest.raises(InvalidDirectory):
        _config(workdir, home)


def test_explicit_plan_files_and_base_path(workdir: Path, home: Path) -> None:
    inside = _write(workdir / "inside.plan", "- plan: inside\n  command: echo\n")
    outside = _write(home / "outside.plan", "- plan: outside\n  command: echo\n")
    _masterplan(workdir, f"- plan_file: [inside.plan, {outside}]\n")
    config = _config(workdir, home, base_path=workdir)
    assert config.plan_files == (inside.resolve(),)


def test_base_path_filters_globbed_plan_files(workdir: Path, home: Path) -> None:
    kept = _write(workdir / "plans" / "kept.plan", "- plan: kept\n  command: echo\n")
    _write(workdir.parent / "shared" / "dropped.plan", "- plan: dropped\n  command: echo\n")
    _masterplan(workdir, "- plan_files: [plans, ../shared]\n")
    config = _config(workdir, home, base_path=workdir / "plans")
    assert config.plan_files == (kept.resolve(),)
    assert set(config.load_plans().children) == {"kept"}


def test_unsupported_plan_file_fails_loading(workdir: Path, home: Path) -> None:
    _write(workdir / "tasks.xyz", "")
    _masterplan(workdir, "- plan_file: tasks.xyz\n")
    config = _config(workdir, home)
    with pytest.raises(UnsupportedFileType):
        config.load_plans()


def test_see_also_loads_immediately_and_once(workdir: Path, home: Path) -> None:
    shared = _masterplan(home / "shared", "- configure: {from_shared: yes}\n- see_also: ../projects/app/service/.masterplan\n")
    _masterplan(workdir, f"- see_also: {shared}\n- configure: {{from_shared: no}}\n")
    config = _config(workdir, home)
    assert config.get("from_shared") is True
    assert shared.resolve() in config.loaded_masterplans


def test_see_also_ignores_missing_files(workdir: Path, home: Path) -> None:
    _masterplan(workdir, "- see_also: does-not-exist\n- configure: {after: 1}\n")
    assert _config(workdir, home).get("after") == 1


def test_mapping_masterplan_is_evaluated_in_order(workdir: Path, home: Path) -> None:
    _masterplan(
        workdir,
        """
        configure: {name: first}
        define_alias: {dep: deploy -- --verbose, rel: [release, now]}
        skip_confirmation: true
        """,
    )
    config = _config(workdir, home)
    assert config.get("name") == "first"
    assert config.map_alias("dep") == ("deploy", "--", "--verbose")
    assert config.map_alias("rel") == ("release", "now")
    assert not config.ask


def test_deferred_shell_attribute(workdir: Path, home: Path) -> None:
    _masterplan(workdir, "- configure: {greeting: {shell: echo hello}}\n")
    config = _config(workdir, home)
    assert config.is_deferred("greeting")
    assert config.get("greeting") == "hello"
    assert not config.is_deferred("greeting")


def test_deferred_call_attribute(workdir: Path, home: Path) -> None:
    _masterplan(workdir, "- set: {cwd: {call: 'os:getcwd'}}\n")
    config = _config(workdir, home)
    assert isinstance(config.get("cwd"), str)


def test_programmatic_configure_latches(workdir: Path, home: Path) -> None:
    config = _config(workdir, home)
    calls = []
    config.configure("lazy", lambda: calls.append(1) or "value")
    config.set("lazy", "ignored")
    assert config.get("lazy") == "value"
    assert config.get("lazy") == "value"
    assert calls == [1]
    with pytest.raises(MissingConfiguration):
        config.get("never_set")


def test_invalid_masterplan_schema(workdir: Path, home: Path) -> None:
    _masterplan(workdir, "- bogus: 1\n")
    with pytest.raises(InvalidMasterplan):
        _config(workdir, home)


def test_yaml_errors_propagate(workdir: Path, home: Path) -> None:
    _masterplan(workdir, "- configure: {unclosed\n")
    with pytest.raises(yaml.YAMLError):
        _config(workdir, home)
