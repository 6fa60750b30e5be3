import logging
from pathlib import Path, PurePosixPath

import pytest

from scaffoldkit.generator.boilerplate import (
    DIRECTORY_NAME,
    Boilerplate,
    make_script_instantiation_action,
    output_file_name,
)
from scaffoldkit.generator.errors import (
    DirectoryNotFoundError,
    InvalidMarkerError,
    InvalidNameError,
    NotDirectoryError,
    UnbalancedScopeExitError,
    UnresolvedKeyError,
)
from scaffoldkit.generator.host import AssetKind, LocalHost, TemplateSource
from scaffoldkit.utils.store import InMemoryHost


def test_balanced_navigation_returns_to_root(tmp_path: Path):
    b = Boilerplate(tmp_path)
    b.navigate("a").navigate("b").navigate("c")
    assert b.context == ("a", "b", "c")
    assert b.current_path == tmp_path / "a" / "b" / "c"
    assert (tmp_path / "a" / "b" / "c").is_dir()

    b.leave().leave().leave()
    assert b.context == ()
    with pytest.raises(UnbalancedScopeExitError):
        b.leave()


def test_leave_on_fresh_builder_fails(tmp_path: Path):
    with pytest.raises(UnbalancedScopeExitError) as exc:
        Boilerplate(tmp_path).leave()
    assert exc.value.kind == "UnbalancedScopeExit"


@pytest.mark.parametrize(
    "name",
    [None, "", "   ", "bad name!", "a b", "-lead", "trail_", "a..b", "a_-b", "a/b", "..", "ñandú"],
)
def test_invalid_names_are_rejected(tmp_path: Path, name):
    b = Boilerplate(tmp_path)
    with pytest.raises(InvalidNameError) as exc:
        b.navigate(name)
    assert exc.value.kind == "InvalidName"
    assert b.context == ()
    assert list(tmp_path.iterdir()) == []


@pytest.mark.parametrize("name", ["valid-name_1.2", "Game", "v2", "a.b.c"])
def test_valid_names_are_accepted(tmp_path: Path, name):
    b = Boilerplate(tmp_path).navigate(name)
    assert b.context == (name,)
    assert (tmp_path / name).is_dir()


def test_names_are_stripped(tmp_path: Path):
    b = Boilerplate(tmp_path).navigate("  Maps \n")
    assert b.context == ("Maps",)
    assert (tmp_path / "Maps").is_dir()


def test_missing_directory_without_creation(tmp_path: Path):
    b = Boilerplate(tmp_path)
    with pytest.raises(DirectoryNotFoundError) as exc:
        b.navigate("Nope", make_if_absent=False)
    assert exc.value.payload == str(tmp_path / "Nope")
    assert b.context == ()
    assert not (tmp_path / "Nope").exists()


def test_existing_directory_is_reused(tmp_path: Path):
    (tmp_path / "Game").mkdir()
    (tmp_path / "Game" / "keep.txt").write_text("keep")
    b = Boilerplate(tmp_path).navigate("Game", make_if_absent=False)
    assert b.context == ("Game",)
    assert (tmp_path / "Game" / "keep.txt").read_text() == "keep"


def test_file_in_the_way(tmp_path: Path):
    (tmp_path / "Game").write_text("not a folder")
    b = Boilerplate(tmp_path)
    with pytest.raises(NotDirectoryError) as exc:
        b.navigate("Game")
    assert exc.value.kind == "NotADirectory"
    assert b.context == ()


def test_navigation_is_logged(tmp_path: Path, caplog):
    caplog.set_level(logging.INFO, logger="scaffoldkit.generator.boilerplate")
    b = Boilerplate(tmp_path)
    b.navigate("Game").leave().navigate("Game")
    messages = [r.getMessage() for r in caplog.records]
    assert messages == [
        f"Creating the directory: {tmp_path}:Game",
        f"Using the directory: {tmp_path}:Game",
    ]


def test_run_invokes_actions_in_order(tmp_path: Path):
    calls = []
    b = Boilerplate(tmp_path).navigate("Game").navigate("Maps")
    result = b.run(
        lambda builder, path: calls.append(("first", builder, path)),
        lambda builder, path: calls.append(("second", builder, path)),
    )
    assert result is b
    expected = tmp_path / "Game" / "Maps"
    assert calls == [("first", b, expected), ("second", b, expected)]


def test_run_at_root_passes_root(tmp_path: Path):
    seen = []
    Boilerplate(tmp_path).run(lambda builder, path: seen.append(path))
    assert seen == [tmp_path]


def test_run_stops_at_first_failure(tmp_path: Path):
    calls = []

    def boom(builder, path):
        raise RuntimeError("boom")

    b = Boilerplate(tmp_path)
    with pytest.raises(RuntimeError, match="boom"):
        b.run(lambda *_: calls.append(1), boom, lambda *_: calls.append(3))
    assert calls == [1]


def test_run_rejects_non_callables_before_running(tmp_path: Path):
    calls = []
    with pytest.raises(TypeError):
        Boilerplate(tmp_path).run(lambda *_: calls.append(1), None)
    assert calls == []


@pytest.mark.parametrize(
    "template_name,expected",
    [("Thing", "Widget"), ("Thing.cs", "Widget.cs"), ("Thing.g.cs", "Widget.g.cs")],
)
def test_output_file_name(template_name, expected):
    assert output_file_name(template_name, "Widget") == expected


def test_template_source_from_path_drops_template_suffix(tmp_path: Path):
    path = tmp_path / "Foo.cs.txt"
    path.write_text("class #NAME# {}", encoding="utf-8")
    source = TemplateSource.from_path(path)
    assert source.name == "Foo.cs"
    assert source.text == "class #NAME# {}"


def test_instantiation_writes_resolved_file(tmp_path: Path):
    source = TemplateSource("Thing.cs", "class #NAME# { int a=#FOO#; }")
    replacements = {"FOO": "9"}
    action = make_script_instantiation_action(source, "Widget", replacements)

    Boilerplate(tmp_path).navigate("Game").run(action).leave()

    out = tmp_path / "Game" / "Widget.cs"
    assert out.read_text(encoding="utf-8") == "class Widget { int a=9; }"
    assert replacements == {"FOO": "9"}


def test_instantiation_without_extension(tmp_path: Path):
    source = TemplateSource("Thing", "#SCRIPTNAME_LOWER#")
    Boilerplate(tmp_path).run(make_script_instantiation_action(source, "Widget", {}))
    assert (tmp_path / "Widget").read_text(encoding="utf-8") == "widget"


def test_instantiation_overwrites(tmp_path: Path):
    (tmp_path / "Widget.cs").write_text("old contents that are longer")
    source = TemplateSource("Thing.cs", "new")
    Boilerplate(tmp_path).run(make_script_instantiation_action(source, "Widget", {}))
    assert (tmp_path / "Widget.cs").read_text(encoding="utf-8") == "new"


def test_instantiation_errors_propagate_and_write_nothing(tmp_path: Path):
    source = TemplateSource("Thing.cs", "#MISSING#")
    action = make_script_instantiation_action(source, "Widget", {})
    with pytest.raises(UnresolvedKeyError):
        Boilerplate(tmp_path).run(action)
    assert not (tmp_path / "Widget.cs").exists()


def test_instantiation_strict_policy(tmp_path: Path):
    source = TemplateSource("Thing.cs", "#region\n#NAME#")
    lenient = make_script_instantiation_action(source, "Widget", {})
    Boilerplate(tmp_path).run(lenient)
    assert (tmp_path / "Widget.cs").read_text(encoding="utf-8") == "#region\nWidget"

    strict = make_script_instantiation_action(source, "Other", {}, on_incomplete="strict")
    with pytest.raises(InvalidMarkerError) as exc:
        Boilerplate(tmp_path).run(strict)
    assert exc.value.marker == "#region"
    assert not (tmp_path / "Other.cs").exists()


def test_instantiation_requires_source_and_name():
    with pytest.raises(TypeError):
        make_script_instantiation_action(None, "Widget", {})
    with pytest.raises(TypeError):
        make_script_instantiation_action(TemplateSource("T", ""), None, {})


def test_in_memory_host_receives_everything():
    host = InMemoryHost("Assets")
    source = TemplateSource("SampleScript.cs", "class #SCRIPTNAME# { int foo = #FOO#; }")
    action = make_script_instantiation_action(source, "MyScriptName", {"FOO": "2"})

    (Boilerplate("Assets", host)
        .navigate("Game")
            .navigate("Objects")
            .leave()
            .navigate("Maps")
                .run(action)
            .leave()
        .leave())

    assert host.lookup("Assets/Game/Objects") is AssetKind.DIRECTORY
    assert host.read_text_file("Assets/Game/Maps/MyScriptName.cs") == "class MyScriptName { int foo = 2; }"
    assert host.refreshes == 1
    assert host.index == [
        "Game",
        "Game/Maps",
        "Game/Maps/MyScriptName.cs",
        "Game/Objects",
    ]


def test_in_memory_host_rejects_directory_under_file():
    host = InMemoryHost("Assets")
    host.write_text_file("Assets/file", "x")
    assert host.lookup("Assets/file") is AssetKind.FILE
    with pytest.raises(NotADirectoryError):
        host.create_directory("Assets/file", "sub")
    with pytest.raises(NotDirectoryError):
        Boilerplate("Assets", host).navigate("file")


def test_local_host_index(tmp_path: Path):
    host = LocalHost(tmp_path)
    Boilerplate(tmp_path, host).navigate("a").run(
        make_script_instantiation_action(TemplateSource("T.txt", "x"), "f", {})
    )
    assert host.index == ["a", "a/f.txt"]


def test_directory_name_pattern_matches_whole_name():
    assert DIRECTORY_NAME.fullmatch("Maps")
    assert DIRECTORY_NAME.fullmatch("Maps\n") is None
    assert DIRECTORY_NAME.fullmatch("Maps/") is None


def test_in_memory_host_writes_like_the_disk():
    host = InMemoryHost("Assets")
    host.write_text_file("Assets/file", "x")
    with pytest.raises(NotADirectoryError):
        host.write_text_file("Assets/file/inner.cs", "y")
    with pytest.raises(FileNotFoundError):
        host.write_text_file("Assets/missing/inner.cs", "y")
    host.create_directory("Assets", "Game")
    with pytest.raises(IsADirectoryError):
        host.write_text_file("Assets/Game", "y")
    assert set(host.files) == {PurePosixPath("Assets/file")}


def test_in_memory_host_from_disk(tmp_path: Path):
    (tmp_path / "Game").mkdir()
    (tmp_path / "Game" / "keep.cs").write_text("keep")
    host = InMemoryHost.from_disk(tmp_path)
    assert host.lookup(tmp_path / "Game") is AssetKind.DIRECTORY
    assert host.lookup(tmp_path / "Game" / "keep.cs") is AssetKind.FILE
    assert host.lookup(tmp_path / "Nope") is AssetKind.ABSENT
    host.refresh_index()
    assert host.index == []


def test_local_host_index_skips_existing_content(tmp_path: Path):
    (tmp_path / "unrelated.txt").write_text("x")
    (tmp_path / "a").mkdir()
    host = LocalHost(tmp_path)
    Boilerplate(tmp_path, host).navigate("a").navigate("b").run(
        make_script_instantiation_action(TemplateSource("T.txt", "x"), "f", {})
    )
    assert host.index == ["a/b", "a/b/f.txt"]
