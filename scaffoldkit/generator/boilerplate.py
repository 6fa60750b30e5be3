"""
A small fluent DSL to lay out directories and drop generated files in them.

    action = make_script_instantiation_action(source, "MyScriptName", {"FOO": "2"})
    (Boilerplate("Assets")
        .navigate("Game")
            .navigate("Objects")
            .leave()
            .navigate("Maps")
                .run(action)
            .leave()
        .leave())
"""
import logging
import re
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Tuple

from .errors import (
    DirectoryNotFoundError,
    InvalidNameError,
    NotDirectoryError,
    UnbalancedScopeExitError,
)
from .host import AssetKind, Host, LocalHost, PathLike, TemplateSource
from .replacer import IncompletePolicy, PolicyLike, resolve_script

logger = logging.getLogger(__name__)

DIRECTORY_NAME = re.compile(r"[A-Za-z0-9]+([._-][A-Za-z0-9]+)*")

Action = Callable[["Boilerplate", Path], None]


class Boilerplate:
    def __init__(self, root: PathLike = ".", host: Optional[Host] = None) -> None:
        self.root = Path(root)
        self.host: Host = host if host is not None else LocalHost(self.root)
        self._context: List[str] = []

    @property
    def context(self) -> Tuple[str, ...]:
        return tuple(self._context)

    @property
    def current_path(self) -> Path:
        return self.root.joinpath(*self._context)

    def navigate(self, name: str, make_if_absent: bool = True) -> "Boilerplate":
        """Dive into a subdirectory of the current one, creating it if absent.

        Raises InvalidNameError, NotDirectoryError, or DirectoryNotFoundError
        (the latter only when ``make_if_absent`` is false).
        """
        if name is None:
            raise InvalidNameError(name)
        name = name.strip()
        if not DIRECTORY_NAME.fullmatch(name):
            raise InvalidNameError(name)

        current_path = self.current_path
        full_path = current_path / name

        kind = self.host.lookup(full_path)
        if kind is AssetKind.FILE:
            raise NotDirectoryError(full_path)
        if kind is AssetKind.DIRECTORY:
            logger.info("Using the directory: %s:%s", current_path, name)
            self._context.append(name)
            return self
        if not make_if_absent:
            raise DirectoryNotFoundError(full_path)
        logger.info("Creating the directory: %s:%s", current_path, name)
        self.host.create_directory(current_path, name)
        self._context.append(name)
        return self

    def leave(self) -> "Boilerplate":
        """Go back to the parent directory."""
        if self._context:
            self._context.pop()
            return self
        raise UnbalancedScopeExitError()

    def run(self, *actions: Action) -> "Boilerplate":
        """Invoke each action with (self, current path), in order. The first failure propagates."""
        for action in actions:
            if not callable(action):
                raise TypeError(f"Boilerplate actions must be callable, got {action!r}")

        full_path = self.current_path
        for action in actions:
            action(self, full_path)
        return self


def output_file_name(template_name: str, target_name: str) -> str:
    # "SampleScript.cs" + "Widget" -> "Widget.cs"
    parts = template_name.split(".", 1)
    return target_name if len(parts) == 1 else f"{target_name}.{parts[1]}"


def make_script_instantiation_action(
    template_source: TemplateSource,
    target_name: str,
    replacements: Mapping[str, str],
    on_incomplete: PolicyLike = IncompletePolicy.LENIENT,
) -> Action:
    """Return an action that writes ``template_source`` resolved as ``target_name``.

    Besides the given replacements, #SCRIPTNAME#, #NAME# and #SCRIPTNAME_LOWER#
    are available to the template. An existing file is overwritten.
    """
    if template_source is None:
        raise TypeError("template_source is required")
    if target_name is None:
        raise TypeError("target_name is required")
    policy = IncompletePolicy(on_incomplete)
    contents = template_source.text
    file_name = output_file_name(template_source.name, target_name)
    entries = dict(replacements or {})

    def instantiate(boilerplate: Boilerplate, directory_path: Path) -> None:
        full_file_path = Path(directory_path) / file_name
        logger.info("Target file: %s", full_file_path)
        text = resolve_script(target_name, contents, entries, policy)
        boilerplate.host.write_text_file(full_file_path, text)
        boilerplate.host.refresh_index()

    return instantiate
