import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from .boilerplate import Boilerplate, make_script_instantiation_action
from .host import Host, LocalHost, TemplateSource
from .layout import DirectoryEntry, Layout
from .replacer import IncompletePolicy

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIX = ".txt"
DEFAULT_TEMPLATES_ROOT = Path(__file__).resolve().parents[1] / "templates"


class TemplateLibrary:
    """A directory of ``<Name>.<ext>.txt`` templates, addressed by ``<Name>.<ext>``."""

    def __init__(self, templates_root: Path) -> None:
        self.templates_root = Path(templates_root)

    def names(self) -> List[str]:
        if not self.templates_root.is_dir():
            return []
        return sorted(p.stem for p in self.templates_root.glob(f"*{TEMPLATE_SUFFIX}") if p.is_file())

    def get(self, name: str) -> TemplateSource:
        path = self.templates_root / f"{name}{TEMPLATE_SUFFIX}"
        if not path.is_file():
            raise FileNotFoundError(f"Template '{name}' not found at {path}")
        return TemplateSource.from_path(path)


class TemplateRenderer:
    def __init__(self, templates_root: Path = DEFAULT_TEMPLATES_ROOT) -> None:
        self.library = TemplateLibrary(templates_root)

    def scaffold(
        self,
        layout: Layout,
        out_dir: Union[str, Path],
        host: Optional[Host] = None,
    ) -> Host:
        """Materialize ``layout`` under ``out_dir`` and return the host that received it."""
        out_dir = Path(out_dir)
        logger.info("Scaffolding into %s", out_dir)
        if host is None:
            out_dir.mkdir(parents=True, exist_ok=True)
            host = LocalHost(out_dir)

        builder = Boilerplate(out_dir, host)
        self._apply(builder, layout, dict(layout.replacements), layout.strict)
        host.refresh_index()
        return host

    def _apply(
        self,
        builder: Boilerplate,
        node: Union[Layout, DirectoryEntry],
        replacements: Dict[str, str],
        strict: bool,
    ) -> None:
        actions = []
        for entry in node.files:
            file_strict = strict if entry.strict is None else entry.strict
            policy = IncompletePolicy.STRICT if file_strict else IncompletePolicy.LENIENT
            actions.append(
                make_script_instantiation_action(
                    self.library.get(entry.template),
                    entry.name,
                    {**replacements, **entry.replacements},
                    on_incomplete=policy,
                )
            )
        if actions:
            builder.run(*actions)

        for directory in node.directories:
            builder.navigate(directory.name, make_if_absent=directory.make_if_absent)
            self._apply(builder, directory, {**replacements, **directory.replacements}, strict)
            builder.leave()
