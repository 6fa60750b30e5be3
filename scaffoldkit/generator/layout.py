"""
Declarative layouts: the directory tree and generated files of a boilerplate, as YAML.

    replacements:
      FOO: "2"
    directories:
      - name: Game
        directories:
          - name: Objects
          - name: Maps
            files:
              - template: SampleScript.cs
                name: MyScriptName
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field


class FileEntry(BaseModel):
    template: str
    name: str
    replacements: Dict[str, str] = Field(default_factory=dict)
    strict: Optional[bool] = None  # None inherits the layout setting


class DirectoryEntry(BaseModel):
    name: str
    make_if_absent: bool = True
    replacements: Dict[str, str] = Field(default_factory=dict)
    files: List[FileEntry] = Field(default_factory=list)
    directories: List[DirectoryEntry] = Field(default_factory=list)


DirectoryEntry.model_rebuild()


class Layout(BaseModel):
    replacements: Dict[str, str] = Field(default_factory=dict)
    strict: bool = False
    files: List[FileEntry] = Field(default_factory=list)
    directories: List[DirectoryEntry] = Field(default_factory=list)


def parse_layout(data: Any) -> Layout:
    if data is None:
        return Layout()
    if not isinstance(data, dict):
        raise ValueError(f"A layout must be a mapping, got {type(data).__name__}")
    return Layout.model_validate(data)


def load_layout(path: Path) -> Layout:
    return parse_layout(yaml.safe_load(Path(path).read_text(encoding="utf-8")))
