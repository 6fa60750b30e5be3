import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel

CONFIG_FILE = Path("config/scaffoldkit.yml")
CONFIG_ENV = "SCAFFOLDKIT_CONFIG"


class Settings(BaseModel):
    templates_dir: Optional[Path] = None  # None means the bundled templates
    out: Path = Path("./out")
    strict: bool = False
    log_level: str = "INFO"


def config_path(path: Optional[Path] = None) -> Path:
    if path is not None:
        return Path(path)
    env = os.environ.get(CONFIG_ENV)
    return Path(env) if env else CONFIG_FILE


def load_config(path: Optional[Path] = None) -> Settings:
    cfg = config_path(path)
    if cfg.exists():
        return Settings.model_validate(yaml.safe_load(cfg.read_text(encoding="utf-8")) or {})
    return Settings()
