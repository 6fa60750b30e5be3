from pathlib import Path
from typing import Any, Dict

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from ..generator.errors import ScaffoldError
from ..generator.layout import parse_layout
from ..generator.renderer import TemplateRenderer
from ..generator.replacer import IncompletePolicy, resolve, resolve_script
from ..utils.config import load_config
from ..utils.store import InMemoryHost

app = FastAPI(title="scaffoldkit API", version="0.1.0")
settings = load_config()


class RenderReq(BaseModel):
    text: str
    replacements: Dict[str, str] = Field(default_factory=dict)
    name: str | None = None
    strict: bool = False


class ScaffoldReq(BaseModel):
    layout: Dict[str, Any]
    out: str | None = None
    dry_run: bool = False


def _renderer() -> TemplateRenderer:
    if settings.templates_dir is not None:
        return TemplateRenderer(settings.templates_dir)
    return TemplateRenderer()


def _unprocessable(e: ScaffoldError) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail={"kind": e.kind, "payload": e.payload, "message": str(e)},
    )


@app.get("/templates")
def templates():
    return {"items": _renderer().library.names()}


@app.post("/render")
def render(req: RenderReq):
    policy = IncompletePolicy.STRICT if req.strict else IncompletePolicy.LENIENT
    try:
        if req.name is None:
            text = resolve(req.text, req.replacements, policy)
        else:
            text = resolve_script(req.name, req.text, req.replacements, policy)
    except ScaffoldError as e:
        raise _unprocessable(e)
    return {"text": text}


@app.post("/scaffold")
def scaffold(req: ScaffoldReq):
    try:
        layout = parse_layout(req.layout)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    out_dir = Path(req.out or settings.out).resolve()
    host = InMemoryHost.from_disk(out_dir) if req.dry_run else None
    try:
        host = _renderer().scaffold(layout, out_dir, host)
    except ScaffoldError as e:
        raise _unprocessable(e)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except OSError as e:
        raise HTTPException(status_code=500, detail={"kind": type(e).__name__, "message": str(e)})
    return {"status": "ok", "out": str(out_dir), "files": host.index}
