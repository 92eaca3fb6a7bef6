"""FastAPI web server for aichat-search."""

import logging

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse

from .config import get_workspace_storage_path
from .core import Scope
from .errors import MissingQueryError
from .search import search

logger = logging.getLogger(__name__)

app = FastAPI(title="aichat-search", version="0.1.0")


# ── Routes ───────────────────────────────────────────────────────


@app.get("/api/health")
async def health():
    """Report the configured workspace root."""
    root = get_workspace_storage_path()
    return {"workspace_root": str(root), "available": root.is_dir()}


@app.get("/api/search")
async def search_conversations(
    q: str | None = Query(None, description="Text to look for"),
    type: Scope = Query(Scope.ALL, description="Scope: all, ask or agent"),
):
    """Search conversation titles and messages across all stores."""
    try:
        results = search(q, type)
    except MissingQueryError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Search failed for %r: %s", q, e)
        return JSONResponse(status_code=500, content={"error": "Search failed", "results": []})

    return {"results": [r.to_dict() for r in results]}
