"""
Compile REST routes.

All routes are mounted under /api by main.py.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from squirrelgraph.compiler import compile_graph_report
from squirrelgraph.compiler.schema import SchemaError, validate
from squirrelgraph.project_embed import embed_project, extract_project, metadata_header

logger = logging.getLogger(__name__)

router = APIRouter()


# ── POST /compile ─────────────────────────────────────────────────────────────

class CompileBody(BaseModel):
    nodes: List[Dict[str, Any]] = Field(default_factory=list)
    connections: List[Dict[str, Any]] = Field(default_factory=list)
    metadata: Optional[Dict[str, Any]] = None
    embed: bool = False
    strict: bool = False


class RootErrorOut(BaseModel):
    functionName: str
    nodeId: str
    message: str


class CompileResult(BaseModel):
    source: str
    errors: List[RootErrorOut] = Field(default_factory=list)


@router.post("/compile", response_model=CompileResult)
async def compile_graph(body: CompileBody) -> CompileResult:
    document = {"nodes": body.nodes, "connections": body.connections}
    try:
        validate(document, strict=body.strict)
    except SchemaError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    report = compile_graph_report(body.nodes, body.connections)
    source = report.source

    if body.metadata is not None or body.embed:
        metadata = body.metadata or {}
        source = metadata_header(metadata, include_graph=body.embed) + source
        if body.embed:
            source = embed_project(source, {"metadata": metadata, **document})

    logger.info("Compiled %d nodes (%d aborted roots)", len(body.nodes), len(report.errors))
    return CompileResult(
        source=source,
        errors=[
            RootErrorOut(functionName=e.function_name, nodeId=e.node_id, message=e.message)
            for e in report.errors
        ],
    )


# ── POST /extract ─────────────────────────────────────────────────────────────

class ExtractBody(BaseModel):
    source: str


class ExtractResult(BaseModel):
    project: Optional[Dict[str, Any]] = None


@router.post("/extract", response_model=ExtractResult)
async def extract(body: ExtractBody) -> ExtractResult:
    return ExtractResult(project=extract_project(body.source))
