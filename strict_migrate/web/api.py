"""Snapshot API: build a diagnostic snapshot, then browse its nodes."""

from __future__ import annotations

import asyncio
from dataclasses import asdict
from pathlib import Path

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from strict_migrate.exceptions import StrictMigrateError
from strict_migrate.pipeline import load_project, run_snapshot
from strict_migrate.web.state import SnapshotSession, state

router = APIRouter(prefix="/api")


class SnapshotRequest(BaseModel):
    tsconfig_path: str


def _build(tsconfig: Path) -> SnapshotSession:
    project = load_project(tsconfig)
    nodes, summary = run_snapshot(tsconfig, project=project)
    warnings = []
    for w in project.graph.warnings:
        entry = asdict(w)
        entry["kind"] = w.kind.value
        warnings.append(entry)
    return SnapshotSession(
        tsconfig_path=str(project.tsconfig_path),
        nodes=nodes,
        summary=summary,
        warnings=warnings,
    )


def _get_session(snapshot_id: str) -> SnapshotSession:
    session = state.get_snapshot(snapshot_id)
    if not session:
        raise HTTPException(404, "Snapshot not found")
    return session


@router.post("/snapshot")
async def create_snapshot(req: SnapshotRequest):
    tsconfig = Path(req.tsconfig_path).expanduser()
    if not tsconfig.is_file():
        raise HTTPException(404, f"tsconfig not found: {req.tsconfig_path}")
    try:
        session = await asyncio.to_thread(_build, tsconfig)
    except StrictMigrateError as e:
        raise HTTPException(400, str(e))
    state.add_snapshot(session)
    return {
        "snapshot_id": session.id,
        "summary": session.summary,
        "node_count": len(session.nodes),
        "warning_count": len(session.warnings),
    }


@router.get("/snapshot/{snapshot_id}/summary")
async def get_summary(snapshot_id: str):
    session = _get_session(snapshot_id)
    return {
        "snapshot_id": session.id,
        "tsconfig_path": session.tsconfig_path,
        "timestamp": session.timestamp,
        **session.summary,
    }


@router.get("/snapshot/{snapshot_id}/nodes")
async def list_nodes(snapshot_id: str, eligible: bool | None = None):
    session = _get_session(snapshot_id)
    nodes = session.nodes
    if eligible is not None:
        nodes = [n for n in nodes if n["eligible"] == eligible]
    return {"nodes": nodes}


@router.get("/snapshot/{snapshot_id}/nodes/{node_id}")
async def get_node(snapshot_id: str, node_id: int):
    session = _get_session(snapshot_id)
    if node_id < 0 or node_id >= len(session.nodes):
        raise HTTPException(404, "Node not found")
    return session.nodes[node_id]


@router.get("/snapshot/{snapshot_id}/warnings")
async def list_warnings(snapshot_id: str):
    return {"warnings": _get_session(snapshot_id).warnings}


@router.delete("/snapshot/{snapshot_id}")
async def delete_snapshot(snapshot_id: str):
    if not state.delete_snapshot(snapshot_id):
        raise HTTPException(404, "Snapshot not found")
    return {"deleted": snapshot_id}
