"""
FastAPI backend for mood-journal.

Serves the local journal store: summary, records, CSV export and CSV import.
File transport is out of scope; /import takes the CSV text as the raw
request body.

The store location comes from MOOD_JOURNAL_DB_PATH (see config.py). When
MOOD_JOURNAL_SOURCE_PATH names a JSON sample file, deleting a record also
removes its linked external sample, best effort.
"""

from __future__ import annotations

import asyncio
import dataclasses
import os
from typing import Any, Dict, List

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from mood_journal.analysis import get_latest_records, summarize_records
from mood_journal.config import Config
from mood_journal.csvio.duplicates import DuplicatePolicy
from mood_journal.csvio.engine import ImportResult, export_all, import_with_duplicate_check
from mood_journal.store import JournalStore, RecordNotFoundError
from mood_journal.sync.reconcile import delete_with_external
from mood_journal.sync.source import JsonFileMoodSource


def _open_store(create: bool = False) -> JournalStore:
    """
    Open the journal store.

    Raises HTTPException(503) if the store is missing or unreadable and create
    is False.
    """
    config = Config()
    if not create and not config.validate():
        raise HTTPException(
            status_code=503,
            detail={
                "error": "journal store not found",
                "message": "Import a CSV file or add a record first",
                "path": config.store_path_str,
            },
        )
    store = JournalStore(config.store_path)
    store.connect()
    return store


app = FastAPI(
    title="Mood Journal API",
    version="0.1.0",
    description="Local mood journal: records, summary, CSV export and import.",
)

# Local dev CORS defaults
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        os.getenv("MOOD_JOURNAL_ALLOWED_ORIGIN", "http://127.0.0.1:5173"),
        "http://localhost:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health() -> Dict[str, Any]:
    """Health check - also reports whether the store exists."""
    path = Config().store_path
    return {
        "status": "ok" if path.exists() else "degraded",
        "store_exists": path.exists(),
        "store_path": str(path),
    }


@app.get("/summary")
def summary() -> Dict[str, Any]:
    """Summary statistics over every record."""
    store = _open_store()
    try:
        result = summarize_records(store.all_records())
    finally:
        store.close()

    for key in ("first_event", "last_event"):
        if result[key] is not None:
            result[key] = result[key].isoformat(sep=" ")
    return result


@app.get("/records")
def records(limit: int = Query(default=50, ge=1, le=1000)) -> List[Dict[str, Any]]:
    """Newest records first."""
    store = _open_store()
    try:
        return get_latest_records(store.all_records(), limit=limit)
    finally:
        store.close()


@app.delete("/records/{record_id}")
def delete_record(record_id: str) -> Dict[str, Any]:
    """
    Delete one record.

    If an external source is configured and the record is linked to one of
    its samples, that sample is deleted too. A failure there does not undo
    the local delete.
    """
    config = Config()
    source = JsonFileMoodSource(config.source_path) if config.source_path else None

    store = _open_store()
    try:
        try:
            record = store.get(record_id)
        except RecordNotFoundError:
            raise HTTPException(status_code=404, detail=f"Record not found: {record_id}")
        external_deleted = asyncio.run(delete_with_external(store, record, source))
    finally:
        store.close()

    return {
        "deleted": record_id,
        "external_ref": record.external_ref,
        "external_deleted": external_deleted,
    }


@app.get("/export", response_class=PlainTextResponse)
def export_csv() -> PlainTextResponse:
    """Every record as a CSV document, newest first."""
    store = _open_store()
    try:
        content = export_all(store.all_records(newest_first=True))
    finally:
        store.close()

    return PlainTextResponse(
        content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="mood_journal.csv"'},
    )


def _import_text(text: str, policy: DuplicatePolicy) -> ImportResult:
    store = _open_store(create=True)
    try:
        result = import_with_duplicate_check(text, store.all_records(), policy)
        store.insert_many(result.imported)
    finally:
        store.close()
    return result


@app.post("/import")
async def import_csv(
    request: Request,
    loose: bool = Query(default=False, description="Enable the loose duplicate tier"),
) -> Dict[str, Any]:
    """
    Import a CSV document sent as the request body.

    Rows duplicating existing records are skipped; the rest are inserted.
    The store work runs in the threadpool, like the plain endpoints.
    """
    raw = await request.body()
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="Request body must be UTF-8 text")

    policy = Config().duplicate_policy
    if loose:
        policy = dataclasses.replace(policy, loose_tier_enabled=True)

    result = await run_in_threadpool(_import_text, text, policy)

    return {
        "imported": len(result.imported),
        "skipped": result.skipped,
        "malformed": result.malformed,
    }
