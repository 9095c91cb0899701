"""FastAPI service that stores typewriter notes."""

from __future__ import annotations

import argparse
import os
import secrets
from pathlib import Path
from typing import Any, Optional, Sequence

from fastapi import Depends, FastAPI, HTTPException, Request, Security
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from typewriter_engine import __version__
from typewriter_engine.runtime import telemetry

from .errors import StorageError, ValidationError
from .models import Note
from .store import KeyValueNoteStore


def generate_token() -> str:
    return secrets.token_urlsafe(32)


def create_app(
    store: Optional[KeyValueNoteStore] = None,
    *,
    token: str | None = None,
    enable_cors: bool = False,
) -> FastAPI:
    """Build the archive app around ``store`` (in-memory when omitted)."""

    notes_store = store or KeyValueNoteStore()
    app = FastAPI(
        title="Typewriter Notes",
        description="Archive of pages sent from the typewriter",
        version=__version__,
        docs_url="/docs" if token is None else None,
        redoc_url="/redoc" if token is None else None,
    )
    app.state.store = notes_store

    if enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    if token:
        security_scheme = HTTPBearer(auto_error=False)

        async def verify_token(
            credentials: HTTPAuthorizationCredentials | None = Security(security_scheme),  # noqa: B008
        ) -> None:
            if credentials is None or credentials.credentials != token:
                raise HTTPException(status_code=401, detail="Invalid or missing token")
    else:

        async def verify_token() -> None:
            return None

    @app.get("/health")
    async def health(auth: None = Depends(verify_token)) -> dict[str, Any]:
        return {"status": "ok", "version": __version__}

    @app.get("/notes")
    async def list_notes(auth: None = Depends(verify_token)) -> dict[str, Any]:
        try:
            notes = notes_store.list_notes()
        except StorageError as exc:
            telemetry.record_event(
                "server.list_failed", level="error", data={"error": str(exc)}
            )
            raise HTTPException(status_code=500, detail="Failed to fetch notes") from exc
        return {"notes": [note.to_dict() for note in notes]}

    @app.post("/notes")
    async def create_note(
        request: Request, auth: None = Depends(verify_token)
    ) -> dict[str, Any]:
        try:
            payload = await request.json()
        except ValueError as exc:
            raise HTTPException(status_code=400, detail="Body must be JSON") from exc
        content = payload.get("content") if isinstance(payload, dict) else None

        try:
            note = Note.create(content)  # type: ignore[arg-type]
        except ValidationError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        try:
            notes_store.add(note)
        except StorageError as exc:
            telemetry.record_event(
                "server.create_failed", level="error", data={"error": str(exc)}
            )
            raise HTTPException(status_code=500, detail="Failed to create note") from exc

        telemetry.record_event("server.note_created", data={"note_id": note.id})
        return {"note": note.to_dict()}

    @app.delete("/notes/{note_id}")
    async def delete_note(note_id: str, auth: None = Depends(verify_token)) -> dict[str, Any]:
        try:
            notes_store.delete(note_id)
        except StorageError as exc:
            raise HTTPException(status_code=500, detail="Failed to delete note") from exc
        return {"success": True}

    return app


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve the typewriter note archive.")
    parser.add_argument(
        "--host", default=os.environ.get("TYPEWRITER_SERVER_HOST", "127.0.0.1")
    )
    parser.add_argument(
        "--port", type=int, default=int(os.environ.get("TYPEWRITER_SERVER_PORT", "8799"))
    )
    parser.add_argument(
        "--store",
        type=Path,
        default=os.environ.get("TYPEWRITER_SERVER_STORE"),
        help="JSON file for notes (in-memory when omitted)",
    )
    parser.add_argument("--token", default=os.environ.get("TYPEWRITER_ARCHIVE_TOKEN"))
    parser.add_argument("--cors", action="store_true", help="Allow any origin")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    import uvicorn

    args = _parse_args(argv)
    app = create_app(KeyValueNoteStore(args.store), token=args.token, enable_cors=args.cors)
    uvicorn.run(app, host=args.host, port=args.port, log_level="info")


if __name__ == "__main__":  # pragma: no cover - manual entry point
    main()
