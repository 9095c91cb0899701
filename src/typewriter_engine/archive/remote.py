"""HTTP client for the remote note archive."""

from __future__ import annotations

from typing import Any, List, Optional

import httpx

from typewriter_engine.runtime import telemetry

from .errors import TransportError
from .models import Note, newest_first, parse_notes


class RemoteNoteStore:
    """Thin ``httpx`` wrapper; every failure surfaces as ``TransportError``."""

    def __init__(
        self,
        base_url: str = "",
        *,
        token: Optional[str] = None,
        timeout: float = 5.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._owns_client = client is None
        self._client = client or httpx.Client(
            base_url=base_url, timeout=timeout, headers=headers
        )
        if client is not None and headers:
            self._client.headers.update(headers)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "RemoteNoteStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False

    def list_notes(self) -> List[Note]:
        payload = self._request("GET", "/notes")
        records = payload.get("notes") if isinstance(payload, dict) else None
        if not isinstance(records, list):
            raise TransportError("Archive returned no note list")
        return newest_first(parse_notes(records))

    def create_note(self, content: str) -> Note:
        payload = self._request("POST", "/notes", json={"content": content})
        record = payload.get("note") if isinstance(payload, dict) else None
        if not isinstance(record, dict):
            raise TransportError("Archive returned no note")
        try:
            return Note.from_dict(record)
        except ValueError as exc:
            raise TransportError(str(exc)) from exc

    def delete_note(self, note_id: str) -> bool:
        payload = self._request("DELETE", f"/notes/{note_id}")
        return bool(isinstance(payload, dict) and payload.get("success"))

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        with telemetry.span(
            f"archive::{method.lower()}",
            component="archive",
            metadata={"path": path},
        ) as handle:
            try:
                response = self._client.request(method, path, **kwargs)
            except httpx.HTTPError as exc:
                handle.add_metadata("status", "unreachable")
                raise TransportError(f"{method} {path} failed: {exc}") from exc

            handle.add_metadata("status", response.status_code)
            if not response.is_success:
                raise TransportError(
                    f"{method} {path} answered {response.status_code}",
                    status_code=response.status_code,
                )
            try:
                return response.json()
            except ValueError as exc:
                raise TransportError(f"{method} {path} returned invalid JSON") from exc


__all__ = ["RemoteNoteStore"]
