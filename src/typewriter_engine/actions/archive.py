"""Actions that hand pages to the note archive."""

from __future__ import annotations

from typewriter_engine.archive import ValidationError
from typewriter_engine.runtime import telemetry
from typewriter_engine.session.context import KeyInput, SessionContext, SessionResult


def send_page(context: SessionContext, key: KeyInput | None = None) -> SessionResult:
    """Archive the page and hand the typist a fresh sheet.

    The buffer resets before the submission job runs, so a slow or failing
    archive never touches the new page.
    """

    del key
    buffer = context.buffer
    if buffer.is_blank:
        return SessionResult(consumed=True, status="send_blank", message="nothing_to_send")

    content = buffer.raw_content
    buffer.reset()
    context.scroll.reset()
    context.flags["page_has_text"] = False
    context.bus.emit("page.sent", content)
    context.bus.emit("buffer.changed", buffer.snapshot())

    archive = context.archive
    if archive is None:
        return SessionResult(consumed=True, status="sent_unarchived", message="page_sent")

    def submit() -> None:
        try:
            note = archive.submit(content)
        except ValidationError as exc:
            telemetry.record_event(
                "session.send_rejected", level="warning", data={"error": str(exc)}
            )
            return
        context.bus.emit("note.archived", note)
        context.notes = archive.list_all()
        context.bus.emit("notes.updated", list(context.notes))

    context.dispatch(submit)
    return SessionResult(consumed=True, status="sent", message="page_sent")


def refresh_notes(context: SessionContext, key: KeyInput | None = None) -> SessionResult:
    del key
    archive = context.archive
    if archive is None:
        return SessionResult(consumed=True, status="noop")

    def load() -> None:
        context.notes = archive.list_all()
        context.bus.emit("notes.updated", list(context.notes))

    context.dispatch(load)
    return SessionResult(consumed=True, message="notes_refresh")


__all__ = ["send_page", "refresh_notes"]
