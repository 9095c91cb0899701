"""Session context and event plumbing shared by actions and adapters."""

from .context import (
    FeedbackSink,
    Job,
    KeyInput,
    SessionBus,
    SessionContext,
    SessionResult,
    SilentFeedback,
    run_inline,
)

__all__ = [
    "FeedbackSink",
    "Job",
    "KeyInput",
    "SessionBus",
    "SessionContext",
    "SessionResult",
    "SilentFeedback",
    "run_inline",
]
