"""Manual cleanup: candidate selection, picker state machine and soft delete."""

from session_guard.cleanup.candidates import (
    CleanCandidate,
    build_clean_candidates,
    selected_records,
)
from session_guard.cleanup.executor import (
    CleanupResult,
    DeleteStrategy,
    QuarantineStrategy,
    SoftDeleteOutcome,
    SoftDeleter,
    TrashStrategy,
    soft_delete_sessions,
    unique_path,
)
from session_guard.cleanup.picker import (
    Key,
    PickerResult,
    PickerState,
    build_session_preview,
    handle_key,
    key_from_input,
    render_picker,
    selected_summary,
    with_preview,
)

__all__ = [
    "CleanCandidate",
    "CleanupResult",
    "DeleteStrategy",
    "Key",
    "PickerResult",
    "PickerState",
    "QuarantineStrategy",
    "SoftDeleteOutcome",
    "SoftDeleter",
    "TrashStrategy",
    "build_clean_candidates",
    "build_session_preview",
    "handle_key",
    "key_from_input",
    "render_picker",
    "selected_records",
    "selected_summary",
    "soft_delete_sessions",
    "unique_path",
    "with_preview",
]
