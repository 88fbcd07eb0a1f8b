"""Services"""

from resume_builder.services.form_editor import FormEditor
from resume_builder.services.form_store import FormStateStore, ThemeStore
from resume_builder.services.local_storage import LocalStorage, StorageError
from resume_builder.services.preview import render_preview
from resume_builder.services.results import OperationResult, ResultStatus

__all__ = [
    "FormEditor",
    "FormStateStore",
    "LocalStorage",
    "OperationResult",
    "ResultStatus",
    "StorageError",
    "ThemeStore",
    "render_preview",
]
