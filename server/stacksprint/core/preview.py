# stacksprint/core/preview.py
"""
View state fed by generation results.

GenerationView is what the preview panel renders: scripts, the annotated
project tree, warnings, complexity, the error surface, loading flags, the
file-count delta and a bounded queue of transient notifications.
Only the scheduler writes into it.
"""
import logging
from collections import deque
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from stacksprint.core.annotations import explain
from stacksprint.core.diff_tracker import DiffTracker
from stacksprint.models import ComplexityReport, GenerationRequest, GenerationResult, GenerationWarning
from stacksprint.utils.config import NOTIFICATION_LIMIT
from stacksprint.utils.file_helpers import is_directory_path, path_depth

logger = logging.getLogger(__name__)

NotificationLevel = Literal["success", "error", "info"]


class Notification(BaseModel):
    level: NotificationLevel
    message: str


class TreeEntry(BaseModel):
    path: str
    depth: int
    is_dir: bool
    explanation: Optional[str] = None


class PreviewSnapshot(BaseModel):
    bash_script: str = ""
    powershell_script: str = ""
    file_paths: List[str] = Field(default_factory=list)
    tree: List[TreeEntry] = Field(default_factory=list)
    warnings: List[GenerationWarning] = Field(default_factory=list)
    complexity_report: Optional[ComplexityReport] = None
    architecture: Optional[str] = None
    error: str = ""
    loading: bool = False
    preview_loading: bool = False
    file_delta: Optional[int] = None


def annotate_tree(file_paths: List[str], architecture: Optional[str]) -> List[TreeEntry]:
    return [
        TreeEntry(
            path=p,
            depth=path_depth(p),
            is_dir=is_directory_path(p),
            explanation=explain(p, architecture or ""),
        )
        for p in file_paths
    ]


class Notifier:
    def __init__(self, limit: int = NOTIFICATION_LIMIT):
        self._queue = deque(maxlen=limit)

    def push(self, level: NotificationLevel, message: str) -> None:
        self._queue.append(Notification(level=level, message=message))

    def drain(self) -> List[Notification]:
        out = list(self._queue)
        self._queue.clear()
        return out

    def __len__(self) -> int:
        return len(self._queue)


class GenerationView:
    def __init__(self, notifier: Optional[Notifier] = None, diff: Optional[DiffTracker] = None):
        self.notifier = notifier or Notifier()
        self.diff = diff or DiffTracker()
        self.result: Optional[GenerationResult] = None
        self.architecture: Optional[str] = None
        self.error = ""
        self.manual_pending = 0
        self.preview_pending = 0

    # ----------------------------
    # Loading flags
    # ----------------------------
    def begin(self, mode: str) -> None:
        if mode == "manual":
            self.manual_pending += 1
        else:
            self.preview_pending += 1

    def end(self, mode: str) -> None:
        if mode == "manual":
            self.manual_pending = max(0, self.manual_pending - 1)
        else:
            self.preview_pending = max(0, self.preview_pending - 1)

    # ----------------------------
    # Outcomes
    # ----------------------------
    def apply_result(self, result: GenerationResult, request: GenerationRequest, mode: str) -> None:
        self.result = result
        self.architecture = request.architecture
        self.error = ""
        self.diff.record(result.file_paths)
        if mode == "manual":
            self.notifier.push("success", "Scripts generated successfully!")

    def apply_error(self, message: str, mode: str) -> None:
        self.error = message or "Generation failed"
        # a failed generation empties the tree; the next success starts a fresh diff
        if self.result is not None:
            self.result = self.result.model_copy(update={"file_paths": []})
        self.diff.reset()
        if mode == "manual":
            self.notifier.push("error", self.error)

    # ----------------------------
    # Read side
    # ----------------------------
    def script(self, variant: str) -> str:
        if self.result is None:
            return ""
        if variant == "bash":
            return self.result.bash_script
        if variant == "powershell":
            return self.result.powershell_script
        raise ValueError(f"unknown script variant {variant!r}")

    def snapshot(self) -> PreviewSnapshot:
        result = self.result or GenerationResult()
        return PreviewSnapshot(
            bash_script=result.bash_script,
            powershell_script=result.powershell_script,
            file_paths=list(result.file_paths),
            tree=annotate_tree(result.file_paths, self.architecture),
            warnings=list(result.warnings),
            complexity_report=result.complexity_report,
            architecture=self.architecture,
            error=self.error,
            loading=self.manual_pending > 0,
            preview_loading=self.preview_pending > 0,
            file_delta=self.diff.delta,
        )

    def as_dict(self) -> Dict[str, Any]:
        return self.snapshot().model_dump()
