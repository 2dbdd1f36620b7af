from typing import List, Optional, Sequence


class DiffTracker:
    """
    Signed file-count delta between successive successful generation results.

    Only counts are compared, not set membership. There is no delta for the
    first result or for a result that follows an empty one, so recovering
    from an error never reports the whole tree as "added".
    """

    def __init__(self):
        self._previous: Optional[List[str]] = None
        self.delta: Optional[int] = None

    def record(self, file_paths: Sequence[str]) -> Optional[int]:
        current = list(file_paths)
        if self._previous:
            self.delta = len(current) - len(self._previous)
        else:
            self.delta = None
        self._previous = current
        return self.delta

    def reset(self) -> None:
        self._previous = None
        self.delta = None
