from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Any, Optional

LOADING = "loading"
SUCCESS = "success"
ERROR = "error"

# oldest messages are dropped once this many are waiting
MAX_PENDING = 20


@dataclass
class Notification:
    id: int
    kind: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "kind": self.kind, "message": self.message}


class Notifier:
    """Queue of transient messages shown to the user once.

    A loading notification can be replaced in place by passing its id to
    success() or error(), so a pending "Syncing notes..." turns into the
    outcome instead of stacking up.
    """

    def __init__(self, max_pending: int = MAX_PENDING) -> None:
        self.max_pending = max_pending
        self._pending: list[Notification] = []
        self._ids = itertools.count(1)

    def _post(self, kind: str, message: str, replace: Optional[int]) -> int:
        if replace is not None:
            for n in self._pending:
                if n.id == replace:
                    n.kind = kind
                    n.message = message
                    return n.id
        n = Notification(id=replace if replace is not None else next(self._ids), kind=kind, message=message)
        self._pending.append(n)
        if len(self._pending) > self.max_pending:
            del self._pending[: len(self._pending) - self.max_pending]
        return n.id

    def loading(self, message: str) -> int:
        return self._post(LOADING, message, None)

    def success(self, message: str, replace: Optional[int] = None) -> int:
        return self._post(SUCCESS, message, replace)

    def error(self, message: str, replace: Optional[int] = None) -> int:
        return self._post(ERROR, message, replace)

    def peek(self) -> list[Notification]:
        return list(self._pending)

    def drain(self) -> list[Notification]:
        out, self._pending = self._pending, []
        return out
