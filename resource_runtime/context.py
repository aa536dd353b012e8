from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class ExecutionContext:
    """
    Caller-supplied execution context. The pipeline hands the same instance,
    unmodified, to every hook and handler it invokes for a request.

    Cancellation travels with the asyncio task running the request; the
    deadline is advisory and only handlers act on it.
    """

    request_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    deadline: Optional[float] = None
    attributes: Mapping[str, Any] = field(default_factory=dict)

    def time_remaining(self) -> Optional[float]:
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())
