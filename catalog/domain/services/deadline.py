import time
from typing import Optional

from catalog.conf import catalog_setting
from catalog.domain.exceptions import IngestionDeadlineExceeded


class Deadline:
    """
    Wall-clock budget for one create request.

    Checked between pipeline stages and before each upload; ``None`` seconds
    means no limit.
    """

    def __init__(self, seconds: Optional[float] = None, clock=time.monotonic):
        self.clock = clock
        self.seconds = seconds
        self.expires_at = clock() + seconds if seconds is not None else None

    @classmethod
    def from_settings(cls) -> "Deadline":
        seconds = catalog_setting("REQUEST_DEADLINE_SECONDS")
        return cls(float(seconds) if seconds else None)

    def remaining(self) -> Optional[float]:
        if self.expires_at is None:
            return None
        return max(0.0, self.expires_at - self.clock())

    @property
    def expired(self) -> bool:
        return self.expires_at is not None and self.clock() >= self.expires_at

    def check(self, stage: str) -> None:
        if self.expired:
            raise IngestionDeadlineExceeded(f"Request deadline of {self.seconds}s exceeded before {stage}")
