from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class RequestAttempt:
    attempt_id: str
    method: str
    url: str
    status_code: int | None
    timestamp: datetime
    response_time_ms: float
    params: dict = field(default_factory=dict)
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.status_code is None or self.status_code >= 400
