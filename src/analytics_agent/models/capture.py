"""
Network capture data models
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional


@dataclass
class RawInterception:
    """An intercepted call as handed over by a network collaborator"""
    method: str
    url: str
    status: int = 0
    response_headers: Dict[str, str] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())
    post_data: Optional[str] = None


@dataclass(frozen=True)
class CapturedRequest:
    """A decoded analytics hit that passed the required-parameter filter"""
    request_id: str
    url: str
    method: str
    http_status: int
    response_headers: Dict[str, str]
    timestamp: str
    params: Dict[str, str]
    origin_row: Optional[int] = None  # row being processed when observed

    def get_param(self, name: str) -> Optional[str]:
        return self.params.get(name)
