from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Notice:
    id: str
    content: str
    updated_at: datetime
    updated_by: str
