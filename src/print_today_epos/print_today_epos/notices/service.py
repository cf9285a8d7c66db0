from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

import structlog

from ..common.validators import require_non_empty
from .model import Notice
from .repository import NoticeRepository

log = structlog.get_logger(__name__)


class NoticeService:
    """The single notice shown on the dashboard."""

    def __init__(self, notices: NoticeRepository):
        self._notices = notices

    def get_current(self) -> Optional[Notice]:
        return self._notices.get_current()

    def save(self, content: Any, operator: Any, *, now: datetime | None = None) -> Notice:
        now = now or datetime.now()
        updated_by = require_non_empty(operator, "Operator")
        text = str(content or "").strip()
        notice = self._notices.put_current(Notice(id="", content=text, updated_at=now, updated_by=updated_by))
        log.info("notice_saved", updated_by=updated_by, length=len(text))
        return notice
