from __future__ import annotations

from typing import Optional, Protocol

from .model import Notice


class NoticeRepository(Protocol):
    def get_current(self) -> Optional[Notice]:
        raise NotImplementedError

    def put_current(self, notice: Notice) -> Notice:
        """Replace the current notice, creating it on first use."""

        raise NotImplementedError
