from __future__ import annotations

from datetime import datetime

import pytest

from src.print_today_epos.print_today_epos.core.exceptions import ValidationError


def test_no_notice_until_one_is_saved(container):
    assert container.notice_service.get_current() is None


def test_saving_replaces_the_current_notice(container):
    svc = container.notice_service
    svc.save("Shop closes at 3pm on Friday", "PTM", now=datetime(2026, 3, 2, 9, 0))
    svc.save("  Stock take on Monday  ", "PTASH", now=datetime(2026, 3, 3, 9, 0))

    notice = svc.get_current()

    assert notice.content == "Stock take on Monday"
    assert notice.updated_by == "PTASH"
    assert notice.updated_at == datetime(2026, 3, 3, 9, 0)
    assert len(container.store.query("notices")) == 1


def test_notice_needs_an_author(container):
    with pytest.raises(ValidationError):
        container.notice_service.save("Hello", "")
