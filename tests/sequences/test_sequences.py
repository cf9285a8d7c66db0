from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from src.print_today_epos.print_today_epos.core.constants import (
    COUNTER_JOB_SHEETS,
    COUNTER_QUOTATIONS,
    JOB_SHEET_ID_FORMAT,
    QUOTATION_ID_FORMAT,
    TASK_ID_FORMAT,
)
from src.print_today_epos.print_today_epos.core.exceptions import PersistenceError
from src.print_today_epos.print_today_epos.database.memory_store import InMemoryDocumentStore
from src.print_today_epos.print_today_epos.sequences.generator import SequenceGenerator, format_human_id


def test_format_human_id_pads_and_overflows():
    assert format_human_id("JID", 7, 4) == "JID0007"
    assert format_human_id("TSK", 12, TASK_ID_FORMAT[1]) == "TSK012"
    assert format_human_id("TSK", 1000, 3) == "TSK1000"


def test_counters_are_independent():
    gen = SequenceGenerator(InMemoryDocumentStore())

    jobs = [gen.next_human_id(COUNTER_JOB_SHEETS, JOB_SHEET_ID_FORMAT) for _ in range(2)]
    quotes = [gen.next_human_id(COUNTER_QUOTATIONS, QUOTATION_ID_FORMAT) for _ in range(3)]

    assert jobs == ["JID0001", "JID0002"]
    assert quotes == ["QU0001", "QU0002", "QU0003"]


def test_concurrent_callers_never_share_a_number():
    gen = SequenceGenerator(InMemoryDocumentStore())

    with ThreadPoolExecutor(max_workers=8) as pool:
        values = list(pool.map(lambda _: gen.next_id("tasks"), range(200)))

    assert sorted(values) == list(range(1, 201))


def test_store_failure_is_propagated():
    class BrokenStore:
        def increment_counter(self, name):
            raise PersistenceError("connection lost")

    gen = SequenceGenerator(BrokenStore())

    with pytest.raises(PersistenceError):
        gen.next_id("jobSheets")


def test_empty_counter_name_is_rejected():
    with pytest.raises(ValueError):
        SequenceGenerator(InMemoryDocumentStore()).next_id("")
