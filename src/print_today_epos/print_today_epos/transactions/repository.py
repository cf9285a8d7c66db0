from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Transaction


class TransactionRepository(Protocol):
    def get(self, id: str) -> Optional[Transaction]:
        raise NotImplementedError

    def get_by_transaction_id(self, transaction_id: str) -> Optional[Transaction]:
        raise NotImplementedError

    def list_for_job(self, job_id: str) -> Sequence[Transaction]:
        raise NotImplementedError

    def list_recent(self, limit: Optional[int] = None) -> Sequence[Transaction]:
        """Newest first by creation time."""

        raise NotImplementedError

    def list_pending(self) -> Sequence[Transaction]:
        """Unchecked transactions, oldest first."""

        raise NotImplementedError

    def list_by_type(self, type_: str) -> Sequence[Transaction]:
        raise NotImplementedError

    def create(self, transaction: Transaction) -> Transaction:
        raise NotImplementedError

    def save(self, transaction: Transaction) -> Transaction:
        raise NotImplementedError

    def set_job(self, id: str, job_id: Optional[str]) -> Transaction:
        """Point the transaction at another job sheet (or none)."""

        raise NotImplementedError

    def delete(self, id: str) -> bool:
        raise NotImplementedError
