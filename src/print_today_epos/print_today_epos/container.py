from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .attendance.document_repository import DocumentTimeRecordRepository
from .attendance.report import AttendanceReportService
from .attendance.service import AttendanceService
from .contacts.document_repository import DocumentContactRepository
from .contacts.service import ContactService
from .database.connection import DBConfig, DatabaseConnection
from .database.document_store import DocumentStore
from .database.memory_store import InMemoryDocumentStore
from .database.mysql_document_store import MySQLDocumentStore
from .invoices.document_repository import DocumentCompanyProfileRepository, DocumentInvoiceRepository
from .invoices.service import InvoiceService
from .jobs.document_repository import DocumentJobSheetRepository
from .jobs.payments import PaymentService
from .jobs.service import JobSheetService
from .notices.document_repository import DocumentNoticeRepository
from .notices.service import NoticeService
from .quotations.document_repository import DocumentQuotationRepository
from .quotations.service import QuotationService
from .sequences.generator import SequenceGenerator
from .tasks.document_repository import DocumentTaskRepository, DocumentTaskTypeRepository
from .tasks.service import TaskService
from .transactions.document_repository import DocumentTransactionRepository
from .transactions.service import TransactionService


@dataclass(frozen=True)
class Container:
    store: DocumentStore
    sequences: SequenceGenerator

    time_records_repo: DocumentTimeRecordRepository
    job_sheets_repo: DocumentJobSheetRepository
    quotations_repo: DocumentQuotationRepository
    tasks_repo: DocumentTaskRepository
    task_types_repo: DocumentTaskTypeRepository
    transactions_repo: DocumentTransactionRepository
    invoices_repo: DocumentInvoiceRepository
    company_profiles_repo: DocumentCompanyProfileRepository
    contacts_repo: DocumentContactRepository
    notices_repo: DocumentNoticeRepository

    attendance_service: AttendanceService
    attendance_report_service: AttendanceReportService
    payment_service: PaymentService
    job_sheet_service: JobSheetService
    quotation_service: QuotationService
    task_service: TaskService
    transaction_service: TransactionService
    invoice_service: InvoiceService
    contact_service: ContactService
    notice_service: NoticeService


def build_store(*, backend: str = "mysql", db_config: Optional[Mapping[str, Any]] = None) -> DocumentStore:
    backend = (backend or "mysql").lower()
    if backend == "memory":
        return InMemoryDocumentStore()
    if backend == "mysql":
        conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config or {}))
        return MySQLDocumentStore(conn)
    raise ValueError(f"Unknown STORE_BACKEND: {backend!r}")


def build_container(
    *,
    db_config: Optional[Mapping[str, Any]] = None,
    backend: str = "mysql",
    store: Optional[DocumentStore] = None,
) -> Container:
    store = store or build_store(backend=backend, db_config=db_config)
    sequences = SequenceGenerator(store)

    time_records_repo = DocumentTimeRecordRepository(store)
    job_sheets_repo = DocumentJobSheetRepository(store)
    quotations_repo = DocumentQuotationRepository(store)
    tasks_repo = DocumentTaskRepository(store)
    task_types_repo = DocumentTaskTypeRepository(store)
    transactions_repo = DocumentTransactionRepository(store)
    invoices_repo = DocumentInvoiceRepository(store)
    company_profiles_repo = DocumentCompanyProfileRepository(store)
    contacts_repo = DocumentContactRepository(store)
    notices_repo = DocumentNoticeRepository(store)

    attendance_service = AttendanceService(time_records_repo)
    attendance_report_service = AttendanceReportService(attendance_service)
    payment_service = PaymentService(job_sheets_repo, transactions_repo, sequences)
    job_sheet_service = JobSheetService(
        job_sheets_repo,
        transactions_repo,
        quotations_repo,
        sequences,
        payment_service,
    )
    quotation_service = QuotationService(quotations_repo, job_sheet_service, sequences)
    task_service = TaskService(tasks_repo, task_types_repo, sequences)
    transaction_service = TransactionService(transactions_repo, job_sheets_repo, sequences, payment_service)
    invoice_service = InvoiceService(invoices_repo, company_profiles_repo, sequences)
    contact_service = ContactService(contacts_repo)
    notice_service = NoticeService(notices_repo)

    return Container(
        store=store,
        sequences=sequences,
        time_records_repo=time_records_repo,
        job_sheets_repo=job_sheets_repo,
        quotations_repo=quotations_repo,
        tasks_repo=tasks_repo,
        task_types_repo=task_types_repo,
        transactions_repo=transactions_repo,
        invoices_repo=invoices_repo,
        company_profiles_repo=company_profiles_repo,
        contacts_repo=contacts_repo,
        notices_repo=notices_repo,
        attendance_service=attendance_service,
        attendance_report_service=attendance_report_service,
        payment_service=payment_service,
        job_sheet_service=job_sheet_service,
        quotation_service=quotation_service,
        task_service=task_service,
        transaction_service=transaction_service,
        invoice_service=invoice_service,
        contact_service=contact_service,
        notice_service=notice_service,
    )
