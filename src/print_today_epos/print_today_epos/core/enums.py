from __future__ import annotations

from enum import Enum


class Operator(str, Enum):
    """Staff codes allowed to operate the till and job boards."""

    PTMGH = "PTMGH"
    PTASAD = "PTASAD"
    PTM = "PTM"
    PTITADMIN = "PTITAdmin"
    PTASH = "PTASH"
    PTRK = "PTRK"


class TimeRecordStatus(str, Enum):
    """Persisted status of a daily attendance record."""

    CLOCKED_IN = "clocked-in"
    ON_BREAK = "on-break"
    CLOCKED_OUT = "clocked-out"


class JobSheetStatus(str, Enum):
    HOLD = "Hold"
    STUDIO = "Studio"
    PRODUCTION = "Production"
    FINISHING = "Finishing"
    CANCEL = "Cancel"
    READY_PICKUP = "Ready Pickup"
    PARCEL_COMPARE = "Parcel Compare"
    DELIVERED = "Delivered"
    MGH = "MGH"
    OS = "OS"


class QuotationStatus(str, Enum):
    SENT = "Sent"
    HOLD = "Hold"
    WFR = "WFR"
    APPROVED = "Approved"
    DECLINED = "Declined"


class JobSheetType(str, Enum):
    INVOICE = "Invoice"
    QUOTATION = "Quotation"
    NA = "N/A"
    STR = "STR"
    AIR = "AIR"


class PaymentStatus(str, Enum):
    UNPAID = "Unpaid"
    PARTIALLY_PAID = "Partially Paid"
    PAID = "Paid"


class PaymentMethod(str, Enum):
    BANK_TRANSFER = "Bank Transfer"
    CARD_PAYMENT = "Card Payment"
    CASH = "Cash"
    ST_BANK_TRANSFER = "ST Bank Transfer"
    AIR_BANK_TRANSFER = "AIR Bank Transfer"


BANK_PAYMENT_METHODS = frozenset(
    {PaymentMethod.BANK_TRANSFER, PaymentMethod.ST_BANK_TRANSFER, PaymentMethod.AIR_BANK_TRANSFER}
)


class TransactionType(str, Enum):
    INVOICING = "invoicing"
    NON_INVOICING = "non-invoicing"


class TaskStatus(str, Enum):
    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    DONE = "Done"
    CANCELLED = "Cancelled"


class AuditAction(str, Enum):
    """Labels used on history entries."""

    CREATED = "Created"
    UPDATED = "Updated"
    STATUS_CHANGE = "Status Change"
    NOTE_ADDED = "Note Added"
    CONVERTED = "Converted"
    UNLOCKED = "Unlocked"


class InvoiceStatus(str, Enum):
    DRAFT = "Draft"
    SENT = "Sent"
    PAID = "Paid"


class DiscountType(str, Enum):
    AMOUNT = "amount"
    PERCENTAGE = "percentage"
