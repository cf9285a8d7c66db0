"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

VAT_RATE = Decimal("0.20")

# Counter names (one counter document per counted entity type).
COUNTER_JOB_SHEETS = "jobSheets"
COUNTER_QUOTATIONS = "quotations"
COUNTER_TASKS = "tasks"
COUNTER_TRANSACTIONS = "transactions"
COUNTER_INVOICES = "invoices"

# Human id formats: (prefix, zero padded width).
JOB_SHEET_ID_FORMAT = ("JID", 4)
QUOTATION_ID_FORMAT = ("QU", 4)
TASK_ID_FORMAT = ("TSK", 3)
TRANSACTION_ID_FORMAT = ("TID", 4)
INVOICE_ID_FORMAT = ("Inv-", 5)

# Collections in the document store.
COLLECTION_TIME_RECORDS = "timeRecords"
COLLECTION_JOB_SHEETS = "jobSheets"
COLLECTION_QUOTATIONS = "quotations"
COLLECTION_TASKS = "tasks"
COLLECTION_TASK_TYPES = "taskTypes"
COLLECTION_TRANSACTIONS = "transactions"
COLLECTION_INVOICES = "invoices"
COLLECTION_COMPANY_PROFILES = "companyProfiles"
COLLECTION_CONTACTS = "contacts"
COLLECTION_NOTICES = "notices"

# The dashboard shows a single notice kept under a fixed id.
CURRENT_NOTICE_ID = "current"

SYSTEM_OPERATOR = "System"

DEFAULT_SEARCH_LIMIT = 50
DEFAULT_TRANSACTION_SEARCH_WINDOW = 500
DEFAULT_TASK_LIST_LIMIT = 50
INVOICE_PAYMENT_TERMS_DAYS = 30
