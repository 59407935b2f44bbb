"""Billing domain use cases"""
from .apply_payment import ApplyPayment
from .get_customer_balance import GetOutstandingBalance, GetCustomerBalance
from .get_invoice_status import GetInvoiceStatus, GenerateInvoicePdf
from .reconcile_allocations import ReconcileAllocations
from .ledger_rules import (
    BalanceStatus,
    AllocationConflict,
    plan_allocations,
    classify_balance,
    compute_invoice_status,
)
from .dtos import (
    ApplyPaymentCommandDTO,
    ApplyPaymentResponseDTO,
    AllocationDTO,
    OutstandingBalanceDTO,
    CustomerBalanceDTO,
    InvoiceStatusDTO,
    InvoicePdfDTO,
    AllocationDiscrepancyDTO,
    ReconciliationResultDTO,
)

__all__ = [
    "ApplyPayment",
    "GetOutstandingBalance",
    "GetCustomerBalance",
    "GetInvoiceStatus",
    "GenerateInvoicePdf",
    "ReconcileAllocations",
    "BalanceStatus",
    "AllocationConflict",
    "plan_allocations",
    "classify_balance",
    "compute_invoice_status",
    "ApplyPaymentCommandDTO",
    "ApplyPaymentResponseDTO",
    "AllocationDTO",
    "OutstandingBalanceDTO",
    "CustomerBalanceDTO",
    "InvoiceStatusDTO",
    "InvoicePdfDTO",
    "AllocationDiscrepancyDTO",
    "ReconciliationResultDTO",
]
