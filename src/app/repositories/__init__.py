from .ledger_repository import LedgerRepository
from .payment_repository import PaymentRepository, PaymentApplicationRepository
from .rental_repository import RentalRepository, VehicleRepository
from .tenant_repository import TenantRepository
from .customer_repository import (
    CustomerRepository,
    CustomerUserRepository,
    CustomerDocumentRepository,
)
from .invoice_repository import InvoiceRepository
from .installment_repository import InstallmentRepository
from .identity_verification_repository import IdentityVerificationRepository
from .dashboard_repository import DashboardRepository

__all__ = [
    "LedgerRepository",
    "PaymentRepository",
    "PaymentApplicationRepository",
    "RentalRepository",
    "VehicleRepository",
    "TenantRepository",
    "CustomerRepository",
    "CustomerUserRepository",
    "CustomerDocumentRepository",
    "InvoiceRepository",
    "InstallmentRepository",
    "IdentityVerificationRepository",
    "DashboardRepository",
]
