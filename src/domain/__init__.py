from .base import BaseModel, generate_uuid
from .tenant import Tenant
from .customer import Customer, CustomerUser, CustomerNotification, CustomerDocument
from .vehicle import Vehicle, VehicleStatus
from .rental import Rental, RentalStatus, DocumentStatus
from .ledger_entry import LedgerEntry, EntryType, ChargeCategory
from .payment import (
    Payment,
    PaymentApplication,
    PaymentStatus,
    CaptureStatus,
    PaymentType,
)
from .invoice import Invoice, InvoiceStatus
from .installment import (
    InstallmentConfig,
    InstallmentPlan,
    ScheduledInstallment,
    PlanType,
    PlanStatus,
    SplitBasis,
    InstallmentStatus,
)
from .identity_verification import IdentityVerification

__all__ = [
    "BaseModel",
    "generate_uuid",
    "Tenant",
    "Customer",
    "CustomerUser",
    "CustomerNotification",
    "CustomerDocument",
    "Vehicle",
    "VehicleStatus",
    "Rental",
    "RentalStatus",
    "DocumentStatus",
    "LedgerEntry",
    "EntryType",
    "ChargeCategory",
    "Payment",
    "PaymentApplication",
    "PaymentStatus",
    "CaptureStatus",
    "PaymentType",
    "Invoice",
    "InvoiceStatus",
    "InstallmentConfig",
    "InstallmentPlan",
    "ScheduledInstallment",
    "PlanType",
    "PlanStatus",
    "SplitBasis",
    "InstallmentStatus",
    "IdentityVerification",
]
