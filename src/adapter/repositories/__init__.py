from .ledger_repository import SqlAlchemyLedgerRepository
from .payment_repository import (
    SqlAlchemyPaymentRepository,
    SqlAlchemyPaymentApplicationRepository,
)
from .rental_repository import SqlAlchemyRentalRepository, SqlAlchemyVehicleRepository
from .tenant_repository import SqlAlchemyTenantRepository
from .customer_repository import (
    SqlAlchemyCustomerRepository,
    SqlAlchemyCustomerUserRepository,
    SqlAlchemyCustomerDocumentRepository,
)
from .invoice_repository import SqlAlchemyInvoiceRepository
from .installment_repository import SqlAlchemyInstallmentRepository
from .identity_verification_repository import SqlAlchemyIdentityVerificationRepository
from .dashboard_repository import SqlAlchemyDashboardRepository

__all__ = [
    "SqlAlchemyLedgerRepository",
    "SqlAlchemyPaymentRepository",
    "SqlAlchemyPaymentApplicationRepository",
    "SqlAlchemyRentalRepository",
    "SqlAlchemyVehicleRepository",
    "SqlAlchemyTenantRepository",
    "SqlAlchemyCustomerRepository",
    "SqlAlchemyCustomerUserRepository",
    "SqlAlchemyCustomerDocumentRepository",
    "SqlAlchemyInvoiceRepository",
    "SqlAlchemyInstallmentRepository",
    "SqlAlchemyIdentityVerificationRepository",
    "SqlAlchemyDashboardRepository",
]
