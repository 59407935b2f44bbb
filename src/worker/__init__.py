"""Background workers for the rental ledger service"""
from .installment_processor import InstallmentProcessorWorker
from .allocation_reconciler import AllocationReconcilerWorker

__all__ = ["InstallmentProcessorWorker", "AllocationReconcilerWorker"]
