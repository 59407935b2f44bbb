"""Installment use cases"""
from .get_installment_options import GetInstallmentOptions
from .create_installment_plan import CreateInstallmentPlan
from .process_installment import ProcessInstallment
from .reconcile_installment_charge import ReconcileInstallmentCharge
from .retry_installment import RetryInstallment, MarkOverdueInstallments
from .dtos import (
    PriceBreakdownDTO,
    GetInstallmentOptionsCommandDTO,
    InstallmentOptionDTO,
    InstallmentOptionsDTO,
    CreateInstallmentPlanCommandDTO,
    ScheduledInstallmentDTO,
    InstallmentPlanDTO,
    ProcessInstallmentResultDTO,
    MarkOverdueResultDTO,
    InstallmentRunResultDTO,
)

__all__ = [
    "GetInstallmentOptions",
    "CreateInstallmentPlan",
    "ProcessInstallment",
    "ReconcileInstallmentCharge",
    "RetryInstallment",
    "MarkOverdueInstallments",
    "PriceBreakdownDTO",
    "GetInstallmentOptionsCommandDTO",
    "InstallmentOptionDTO",
    "InstallmentOptionsDTO",
    "CreateInstallmentPlanCommandDTO",
    "ScheduledInstallmentDTO",
    "InstallmentPlanDTO",
    "ProcessInstallmentResultDTO",
    "MarkOverdueResultDTO",
    "InstallmentRunResultDTO",
]
