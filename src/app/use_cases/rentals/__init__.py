"""Rental use cases"""
from .cancel_rental import CancelRental
from .dtos import (
    RefundType,
    RefundOutcomeType,
    CancelRentalCommandDTO,
    RefundOutcomeDTO,
    CancelRentalResponseDTO,
)

__all__ = [
    "CancelRental",
    "RefundType",
    "RefundOutcomeType",
    "CancelRentalCommandDTO",
    "RefundOutcomeDTO",
    "CancelRentalResponseDTO",
]
