"""Rental and Vehicle Repository Interfaces"""

from abc import ABC, abstractmethod
from typing import Optional
from src.domain.rental import Rental
from src.domain.vehicle import Vehicle


class RentalRepository(ABC):
    """
    Repository interface for Rental persistence

    Rentals are locked before status transitions so that a cancellation
    and an activation cannot interleave.
    """

    @abstractmethod
    async def get_by_id(self, rental_id: str, for_update: bool = False) -> Optional[Rental]:
        """
        Retrieve rental by ID with optional row-level locking

        Args:
            rental_id: Rental ID
            for_update: If True, locks the row with SELECT FOR UPDATE

        Returns:
            Rental if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_envelope_id(self, envelope_id: str, for_update: bool = False) -> Optional[Rental]:
        """
        Retrieve rental by its signing provider envelope/document id

        Args:
            envelope_id: Provider envelope id
            for_update: If True, locks the row with SELECT FOR UPDATE

        Returns:
            Rental if found, None otherwise
        """
        pass

    @abstractmethod
    async def update(self, rental: Rental) -> Rental:
        pass


class VehicleRepository(ABC):
    """Repository interface for Vehicle persistence"""

    @abstractmethod
    async def get_by_id(self, vehicle_id: str, for_update: bool = False) -> Optional[Vehicle]:
        pass

    @abstractmethod
    async def update(self, vehicle: Vehicle) -> Vehicle:
        pass
