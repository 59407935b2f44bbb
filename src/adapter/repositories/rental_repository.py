"""SQLAlchemy implementations of RentalRepository and VehicleRepository"""

from typing import Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.domain.base import utc_now
from src.app.repositories.rental_repository import RentalRepository, VehicleRepository
from src.domain.rental import Rental
from src.domain.vehicle import Vehicle


class SqlAlchemyRentalRepository(RentalRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, rental_id: str, for_update: bool = False) -> Optional[Rental]:
        stmt = select(Rental).where(Rental.id == rental_id)

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_envelope_id(self, envelope_id: str, for_update: bool = False) -> Optional[Rental]:
        stmt = select(Rental).where(Rental.docusign_envelope_id == envelope_id)

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def update(self, rental: Rental) -> Rental:
        rental.updated_at = utc_now()
        self.session.add(rental)
        await self.session.flush()
        return rental


class SqlAlchemyVehicleRepository(VehicleRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, vehicle_id: str, for_update: bool = False) -> Optional[Vehicle]:
        stmt = select(Vehicle).where(Vehicle.id == vehicle_id)

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update(self, vehicle: Vehicle) -> Vehicle:
        vehicle.updated_at = utc_now()
        self.session.add(vehicle)
        await self.session.flush()
        return vehicle
