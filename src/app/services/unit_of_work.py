from abc import ABC, abstractmethod


class UnitOfWork(ABC):
    """
    Transaction boundary for a use case

    Repositories share the unit of work's session; nothing is durable until
    commit() is called.
    """

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
