from abc import ABC, abstractmethod


class DocumentStorageError(Exception):
    pass


class DocumentStorage(ABC):
    """Binary document store exposing stored files by public URL"""

    @abstractmethod
    async def save(self, path: str, content: bytes, content_type: str = "application/pdf") -> str:
        """
        Store a document

        Args:
            path: Storage key, e.g. "agreements/<tenant>/<file>.pdf"
            content: File bytes
            content_type: MIME type

        Returns:
            Public URL of the stored document

        Raises:
            DocumentStorageError: write failed
        """
        pass
