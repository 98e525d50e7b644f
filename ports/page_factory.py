"""Interface for building pages from raw listing data."""
from abc import ABC, abstractmethod
from typing import Any

from domain.pagination import Page


class PageFactory(ABC):
    """
    Builds a navigable Page from the raw data of one listing response.

    Implementation examples: HAL listings (_links/_embedded), plain arrays.
    """

    @abstractmethod
    def create_page(self, data: Any) -> Page:
        """
        Wrap one page of raw listing data.

        Args:
            data: Listing data exactly as returned by the transport.

        Returns:
            Immutable Page with items and pagination links.

        Raises:
            AdapterError: If the data is not a listing.
        """
        pass
