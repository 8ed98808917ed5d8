"""Price feed port interface"""
from abc import ABC, abstractmethod
from typing import List

from ...domain.shared.market import Commodity, CommodityId, PricePoint


class IPriceFeed(ABC):
    """Port for the upstream commodity price feed"""

    @abstractmethod
    def fetch_commodities(self) -> List[Commodity]:
        """
        Fetch the list of tradeable commodities.

        Raises:
            PriceFeedError: If the feed cannot be reached or returns an error
        """
        pass

    @abstractmethod
    def fetch_prices(self, commodity_id: CommodityId) -> List[PricePoint]:
        """
        Fetch current price points for a commodity across all locations.

        Args:
            commodity_id: Commodity identifier

        Returns:
            List of PricePoint value objects (possibly empty)

        Raises:
            PriceFeedError: If the feed cannot be reached or returns an error
        """
        pass
