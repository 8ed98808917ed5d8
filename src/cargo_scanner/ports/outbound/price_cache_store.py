"""Price cache store port interface"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Sequence

from ...domain.shared.market import CacheEntry, Commodity, CommodityId


class IPriceCacheStore(ABC):
    """Port interface for persisting price cache contents between runs"""

    @abstractmethod
    def load_entries(self) -> List[CacheEntry]:
        """
        Load every persisted cache entry with its original fetched_at.

        Returns:
            List of CacheEntry (empty if nothing was saved)
        """
        pass

    @abstractmethod
    def save_entry(self, entry: CacheEntry) -> None:
        """
        Replace the persisted point set for the entry's commodity.

        Args:
            entry: Entry to persist
        """
        pass

    @abstractmethod
    def delete_entries(self, commodity_id: Optional[CommodityId] = None) -> int:
        """
        Delete one commodity's entry, or every entry and the commodities list.

        Returns:
            Number of price entries deleted
        """
        pass

    @abstractmethod
    def load_commodities(self) -> Optional[tuple[tuple[Commodity, ...], datetime]]:
        """
        Load the persisted commodities list.

        Returns:
            (commodities, fetched_at) or None if never saved
        """
        pass

    @abstractmethod
    def save_commodities(self, commodities: Sequence[Commodity], fetched_at: datetime) -> None:
        """Replace the persisted commodities list"""
        pass
