"""Cargo repository port interface"""
from abc import ABC, abstractmethod
from typing import Callable, Optional, TypeVar

from ...domain.shared.cargo import CargoManifest
from ...domain.valuation.profitability import ProfitabilityParams

T = TypeVar("T")


class ICargoRepository(ABC):
    """Port interface for cargo manifest and profitability settings persistence"""

    @abstractmethod
    def load_manifest(self) -> CargoManifest:
        """
        Load the persisted cargo manifest.

        Returns:
            CargoManifest (empty if nothing was saved)
        """
        pass

    @abstractmethod
    def save_manifest(self, manifest: CargoManifest) -> None:
        """
        Replace the persisted cargo set with the manifest's items atomically.

        Args:
            manifest: Manifest to persist
        """
        pass

    @abstractmethod
    def update_manifest(self, change: Callable[[CargoManifest], T]) -> T:
        """
        Load, change and save the manifest as one atomic unit.

        If change raises, nothing is saved and the exception propagates.

        Args:
            change: Callable applied to the loaded manifest

        Returns:
            Whatever change returns
        """
        pass

    @abstractmethod
    def load_profitability_params(self) -> Optional[ProfitabilityParams]:
        """
        Load saved profitability params.

        Returns:
            ProfitabilityParams or None if never saved
        """
        pass

    @abstractmethod
    def save_profitability_params(self, params: ProfitabilityParams) -> None:
        """
        Persist profitability params, replacing any saved values.

        Args:
            params: Params to persist
        """
        pass
