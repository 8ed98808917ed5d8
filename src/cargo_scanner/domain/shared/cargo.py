"""Cargo manifest entity and value objects"""
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Optional

from .exceptions import InvalidParamsError, SubtractBeyondHeldError
from .market import CommodityId


@dataclass(frozen=True)
class CargoItem:
    """One held commodity in the trader's hold"""
    commodity_id: CommodityId
    quantity_scu: float

    def __post_init__(self):
        if not self.commodity_id:
            raise ValueError("Cargo commodity_id cannot be empty")
        if self.quantity_scu < 0:
            raise ValueError("Cargo quantity cannot be negative")


class AdjustOutcome(Enum):
    """What an adjustment did to the cargo set"""
    ADDED = "ADDED"
    UPDATED = "UPDATED"
    REMOVED = "REMOVED"
    UNCHANGED = "UNCHANGED"
    REJECTED = "REJECTED"


@dataclass(frozen=True)
class CargoAdjustment:
    """Result of applying a signed SCU delta to one commodity"""
    commodity_id: CommodityId
    delta_scu: float
    outcome: AdjustOutcome
    quantity_scu: float              # Held quantity after the adjustment
    reason: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.outcome is not AdjustOutcome.REJECTED


class CargoManifest:
    """
    Cargo manifest aggregate - the set of commodities the trader holds

    Invariants:
    - At most one CargoItem per commodity
    - Held quantities are always > 0; an item that reaches <= 0 is removed
    - Subtracting from a commodity that is not held is rejected and
      leaves the manifest unchanged
    """

    def __init__(self, items: Optional[Iterable[CargoItem]] = None):
        self._quantities: Dict[CommodityId, float] = {}
        for item in items or ():
            if item.commodity_id in self._quantities:
                raise ValueError(f"Duplicate cargo item for {item.commodity_id}")
            if item.quantity_scu > 0:
                self._quantities[item.commodity_id] = float(item.quantity_scu)

    @property
    def items(self) -> tuple[CargoItem, ...]:
        return tuple(
            CargoItem(commodity_id=commodity_id, quantity_scu=quantity)
            for commodity_id, quantity in self._quantities.items()
        )

    @property
    def commodity_ids(self) -> tuple[CommodityId, ...]:
        return tuple(self._quantities)

    def quantity_of(self, commodity_id: CommodityId) -> float:
        """Held SCU for a commodity (0.0 if not held)"""
        return self._quantities.get(commodity_id, 0.0)

    def is_empty(self) -> bool:
        return not self._quantities

    def __contains__(self, commodity_id: object) -> bool:
        return commodity_id in self._quantities

    def __len__(self) -> int:
        return len(self._quantities)

    def adjust(self, commodity_id: CommodityId, delta_scu: float) -> CargoAdjustment:
        """
        Apply a signed SCU delta to a commodity.

        Args:
            commodity_id: Commodity to adjust
            delta_scu: Positive to add, negative to subtract

        Returns:
            CargoAdjustment describing the new state

        Raises:
            InvalidParamsError: If delta is not a finite number
            SubtractBeyondHeldError: If delta is negative and the commodity is not held
        """
        if not commodity_id:
            raise InvalidParamsError("commodity_id cannot be empty")
        if isinstance(delta_scu, bool) or not isinstance(delta_scu, (int, float)) \
                or not math.isfinite(delta_scu):
            raise InvalidParamsError(f"delta_scu must be a finite number, got {delta_scu!r}")

        current = self._quantities.get(commodity_id)
        if delta_scu == 0:
            # No-op: a held item keeps its quantity, an absent one is not created
            if current is None:
                return CargoAdjustment(commodity_id, delta_scu, AdjustOutcome.UNCHANGED, 0.0)
            return CargoAdjustment(commodity_id, delta_scu, AdjustOutcome.UPDATED, current)

        if current is None:
            if delta_scu < 0:
                raise SubtractBeyondHeldError(commodity_id, delta_scu)
            self._quantities[commodity_id] = float(delta_scu)
            return CargoAdjustment(commodity_id, delta_scu, AdjustOutcome.ADDED, float(delta_scu))

        new_total = current + delta_scu
        if new_total <= 0:
            del self._quantities[commodity_id]
            return CargoAdjustment(commodity_id, delta_scu, AdjustOutcome.REMOVED, 0.0)

        self._quantities[commodity_id] = new_total
        return CargoAdjustment(commodity_id, delta_scu, AdjustOutcome.UPDATED, new_total)

    def clear(self, commodity_id: Optional[CommodityId] = None) -> int:
        """Remove one commodity (or all of them); returns the number of items removed"""
        if commodity_id is None:
            removed = len(self._quantities)
            self._quantities.clear()
            return removed
        return 1 if self._quantities.pop(commodity_id, None) is not None else 0

    def __repr__(self) -> str:
        return f"CargoManifest({len(self)} items)"
