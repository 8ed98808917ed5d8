import logging
from dataclasses import dataclass

from ....domain.shared.cargo import AdjustOutcome, CargoAdjustment
from ....domain.shared.exceptions import SubtractBeyondHeldError
from ....mediator import Request, RequestHandler
from ....ports.outbound.cargo_repository import ICargoRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdjustCargoCommand(Request[CargoAdjustment]):
    """Command to add (positive delta) or subtract (negative delta) held SCU"""
    commodity_id: str
    delta_scu: float


class AdjustCargoHandler(RequestHandler[AdjustCargoCommand, CargoAdjustment]):
    """Handler applying a cargo adjustment and persisting the manifest"""

    def __init__(self, cargo_repository: ICargoRepository):
        self._cargo_repo = cargo_repository

    async def handle(self, request: AdjustCargoCommand) -> CargoAdjustment:
        """
        Apply the delta to the stored manifest.

        Load, adjust and save happen in one repository transaction.
        Subtracting from a commodity that is not held is reported as a
        REJECTED adjustment and nothing is saved.

        Raises:
            InvalidParamsError: If the delta is not a finite number
        """
        try:
            adjustment = self._cargo_repo.update_manifest(
                lambda manifest: manifest.adjust(request.commodity_id, request.delta_scu)
            )
        except SubtractBeyondHeldError as e:
            logger.warning(str(e))
            return CargoAdjustment(
                commodity_id=request.commodity_id,
                delta_scu=request.delta_scu,
                outcome=AdjustOutcome.REJECTED,
                quantity_scu=0.0,
                reason=str(e)
            )

        logger.info(
            f"Cargo {adjustment.outcome.value.lower()}: {adjustment.commodity_id} "
            f"({request.delta_scu:+g} SCU, now {adjustment.quantity_scu:g})"
        )
        return adjustment
