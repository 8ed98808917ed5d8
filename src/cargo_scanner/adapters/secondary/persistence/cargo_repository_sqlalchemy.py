"""SQLAlchemy-based cargo repository"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional, TypeVar
from sqlalchemy import select, insert, delete
from sqlalchemy.engine import Connection, Engine

from ....domain.shared.cargo import CargoItem, CargoManifest
from ....domain.valuation.profitability import ProfitabilityParams
from ....ports.outbound.cargo_repository import ICargoRepository
from .models import cargo_items, profitability_settings

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_ID = "default"

T = TypeVar("T")


class CargoRepositorySQLAlchemy(ICargoRepository):
    """SQLAlchemy implementation of the cargo repository"""

    def __init__(self, engine: Engine, settings_id: str = DEFAULT_SETTINGS_ID):
        self._engine = engine
        self._settings_id = settings_id

    def load_manifest(self) -> CargoManifest:
        with self._engine.connect() as conn:
            return self._read_manifest(conn)

    def save_manifest(self, manifest: CargoManifest) -> None:
        """
        Replace the stored cargo set in one transaction.

        Readers on other connections see either the old or the new set.
        """
        with self._engine.begin() as conn:
            self._write_manifest(conn, manifest)

    def update_manifest(self, change: Callable[[CargoManifest], T]) -> T:
        """
        Read, change and write the manifest inside one transaction.

        On SQLite a concurrent writer that committed in between makes this
        transaction fail instead of silently overwriting its update.
        """
        with self._engine.begin() as conn:
            manifest = self._read_manifest(conn)
            result = change(manifest)
            self._write_manifest(conn, manifest)
        return result

    @staticmethod
    def _read_manifest(conn: Connection) -> CargoManifest:
        stmt = select(cargo_items).order_by(cargo_items.c.commodity_id)
        rows = conn.execute(stmt).fetchall()

        return CargoManifest(
            CargoItem(
                commodity_id=row._mapping['commodity_id'],
                quantity_scu=row._mapping['quantity_scu']
            )
            for row in rows
        )

    @staticmethod
    def _write_manifest(conn: Connection, manifest: CargoManifest) -> None:
        now = datetime.now(timezone.utc)
        rows = [
            {
                'commodity_id': item.commodity_id,
                'quantity_scu': item.quantity_scu,
                'updated_at': now,
            }
            for item in manifest.items
        ]

        conn.execute(delete(cargo_items))
        if rows:
            conn.execute(insert(cargo_items), rows)

        logger.debug(f"Saved cargo manifest with {len(rows)} items")

    def load_profitability_params(self) -> Optional[ProfitabilityParams]:
        with self._engine.connect() as conn:
            stmt = select(profitability_settings).where(
                profitability_settings.c.settings_id == self._settings_id
            )
            row = conn.execute(stmt).fetchone()

        if not row:
            return None

        data = row._mapping
        return ProfitabilityParams(
            risk_pct=data['risk_pct'],
            crew_hourly=data['crew_hourly'],
            crew_size=int(data['crew_size']),
            time_minutes=data['time_minutes']
        )

    def save_profitability_params(self, params: ProfitabilityParams) -> None:
        with self._engine.begin() as conn:
            conn.execute(
                delete(profitability_settings).where(
                    profitability_settings.c.settings_id == self._settings_id
                )
            )
            conn.execute(
                insert(profitability_settings).values(
                    settings_id=self._settings_id,
                    risk_pct=params.risk_pct,
                    crew_hourly=params.crew_hourly,
                    crew_size=params.crew_size,
                    time_minutes=params.time_minutes,
                    updated_at=datetime.now(timezone.utc)
                )
            )
        logger.info(f"Saved profitability params: {params}")
