"""SQLAlchemy-based price cache store"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence
from sqlalchemy import select, insert, delete
from sqlalchemy.engine import Connection, Engine

from ....domain.shared.market import (
    CacheEntry,
    Commodity,
    CommodityId,
    DemandLevel,
    PricePoint,
)
from ....ports.outbound.price_cache_store import IPriceCacheStore
from .models import cached_commodities, price_cache_entries, price_points

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _demand(value: Optional[str]) -> DemandLevel:
    try:
        return DemandLevel(value)
    except ValueError:
        return DemandLevel.NORMAL


class PriceCacheRepositorySQLAlchemy(IPriceCacheStore):
    """SQLAlchemy implementation of the price cache store"""

    def __init__(self, engine: Engine):
        self._engine = engine

    def load_entries(self) -> List[CacheEntry]:
        with self._engine.connect() as conn:
            entry_rows = conn.execute(
                select(price_cache_entries).order_by(price_cache_entries.c.commodity_id)
            ).fetchall()
            point_rows = conn.execute(
                select(price_points).order_by(
                    price_points.c.commodity_id,
                    price_points.c.location_id
                )
            ).fetchall()

        points: Dict[CommodityId, List[PricePoint]] = {}
        for row in point_rows:
            data = row._mapping
            points.setdefault(data['commodity_id'], []).append(
                PricePoint(
                    location_id=data['location_id'],
                    observed_at=_as_utc(data['observed_at']),
                    sell_price_per_scu=data['sell_price_per_scu'],
                    buy_price_per_scu=data['buy_price_per_scu'],
                    stock_scu=data['stock_scu'],
                    buy_stock_scu=data['buy_stock_scu'],
                    sell_demand=_demand(data['sell_demand']),
                    buy_demand=_demand(data['buy_demand']),
                    volatility=data['volatility'],
                    location_name=data['location_name'] or "",
                    system=data['system'],
                    armistice=bool(data['armistice'])
                )
            )

        entries = [
            CacheEntry(
                commodity_id=row._mapping['commodity_id'],
                points=tuple(points.get(row._mapping['commodity_id'], [])),
                fetched_at=_as_utc(row._mapping['fetched_at'])
            )
            for row in entry_rows
        ]
        logger.debug(f"Loaded {len(entries)} persisted price cache entries")
        return entries

    def save_entry(self, entry: CacheEntry) -> None:
        """
        Replace the stored points for one commodity in one transaction.

        Points are keyed by (commodity_id, location_id); a repeated location
        in one fetch keeps the last observation.
        """
        rows = {
            point.location_id: {
                'commodity_id': entry.commodity_id,
                'location_id': point.location_id,
                'observed_at': point.observed_at,
                'sell_price_per_scu': point.sell_price_per_scu,
                'buy_price_per_scu': point.buy_price_per_scu,
                'stock_scu': point.stock_scu,
                'buy_stock_scu': point.buy_stock_scu,
                'sell_demand': point.sell_demand.value,
                'buy_demand': point.buy_demand.value,
                'volatility': point.volatility,
                'location_name': point.location_name,
                'system': point.system,
                'armistice': point.armistice,
            }
            for point in entry.points
        }

        with self._engine.begin() as conn:
            self._delete(conn, entry.commodity_id)
            conn.execute(
                insert(price_cache_entries).values(
                    commodity_id=entry.commodity_id,
                    fetched_at=entry.fetched_at
                )
            )
            if rows:
                conn.execute(insert(price_points), list(rows.values()))

        logger.debug(f"Persisted {len(rows)} price points for {entry.commodity_id}")

    def delete_entries(self, commodity_id: Optional[CommodityId] = None) -> int:
        with self._engine.begin() as conn:
            deleted = self._delete(conn, commodity_id)
            if commodity_id is None:
                conn.execute(delete(cached_commodities))
        return deleted

    @staticmethod
    def _delete(conn: Connection, commodity_id: Optional[CommodityId]) -> int:
        # Points go first; the foreign key is not enforced on every backend
        points_stmt = delete(price_points)
        entries_stmt = delete(price_cache_entries)
        if commodity_id is not None:
            points_stmt = points_stmt.where(price_points.c.commodity_id == commodity_id)
            entries_stmt = entries_stmt.where(price_cache_entries.c.commodity_id == commodity_id)

        conn.execute(points_stmt)
        return conn.execute(entries_stmt).rowcount

    def load_commodities(self) -> Optional[tuple[tuple[Commodity, ...], datetime]]:
        with self._engine.connect() as conn:
            rows = conn.execute(
                select(cached_commodities).order_by(cached_commodities.c.commodity_id)
            ).fetchall()

        if not rows:
            return None

        commodities = tuple(
            Commodity(
                commodity_id=row._mapping['commodity_id'],
                name=row._mapping['name'],
                category=row._mapping['category'],
                code=row._mapping['code']
            )
            for row in rows
        )
        fetched_at = min(_as_utc(row._mapping['fetched_at']) for row in rows)
        return commodities, fetched_at

    def save_commodities(self, commodities: Sequence[Commodity], fetched_at: datetime) -> None:
        rows = {
            commodity.commodity_id: {
                'commodity_id': commodity.commodity_id,
                'name': commodity.name,
                'category': commodity.category,
                'code': commodity.code,
                'fetched_at': fetched_at,
            }
            for commodity in commodities
        }

        with self._engine.begin() as conn:
            conn.execute(delete(cached_commodities))
            if rows:
                conn.execute(insert(cached_commodities), list(rows.values()))

        logger.debug(f"Persisted {len(rows)} commodities")
