import logging
import math
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import requests

from ....domain.shared.exceptions import PriceFeedError
from ....domain.shared.market import Commodity, CommodityId, DemandLevel, PricePoint
from ....ports.outbound.price_feed import IPriceFeed
from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

# status_sell / status_buy codes reported by the feed
_DEMAND_BY_STATUS = {
    3: DemandLevel.HIGH,
    2: DemandLevel.NORMAL,
    1: DemandLevel.LOW,
    0: DemandLevel.UNAVAILABLE,
}


class UexPriceFeed(IPriceFeed):
    """
    UEX commodity price feed client with rate limiting

    Rate limit: 2 requests/second (token bucket)
    Automatic retry on 429 errors and transport failures
    """

    BASE_URL = "https://api.uexcorp.uk/2.0"
    USER_AGENT = "cargo-scanner/0.1.0"
    MAX_RETRIES = 3
    TIMEOUT_SECONDS = 10.0

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        rate_limiter: Optional[RateLimiter] = None,
        clock: Optional[Callable[[], datetime]] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        self._base_url = (base_url or self.BASE_URL).rstrip("/")
        self._session = session or requests.Session()
        self._session.headers.update({
            "User-Agent": self.USER_AGENT,
            "Accept": "application/json"
        })
        if token:
            self._session.headers["Authorization"] = f"Bearer {token}"
        self._rate_limiter = rate_limiter or RateLimiter(max_requests=2, time_window=1.0)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._sleep = sleep

    def _request(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Make rate-limited GET request with retry and unwrap the response envelope"""
        url = f"{self._base_url}/{endpoint.lstrip('/')}"

        for attempt in range(self.MAX_RETRIES):
            self._rate_limiter.acquire()
            try:
                response = self._session.get(url, params=params, timeout=self.TIMEOUT_SECONDS)

                if response.status_code == 429:
                    # Rate limited - exponential backoff
                    wait_time = (2 ** attempt) * 1.0
                    logger.warning(f"Rate limited by price feed, waiting {wait_time}s")
                    self._sleep(wait_time)
                    continue

                if not response.ok:
                    logger.error(f"Price feed error {response.status_code}: {response.text[:200]}")

                response.raise_for_status()
                payload = response.json()
                break

            except requests.exceptions.JSONDecodeError as e:
                raise PriceFeedError(f"Invalid JSON from {endpoint}: {e}") from e
            except requests.exceptions.RequestException as e:
                if attempt == self.MAX_RETRIES - 1:
                    raise PriceFeedError(f"Request to {endpoint} failed: {e}") from e
                logger.warning(f"Price feed request failed, retrying: {e}")
                self._sleep(1.0)
        else:
            raise PriceFeedError(f"Request to {endpoint} failed after {self.MAX_RETRIES} attempts")

        return self._unwrap(endpoint, payload)

    @staticmethod
    def _unwrap(endpoint: str, payload: Any) -> Any:
        if not isinstance(payload, dict):
            raise PriceFeedError(f"Unexpected payload from {endpoint}")

        status = str(payload.get("status", ""))
        if status.lower() != "ok":
            raise PriceFeedError(payload.get("message") or status or f"Unknown error from {endpoint}")
        if "data" not in payload or payload["data"] is None:
            raise PriceFeedError(f"Response from {endpoint} is missing data")

        return payload["data"]

    def fetch_commodities(self) -> List[Commodity]:
        rows = self._request("commodities")
        commodities = []
        for row in _as_rows(rows):
            if row.get("id") is None or not row.get("name"):
                continue
            commodities.append(Commodity(
                commodity_id=str(row["id"]),
                name=str(row["name"]),
                category=row.get("kind") or "Unknown",
                code=row.get("code")
            ))
        logger.info(f"Fetched {len(commodities)} commodities")
        return commodities

    def fetch_prices(self, commodity_id: CommodityId) -> List[PricePoint]:
        rows = self._request("commodities_prices", params={"id_commodity": commodity_id})
        fetched_at = self._clock()

        points = []
        for row in _as_rows(rows):
            try:
                point = price_point_from_row(row, fetched_at)
            except (TypeError, ValueError, OverflowError) as e:
                logger.warning(f"Skipping malformed price row for commodity {commodity_id}: {e}")
                continue
            if point is not None:
                points.append(point)

        logger.info(f"Fetched {len(points)} price points for commodity {commodity_id}")
        return points


def _as_rows(data: Any) -> List[Dict[str, Any]]:
    # The feed returns either a bare list or {"data": [...]}
    if isinstance(data, dict) and isinstance(data.get("data"), list):
        data = data["data"]
    if not isinstance(data, list):
        return []
    return [row for row in data if isinstance(row, dict)]


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _first_price(row: Dict[str, Any], *keys: str) -> Optional[float]:
    """First positive finite price among keys, in order"""
    for key in keys:
        price = _as_float(row.get(key))
        if price is not None and price > 0:
            return price
    return None


def _demand(code: Any) -> DemandLevel:
    try:
        return _DEMAND_BY_STATUS.get(int(code), DemandLevel.NORMAL)
    except (TypeError, ValueError, OverflowError):
        return DemandLevel.NORMAL


def _observed_at(row: Dict[str, Any], fallback: datetime) -> datetime:
    epoch = _as_float(row.get("date_modified"))
    if epoch is not None and epoch >= 0:
        try:
            return datetime.fromtimestamp(epoch, tz=timezone.utc)
        except (ValueError, OverflowError, OSError):
            logger.debug(f"Out of range date_modified {epoch!r}, using fetch time")
            return fallback

    raw = row.get("updated_at")
    if isinstance(raw, str) and raw:
        try:
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            return fallback
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)

    return fallback


def price_point_from_row(row: Dict[str, Any], fetched_at: datetime) -> Optional[PricePoint]:
    """
    Map one feed price row to a PricePoint.

    Rows with neither a terminal id nor a terminal name are dropped.
    """
    terminal_id = row.get("id_terminal")
    terminal_name = row.get("terminal_name") or ""
    location_id = str(terminal_id) if terminal_id is not None else terminal_name
    if not location_id:
        return None

    volatility = _as_float(row.get("volatility_price_sell"))
    stock = _as_float(row.get("scu_sell_stock"))
    buy_stock = _as_float(row.get("scu_buy"))

    return PricePoint(
        location_id=location_id,
        observed_at=_observed_at(row, fetched_at),
        sell_price_per_scu=_first_price(row, "price_sell_max", "price_sell", "price_sell_avg"),
        buy_price_per_scu=_first_price(row, "price_buy_min", "price_buy"),
        stock_scu=stock if stock is None or stock >= 0 else None,
        buy_stock_scu=buy_stock if buy_stock is None or buy_stock >= 0 else None,
        sell_demand=_demand(row.get("status_sell")),
        buy_demand=_demand(row.get("status_buy")),
        volatility=abs(volatility) if volatility is not None else None,
        location_name=terminal_name,
        system=row.get("star_system_name"),
        armistice=bool(row.get("is_armistice"))
    )
