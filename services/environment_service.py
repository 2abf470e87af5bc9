"""Environmental data provider and signal cache.

The provider wraps the external sources used by enhanced impact calculations
(regional grid carbon intensity, fuel prices, electricity tariffs). Every
network call carries a bounded timeout and every failure is reported as
``ExternalSignalUnavailable`` so the calculator can fall back to its defaults.

``SignalCache`` is an explicit object owned by the calculator; each entry
remembers when it was fetched and is treated as missing once it is older than
the TTL configured for its signal. The last value is still available through
``get_last`` for use when a refresh fails.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional, Tuple

import pytz
import requests

from services.exceptions import ExternalSignalUnavailable
from services.impact_factors import grid_region_id, tariff_for_region

logger = logging.getLogger('environment')

GRID_INTENSITY = 'grid_intensity'
FUEL_PRICES = 'fuel_prices'

DEFAULT_TTLS = {
    GRID_INTENSITY: 3600,  # 1 hour
    FUEL_PRICES: 86400,  # 24 hours
}

# Seconds to skip a source after a failed refresh
DEFAULT_FAILURE_BACKOFF = 60


@dataclass(frozen=True)
class GridIntensity:
    region: str
    value: float  # g CO2/kWh
    timestamp: datetime


@dataclass(frozen=True)
class FuelPrices:
    petrol: float
    diesel: float
    cng: float
    timestamp: datetime


def utc_now() -> datetime:
    return datetime.now(pytz.UTC)


class SignalCache:
    """Read-through cache for external signals with per-signal staleness.

    Expired entries are kept so callers can fall back to the last reading when
    a refresh fails. Failed refreshes are remembered for ``failure_backoff``
    seconds so an outage does not cost a network timeout on every lookup.
    """

    def __init__(self, ttls: Optional[Dict[str, int]] = None, clock: Callable[[], datetime] = utc_now,
                 failure_backoff: int = DEFAULT_FAILURE_BACKOFF):
        self.ttls = dict(DEFAULT_TTLS)
        if ttls:
            self.ttls.update(ttls)
        self.failure_backoff = failure_backoff
        self._clock = clock
        self._entries: Dict[Tuple[str, Optional[str]], Tuple[Any, datetime]] = {}
        self._failures: Dict[Tuple[str, Optional[str]], datetime] = {}

    def now(self) -> datetime:
        return self._clock()

    def get(self, signal: str, key: str = None):
        entry = self._entries.get((signal, key))
        if entry is None:
            return None
        value, fetched_at = entry
        if self.is_stale(signal, fetched_at):
            return None
        return value

    def get_last(self, signal: str, key: str = None):
        """Most recent value for the signal, however old."""
        entry = self._entries.get((signal, key))
        return entry[0] if entry else None

    def set(self, signal: str, value, key: str = None) -> None:
        self._entries[(signal, key)] = (value, self.now())
        self._failures.pop((signal, key), None)

    def is_stale(self, signal: str, fetched_at: datetime) -> bool:
        ttl = self.ttls.get(signal, 0)
        return self.now() - fetched_at > timedelta(seconds=ttl)

    def record_failure(self, signal: str, key: str = None) -> None:
        self._failures[(signal, key)] = self.now()

    def recently_failed(self, signal: str, key: str = None) -> bool:
        failed_at = self._failures.get((signal, key))
        if failed_at is None:
            return False
        return self.now() - failed_at < timedelta(seconds=self.failure_backoff)

    def clear(self) -> None:
        self._entries.clear()
        self._failures.clear()

    def __len__(self):
        return len(self._entries)


def _extract_intensity(payload: Dict) -> Optional[float]:
    """Pull a g/kWh figure out of a regional carbon-intensity response.

    Accepts both the flat shape ``{"data": [{"intensity": {...}}]}`` and the
    regional shape ``{"data": [{"data": [{"intensity": {...}}]}]}``.
    """
    try:
        entry = payload['data'][0]
        if 'data' in entry:
            entry = entry['data'][0]
        intensity = entry['intensity']
    except (KeyError, IndexError, TypeError):
        return None

    for field in ('actual', 'forecast'):
        value = intensity.get(field)
        if isinstance(value, (int, float)) and value > 0:
            return float(value)
    return None


class EnvironmentalDataProvider:
    """HTTP adapter for environmental signals."""

    def __init__(self, grid_intensity_url: str = None, fuel_price_url: str = None,
                 timeout: float = 3.0, session: requests.Session = None):
        self.grid_intensity_url = grid_intensity_url
        self.fuel_price_url = fuel_price_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get_json(self, signal: str, url: str) -> Dict:
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            raise ExternalSignalUnavailable(signal, str(e)) from e

    def get_grid_intensity(self, region: str) -> GridIntensity:
        if not self.grid_intensity_url:
            raise ExternalSignalUnavailable(GRID_INTENSITY, 'no endpoint configured')

        url = self.grid_intensity_url.format(region_id=grid_region_id(region), region=region)
        payload = self._get_json(GRID_INTENSITY, url)
        value = _extract_intensity(payload)
        if value is None:
            raise ExternalSignalUnavailable(GRID_INTENSITY, 'no intensity in response')
        return GridIntensity(region=region, value=value, timestamp=utc_now())

    def get_fuel_prices(self) -> FuelPrices:
        if not self.fuel_price_url:
            raise ExternalSignalUnavailable(FUEL_PRICES, 'no endpoint configured')

        payload = self._get_json(FUEL_PRICES, self.fuel_price_url)
        try:
            prices = {name: float(payload[name]) for name in ('petrol', 'diesel', 'cng')}
        except (KeyError, TypeError, ValueError) as e:
            raise ExternalSignalUnavailable(FUEL_PRICES, f'malformed response: {e}') from e
        if any(price <= 0 for price in prices.values()):
            raise ExternalSignalUnavailable(FUEL_PRICES, 'non-positive price in response')
        return FuelPrices(timestamp=utc_now(), **prices)

    def get_electricity_tariff(self, region: str) -> float:
        # Published state tariffs; no live source
        return tariff_for_region(region)
