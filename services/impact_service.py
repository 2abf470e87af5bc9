"""Impact calculation for logged activities.

``compute_impact`` is the static rule set: amount times the paired factors of
the activity type. ``EnhancedImpactCalculator`` adjusts the energy and travel
factors with live environmental signals and degrades to named default
constants when a signal is unavailable. Neither path ever defaults an unknown
activity type; both raise ``UnknownActivityType``.
"""
import logging
import math
from dataclasses import dataclass, asdict
from typing import Mapping, Tuple

from services import impact_factors as factors
from services.environment_service import (
    EnvironmentalDataProvider, SignalCache, GRID_INTENSITY, FUEL_PRICES,
)
from services.exceptions import ExternalSignalUnavailable, InvalidAmount

logger = logging.getLogger('impact')


@dataclass(frozen=True)
class ImpactResult:
    co2_impact: float
    financial_impact: float
    accuracy: float = factors.STATIC_ACCURACY
    source: str = factors.STATIC_SOURCE

    def to_dict(self) -> dict:
        return asdict(self)


def validate_amount(amount) -> float:
    """Return the amount as a float or raise ``InvalidAmount``."""
    if isinstance(amount, bool):
        raise InvalidAmount(amount)
    try:
        value = float(amount)
    except (TypeError, ValueError):
        raise InvalidAmount(amount) from None
    if not math.isfinite(value) or value < 0 or value > factors.MAX_AMOUNT:
        raise InvalidAmount(amount)
    return value


def _checked(result: ImpactResult, amount) -> ImpactResult:
    if not (math.isfinite(result.co2_impact) and math.isfinite(result.financial_impact)):
        raise InvalidAmount(amount)
    return result


def compute_impact(category: str, activity_type: str, amount) -> ImpactResult:
    """Static impact: ``amount * factor`` for both CO2 and cost."""
    value = validate_amount(amount)
    factor = factors.get_factor(category, activity_type)
    return _checked(ImpactResult(
        co2_impact=value * factor.co2,
        financial_impact=value * factor.cost,
    ), amount)


class EnhancedImpactCalculator:
    """Impact calculator that folds live environmental signals into the factors.

    Signal lookups are read through ``cache``. When ``enhanced`` is False, or a
    category has no live signal (food, shopping), the static rules apply.
    """

    def __init__(self, provider: EnvironmentalDataProvider = None, cache: SignalCache = None,
                 default_region: str = 'IN', enhanced: bool = True):
        self.provider = provider
        self.cache = cache or SignalCache()
        self.default_region = default_region
        self.enhanced = enhanced and provider is not None

    def compute(self, category: str, activity_type: str, amount, region: str = None) -> ImpactResult:
        value = validate_amount(amount)
        factors.get_factor(category, activity_type)

        if not self.enhanced:
            return compute_impact(category, activity_type, value)

        region = region or self.default_region
        if category == factors.ENERGY:
            return _checked(self._energy_impact(activity_type, value, region), amount)
        if category == factors.TRAVEL:
            return _checked(self._travel_impact(activity_type, value), amount)
        return compute_impact(category, activity_type, value)

    # --- signals ------------------------------------------------------------

    def grid_intensity(self, region: str) -> Tuple[float, str]:
        """Grid intensity in g/kWh and how fresh it is (live, stale or default)."""
        cached = self.cache.get(GRID_INTENSITY, key=region)
        if cached is not None:
            return cached.value, factors.LIVE
        if not self.cache.recently_failed(GRID_INTENSITY, key=region):
            try:
                reading = self.provider.get_grid_intensity(region)
            except ExternalSignalUnavailable as e:
                logger.warning(f"Grid intensity refresh failed for {region}: {e}")
                self.cache.record_failure(GRID_INTENSITY, key=region)
            else:
                self.cache.set(GRID_INTENSITY, reading, key=region)
                return reading.value, factors.LIVE

        last = self.cache.get_last(GRID_INTENSITY, key=region)
        if last is not None:
            logger.info(f"Using last known grid intensity for {region} from {last.timestamp}")
            return last.value, factors.STALE
        logger.warning(f"Using default grid intensity for {region}")
        return factors.DEFAULT_GRID_INTENSITY, factors.DEFAULT

    def petrol_price(self) -> Tuple[float, str]:
        cached = self.cache.get(FUEL_PRICES)
        if cached is not None:
            return cached.petrol, factors.LIVE
        if not self.cache.recently_failed(FUEL_PRICES):
            try:
                prices = self.provider.get_fuel_prices()
            except ExternalSignalUnavailable as e:
                logger.warning(f"Fuel price refresh failed: {e}")
                self.cache.record_failure(FUEL_PRICES)
            else:
                self.cache.set(FUEL_PRICES, prices)
                return prices.petrol, factors.LIVE

        last = self.cache.get_last(FUEL_PRICES)
        if last is not None:
            logger.info(f"Using last known fuel prices from {last.timestamp}")
            return last.petrol, factors.STALE
        logger.warning("Using default fuel prices")
        return factors.DEFAULT_FUEL_PRICES['petrol'], factors.DEFAULT

    def electricity_tariff(self, region: str) -> float:
        try:
            return self.provider.get_electricity_tariff(region)
        except ExternalSignalUnavailable as e:
            logger.warning(f"Using default electricity tariff for {region}: {e}")
            return factors.ELECTRICITY_TARIFFS['default']

    # --- per-category rules -------------------------------------------------

    def _energy_impact(self, energy_type: str, kwh: float, region: str) -> ImpactResult:
        fixed = factors.ENERGY_FIXED.get(energy_type)
        if fixed is not None:
            return ImpactResult(
                co2_impact=kwh * fixed.co2,
                financial_impact=kwh * fixed.cost,
                accuracy=factors.ENERGY_LIVE_ACCURACY,
                source='Solar lifecycle assessment',
            )

        intensity, freshness = self.grid_intensity(region)
        tariff = self.electricity_tariff(region)
        co2_factor = intensity * factors.ENERGY_INTENSITY_SHARE[energy_type] / 1000
        cost_factor = tariff * factors.ENERGY_TARIFF_SHARE[energy_type]
        accuracy, source = factors.ENERGY_QUALITY[freshness]

        return ImpactResult(
            co2_impact=kwh * co2_factor,
            financial_impact=kwh * cost_factor,
            accuracy=accuracy,
            source=source,
        )

    def _travel_impact(self, mode: str, distance: float) -> ImpactResult:
        co2_factor = factors.TRAVEL_CO2[mode]
        if mode in factors.TRAVEL_FIXED_COST:
            # Fuel price does not affect these modes
            freshness = factors.LIVE
            cost_factor = factors.TRAVEL_FIXED_COST[mode]
        else:
            petrol, freshness = self.petrol_price()
            cost_factor = petrol * factors.CAR_LITRES_PER_KM
        accuracy, source = factors.TRAVEL_QUALITY[freshness]

        return ImpactResult(
            co2_impact=distance * co2_factor,
            financial_impact=distance * cost_factor,
            accuracy=accuracy,
            source=source,
        )


def build_impact_calculator(config: Mapping) -> EnhancedImpactCalculator:
    """Create the application's calculator from Flask config values."""
    provider = EnvironmentalDataProvider(
        grid_intensity_url=config.get('GRID_INTENSITY_API_URL'),
        fuel_price_url=config.get('FUEL_PRICE_API_URL'),
        timeout=config.get('EXTERNAL_SIGNAL_TIMEOUT', 3.0),
    )
    cache = SignalCache(ttls={
        GRID_INTENSITY: config.get('GRID_INTENSITY_TTL', 3600),
        FUEL_PRICES: config.get('FUEL_PRICE_TTL', 86400),
    }, failure_backoff=config.get('SIGNAL_FAILURE_BACKOFF', 60))
    return EnhancedImpactCalculator(
        provider=provider,
        cache=cache,
        default_region=config.get('DEFAULT_REGION', 'IN'),
        enhanced=bool(config.get('ENHANCED_CALCULATIONS', False)),
    )
