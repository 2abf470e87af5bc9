"""Emission and cost factor tables.

Every category has a closed set of activity types. Each type carries its CO2
factor, its cost factor and its behavioural classification in one record, so
the CO2 and cost tables cannot drift apart. Units per category are given in
``UNITS``; factors are per unit (kg CO2 and currency units).

The enhanced tables below only adjust factors for the same closed sets; they
never add types of their own.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional

from services.exceptions import UnknownActivityType

TRAVEL = 'travel'
FOOD = 'food'
SHOPPING = 'shopping'
ENERGY = 'energy'

CATEGORIES = (TRAVEL, FOOD, SHOPPING, ENERGY)

UNITS = {
    TRAVEL: 'km',
    FOOD: 'meals',
    SHOPPING: 'items',
    ENERGY: 'kWh',
}

# Behavioural classification used by stats and challenges
KIND_CAR = 'car'
KIND_ECO_TRANSPORT = 'eco_transport'
KIND_MEAT = 'meat'
KIND_PLANT_BASED = 'plant_based'
KIND_ECO_CHOICE = 'eco_choice'

ECO_KINDS = (KIND_ECO_TRANSPORT, KIND_PLANT_BASED, KIND_ECO_CHOICE)


@dataclass(frozen=True)
class FactorPair:
    co2: float
    cost: float
    kind: Optional[str] = None


STATIC_FACTORS: Dict[str, Dict[str, FactorPair]] = {
    TRAVEL: {
        'Car': FactorPair(0.21, 8, KIND_CAR),
        'Bike': FactorPair(0.02, 0.5, KIND_ECO_TRANSPORT),
        'Public Transport': FactorPair(0.07, 2, KIND_ECO_TRANSPORT),
        'Walking': FactorPair(0.0, 0.0, KIND_ECO_TRANSPORT),
    },
    FOOD: {
        'Meat': FactorPair(2.5, 150, KIND_MEAT),
        'Vegetarian': FactorPair(0.8, 80, KIND_PLANT_BASED),
        'Vegan': FactorPair(0.5, 60, KIND_PLANT_BASED),
        'Local Produce': FactorPair(0.3, 50, KIND_PLANT_BASED),
    },
    SHOPPING: {
        'New Clothes': FactorPair(5, 500),
        'Second-hand': FactorPair(0.5, 150, KIND_ECO_CHOICE),
        'Electronics': FactorPair(10, 2000),
        'Reusable Items': FactorPair(0.2, 100, KIND_ECO_CHOICE),
    },
    ENERGY: {
        'Electricity': FactorPair(0.5, 6),
        'LED Lights': FactorPair(0.1, 2, KIND_ECO_CHOICE),
        'Solar Power': FactorPair(0.02, 1, KIND_ECO_CHOICE),
        'Energy Efficient': FactorPair(0.15, 3, KIND_ECO_CHOICE),
    },
}

STATIC_ACCURACY = 0.6
STATIC_SOURCE = 'Static estimates'

# Upper bound on a single logged quantity (km, meals, items or kWh)
MAX_AMOUNT = 1_000_000

# --- Enhanced factors -------------------------------------------------------

# Energy: share of the live grid intensity (g CO2/kWh) and of the regional tariff
ENERGY_INTENSITY_SHARE = {
    'Electricity': 1.0,
    'LED Lights': 0.2,
    'Energy Efficient': 0.7,
}
ENERGY_TARIFF_SHARE = {
    'Electricity': 1.0,
    'LED Lights': 0.8,
    'Energy Efficient': 0.7,
}
# Solar does not draw from the grid: lifecycle emissions and levelised cost
ENERGY_FIXED = {
    'Solar Power': FactorPair(0.045, 2.5),
}

# Travel: per passenger-km emissions; car cost follows the petrol price
TRAVEL_CO2 = {
    'Car': 0.168,
    'Bike': 0.021,
    'Public Transport': 0.045,
    'Walking': 0.0,
}
CAR_LITRES_PER_KM = 0.08  # 12.5 km/l
TRAVEL_FIXED_COST = {
    'Bike': 0.5,  # Maintenance
    'Public Transport': 2.5,  # Average fare per km
    'Walking': 0.0,
}

# Named defaults used whenever a live signal cannot be obtained
DEFAULT_GRID_INTENSITY = 820.0  # g CO2/kWh, national average
DEFAULT_FUEL_PRICES = {
    'petrol': 105.0,
    'diesel': 95.0,
    'cng': 80.0,
}
ELECTRICITY_TARIFFS = {
    'Maharashtra': 7.5,
    'Karnataka': 8.2,
    'Tamil Nadu': 6.8,
    'Delhi': 5.5,
    'default': 7.0,
}
GRID_REGION_IDS = {
    'IN': 1,
    'Maharashtra': 2,
    'Karnataka': 3,
    'Tamil Nadu': 4,
}

# How fresh the signal behind an estimate was
LIVE = 'live'
STALE = 'stale'
DEFAULT = 'default'

ENERGY_LIVE_ACCURACY = 0.9
ENERGY_LIVE_SOURCE = 'Real-time carbon intensity data'
ENERGY_STALE_ACCURACY = 0.8
ENERGY_STALE_SOURCE = 'Last known carbon intensity data'
ENERGY_DEFAULT_ACCURACY = 0.7
ENERGY_DEFAULT_SOURCE = 'Default grid intensity'
TRAVEL_LIVE_ACCURACY = 0.85
TRAVEL_LIVE_SOURCE = 'Vehicle emission standards + live fuel prices'
TRAVEL_STALE_ACCURACY = 0.8
TRAVEL_STALE_SOURCE = 'Vehicle emission standards + last known fuel prices'
TRAVEL_DEFAULT_ACCURACY = 0.7
TRAVEL_DEFAULT_SOURCE = 'Vehicle emission standards + default fuel prices'

ENERGY_QUALITY = {
    LIVE: (ENERGY_LIVE_ACCURACY, ENERGY_LIVE_SOURCE),
    STALE: (ENERGY_STALE_ACCURACY, ENERGY_STALE_SOURCE),
    DEFAULT: (ENERGY_DEFAULT_ACCURACY, ENERGY_DEFAULT_SOURCE),
}
TRAVEL_QUALITY = {
    LIVE: (TRAVEL_LIVE_ACCURACY, TRAVEL_LIVE_SOURCE),
    STALE: (TRAVEL_STALE_ACCURACY, TRAVEL_STALE_SOURCE),
    DEFAULT: (TRAVEL_DEFAULT_ACCURACY, TRAVEL_DEFAULT_SOURCE),
}


def get_factor(category: str, activity_type: str) -> FactorPair:
    """Return the static factor record, raising for anything outside the table."""
    try:
        return STATIC_FACTORS[category][activity_type]
    except (KeyError, TypeError):
        raise UnknownActivityType(category, activity_type) from None


def activity_types(category: str = None) -> Dict[str, List[str]]:
    """Valid activity types, optionally for a single category."""
    if category is not None:
        if category not in STATIC_FACTORS:
            raise UnknownActivityType(category, None)
        return {category: list(STATIC_FACTORS[category])}
    return {name: list(types) for name, types in STATIC_FACTORS.items()}


def classify(category: str, activity_type: str) -> Optional[str]:
    """Behavioural kind of an activity, or None for unknown/unclassified types."""
    factor = STATIC_FACTORS.get(category, {}).get(activity_type)
    return factor.kind if factor else None


def tariff_for_region(region: str) -> float:
    return ELECTRICITY_TARIFFS.get(region, ELECTRICITY_TARIFFS['default'])


def grid_region_id(region: str) -> int:
    return GRID_REGION_IDS.get(region, GRID_REGION_IDS['IN'])


def is_eco_choice(category: str, activity_type: str) -> bool:
    return classify(category, activity_type) in ECO_KINDS
