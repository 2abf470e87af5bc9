"""Validation and enrichment of eco suggestions returned by the AI insights service.

Suggestions are plain dicts. Incoming keys may be snake_case or the
camelCase used by the insights service; output is always snake_case.
"""
import re
from typing import Any, Dict, Iterable, List

REQUIRED_FIELDS = ('title', 'description', 'eco_impact', 'financial_saving', 'category')
CAMEL_CASE_KEYS = {'ecoImpact': 'eco_impact', 'financialSaving': 'financial_saving'}

BASE_CONFIDENCE = 0.5
ACTIVITY_MATCH_BONUS = 0.1
ACTIONABLE_BONUS = 0.2
PLAUSIBLE_BONUS = 0.2
MAX_CONFIDENCE = 0.95

ACTIONABLE_PHRASES = ('Replace', 'Switch to', 'Use')
PLAUSIBLE_CO2_LIMIT = 50  # kg
PLAUSIBLE_SAVING_LIMIT = 5000

BASE_SOURCES = ('IPCC Climate Reports', 'Environmental Protection Agency')

_NUMBER = re.compile(r'(\d+\.?\d*)')


def normalize(suggestion: Dict[str, Any]) -> Dict[str, Any]:
    return {CAMEL_CASE_KEYS.get(key, key): value for key, value in suggestion.items()}


def extract_number(text) -> float:
    """First number in a free-text figure such as "Save 12.5 kg CO2/month", else 0."""
    if not isinstance(text, str):
        return 0.0
    match = _NUMBER.search(text)
    return float(match.group(1)) if match else 0.0


def is_valid_suggestion(suggestion: Dict[str, Any]) -> bool:
    suggestion = normalize(suggestion)
    if not all(suggestion.get(field) for field in REQUIRED_FIELDS):
        return False
    if not isinstance(suggestion['title'], str) or not isinstance(suggestion['description'], str):
        return False
    if extract_number(suggestion['eco_impact']) <= 0 or extract_number(suggestion['financial_saving']) <= 0:
        return False
    return len(suggestion['title']) > 10 and len(suggestion['description']) > 20


def _attr(activity, name):
    if isinstance(activity, dict):
        return activity.get(name)
    return getattr(activity, name, None)


def calculate_confidence(suggestion: Dict[str, Any], activities: Iterable) -> float:
    description = suggestion['description']
    lowered = description.lower()

    confidence = BASE_CONFIDENCE
    for activity in activities:
        category = (_attr(activity, 'category') or '').lower()
        activity_type = (_attr(activity, 'activity_type') or '').lower()
        if (category and category in lowered) or (activity_type and activity_type in lowered):
            confidence += ACTIVITY_MATCH_BONUS

    if any(phrase in description for phrase in ACTIONABLE_PHRASES):
        confidence += ACTIONABLE_BONUS

    if (extract_number(suggestion['eco_impact']) < PLAUSIBLE_CO2_LIMIT
            and extract_number(suggestion['financial_saving']) < PLAUSIBLE_SAVING_LIMIT):
        confidence += PLAUSIBLE_BONUS

    return min(MAX_CONFIDENCE, round(confidence, 2))


def action_steps(suggestion: Dict[str, Any]) -> List[str]:
    title = suggestion['title'].lower()
    if 'transport' in title:
        return [
            'Research public transport routes in your area',
            'Download transport apps for real-time schedules',
            'Calculate potential monthly savings',
            'Start with 2-3 trips per week',
        ]
    if 'food' in title:
        return [
            'Find local vegetarian/vegan restaurants',
            'Plan 3 plant-based meals this week',
            'Learn 2 new eco-friendly recipes',
            'Track your food-related emissions',
        ]
    return [
        'Research the suggested alternative',
        'Calculate potential savings',
        'Start with small changes',
        'Track your progress weekly',
    ]


def assess_difficulty(suggestion: Dict[str, Any]) -> str:
    title = suggestion['title'].lower()
    description = suggestion['description'].lower()
    if 'switch' in title or 'use' in title or 'replace' in description:
        return 'easy'
    if 'reduce' in title or 'gradually' in description:
        return 'moderate'
    return 'challenging'


def sources_for(suggestion: Dict[str, Any]) -> List[str]:
    title = suggestion['title'].lower()
    sources = list(BASE_SOURCES)
    if 'transport' in title:
        sources.append('International Energy Agency Transport Report')
    if 'food' in title:
        sources.append('FAO Livestock Environmental Assessment')
    return sources


def enhance_suggestion(suggestion: Dict[str, Any], activities: Iterable) -> Dict[str, Any]:
    suggestion = normalize(suggestion)
    enhanced = dict(suggestion)
    enhanced.update({
        'confidence': calculate_confidence(suggestion, activities),
        'action_steps': action_steps(suggestion),
        'difficulty': assess_difficulty(suggestion),
        'sources': sources_for(suggestion),
    })
    return enhanced


def validate_suggestions(suggestions: Iterable[Dict[str, Any]], activities: Iterable = ()) -> List[Dict[str, Any]]:
    """Drop invalid suggestions, enrich the rest and order them by confidence."""
    activities = list(activities)
    enhanced = [
        enhance_suggestion(suggestion, activities)
        for suggestion in suggestions
        if isinstance(suggestion, dict) and is_valid_suggestion(suggestion)
    ]
    return sorted(enhanced, key=lambda item: item['confidence'], reverse=True)
