"""Weighting presets that keep or drop attribute categories."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping

ALL_PROFILE = 'all'

CORE_CATEGORIES = ('Hazard', 'Risk context', 'Recovery')


@dataclass(frozen=True)
class Profile:
    key: str
    label: str
    description: str
    category_weights: Mapping[str, float] = field(default_factory=dict)
    default_for_others: float = 1


def _focus(*categories: str) -> Dict[str, float]:
    return {category: 1 for category in CORE_CATEGORIES + categories}


PROFILES: Dict[str, Profile] = {
    ALL_PROFILE: Profile(
        key=ALL_PROFILE,
        label='All attributes',
        description='Uses every attribute equally.',
    ),
    'people': Profile(
        key='people',
        label='People focus',
        description='Prioritises human impacts and core planning attributes.',
        category_weights=_focus('Impact – people'),
        default_for_others=0,
    ),
    'services': Profile(
        key='services',
        label='Services focus',
        description='Prioritises critical services and infrastructure.',
        category_weights=_focus('Impact – services'),
        default_for_others=0,
    ),
    'economy_env': Profile(
        key='economy_env',
        label='Economy & environment',
        description='Prioritises economic and environmental impacts.',
        category_weights=_focus('Impact – economy', 'Impact – env'),
        default_for_others=0,
    ),
}


def get_profile(key: str) -> Profile:
    return PROFILES.get(key, PROFILES[ALL_PROFILE])


def multiplier(profile_key: str, category: str) -> float:
    profile = get_profile(profile_key)
    # "all" ignores the table entirely, including any explicit zero weights.
    if profile.key == ALL_PROFILE:
        return 1
    return profile.category_weights.get(category, profile.default_for_others)
