"""Planning-priority scoring: weighted sums, 0–100 normalisation and bands."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence

from hazard_survey.profiles import multiplier
from hazard_survey.relevance import RelevanceTable
from hazard_survey.tables import Attribute, Hazard

DEFAULT_IMPORTANCE = 3
MIN_IMPORTANCE = 1
MAX_IMPORTANCE = 5

HIGH_THRESHOLD = 67
MEDIUM_THRESHOLD = 34

PLAN_THRESHOLD = 50
EXPOSURE_THRESHOLD = 50


@dataclass(frozen=True)
class ScoredHazard:
    id: str
    code: str
    name: str
    raw_score: float
    normalised: int
    band: str
    exposure_raw: Optional[float] = None
    exposure_norm: Optional[float] = None


@dataclass(frozen=True)
class Contribution:
    attribute: str
    category: str
    user_importance: int
    priority: int
    letter: str
    contribution: int


def round_half_up(value: float) -> int:
    """Round half away from zero (Python's ``round`` would use banker's rounding)."""
    return int(math.floor(abs(value) + 0.5)) * (1 if value >= 0 else -1)


def band_for(normalised: int) -> str:
    if normalised >= HIGH_THRESHOLD:
        return 'High'
    if normalised >= MEDIUM_THRESHOLD:
        return 'Medium'
    return 'Low'


def importance(answers: Mapping[str, int], attribute_id: str) -> int:
    value = answers.get(attribute_id)
    return DEFAULT_IMPORTANCE if value is None else value


def _category_lookup(attributes: Sequence[Attribute]) -> Dict[str, str]:
    return {attribute.id: attribute.category for attribute in attributes}


def raw_score(
    hazard_id: str,
    answers: Mapping[str, int],
    relevance: RelevanceTable,
    categories: Mapping[str, str],
    profile_key: str,
) -> float:
    total = 0.0
    for attribute_id, entry in relevance.get(hazard_id, {}).items():
        weight = multiplier(profile_key, categories.get(attribute_id, 'Other'))
        if weight == 0:
            continue
        total += entry.priority * importance(answers, attribute_id) * weight
    return total


def score(
    hazards: Sequence[Hazard],
    answers: Mapping[str, int],
    relevance: RelevanceTable,
    attributes: Sequence[Attribute],
    profile_key: str,
) -> List[ScoredHazard]:
    """Score, normalise and rank hazards; ties keep hazard-table order."""
    categories = _category_lookup(attributes)
    raw = [(hazard, raw_score(hazard.id, answers, relevance, categories, profile_key)) for hazard in hazards]
    ceiling = max([value for _, value in raw] + [1])
    scored = []
    for hazard, value in raw:
        normalised = round_half_up(value / ceiling * 100)
        scored.append(
            ScoredHazard(
                id=hazard.id,
                code=hazard.code,
                name=hazard.name,
                raw_score=value,
                normalised=normalised,
                band=band_for(normalised),
            )
        )
    return sorted(scored, key=lambda h: h.normalised, reverse=True)


def explain(
    hazard_id: str,
    relevance: RelevanceTable,
    attributes: Sequence[Attribute],
    answers: Mapping[str, int],
) -> List[Contribution]:
    """Per-attribute contributions for one hazard, largest first.

    Profile multipliers are left out on purpose: the table shows the raw
    influence of every rated attribute, even ones the active profile drops.
    """
    by_id = {attribute.id: attribute for attribute in attributes}
    rows = []
    for attribute_id, entry in relevance.get(hazard_id, {}).items():
        attribute = by_id.get(attribute_id)
        user_importance = importance(answers, attribute_id)
        rows.append(
            Contribution(
                attribute=attribute.text if attribute else attribute_id,
                category=attribute.category if attribute else '',
                user_importance=user_importance,
                priority=entry.priority,
                letter=entry.letter or '?',
                contribution=user_importance * entry.priority,
            )
        )
    return sorted(rows, key=lambda row: row.contribution, reverse=True)


def quadrant(hazard: ScoredHazard) -> Optional[str]:
    if hazard.exposure_norm is None:
        return None
    planning = 'High planning' if hazard.normalised >= PLAN_THRESHOLD else 'Low planning'
    exposure = 'High exposure' if hazard.exposure_norm >= EXPOSURE_THRESHOLD else 'Low exposure'
    return f'{planning} / {exposure}'


def visible(results: Sequence[ScoredHazard], top: Optional[int] = None) -> List[ScoredHazard]:
    if not top:
        return list(results)
    return list(results[:top])
