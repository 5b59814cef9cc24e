"""Exposure indices per hazard and asset category.

The exposure table follows the Wood et al. layout: ``Code`` holds the hazard
code, columns ``1``..``5`` count all assets per exposure level and
``{Category}1``..``{Category}5`` count a single asset category.  The index
for a category is the level-weighted sum of those counts.
"""
from __future__ import annotations

import dataclasses
import logging
import math
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from hazard_survey.scoring import ScoredHazard
from hazard_survey.tables import SkippedRow, clean_cell

logger = logging.getLogger(__name__)

LEVELS = (1, 2, 3, 4, 5)
ALL_ASSETS = 'All assets'

# category name -> column prefix
EXPOSURE_CATEGORIES: Dict[str, str] = {
    ALL_ASSETS: '',
    'Lands': 'Lands',
    'Personnel': 'Personnel',
    'Buildings': 'Buildings',
}
MISSING_MARKERS = {'', 'N/A'}

# hazard id -> category -> index
ExposureTable = Dict[str, Dict[str, float]]


def _cell_value(raw: object) -> Optional[float]:
    if raw is None:
        return None
    text = clean_cell(raw)
    if text in MISSING_MARKERS:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def weighted_index(row: Mapping[str, object], prefix: str = '') -> float:
    total = 0.0
    for level in LEVELS:
        value = _cell_value(row.get(f'{prefix}{level}'))
        if value is not None:
            total += level * value
    return total


def build_exposure(
    rows: Iterable[Mapping[str, object]],
    categories: Optional[Mapping[str, str]] = None,
) -> Tuple[ExposureTable, List[str], List[SkippedRow]]:
    """Return the exposure table, the observed category catalogue and skipped rows.

    A category is kept for a hazard only when its index is strictly positive,
    so "no data" stays distinguishable from a measured zero.
    """
    categories = EXPOSURE_CATEGORIES if categories is None else categories
    table: ExposureTable = {}
    observed: Dict[str, None] = {}
    skipped: List[SkippedRow] = []
    for row_number, row in enumerate(rows, start=1):
        hazard_id = clean_cell(row.get('Code'))
        if not hazard_id:
            skipped.append(SkippedRow('exposure', row_number, 'missing Code'))
            continue
        metrics: Dict[str, float] = {}
        for category, prefix in categories.items():
            index = weighted_index(row, prefix)
            if index > 0:
                metrics[category] = index
                observed.setdefault(category)
        if not metrics:
            skipped.append(SkippedRow('exposure', row_number, f'no exposure data for {hazard_id}'))
            continue
        table[hazard_id] = metrics
    logger.debug('Built exposure for %d hazards across %s', len(table), list(observed))
    return table, list(observed), skipped


def max_exposure(hazard_ids: Iterable[str], exposure: ExposureTable, category: Optional[str]) -> float:
    if not category:
        return 0.0
    values = [exposure[h][category] for h in hazard_ids if category in exposure.get(h, {})]
    return max(values, default=0.0)


def normalise_exposure(
    scored: Sequence[ScoredHazard],
    exposure: ExposureTable,
    category: Optional[str],
) -> List[ScoredHazard]:
    """Attach raw and 0–100 exposure values for ``category``.

    Hazards without data keep ``None`` rather than 0. When no hazard has a
    positive value the whole axis is unavailable and every value is ``None``.
    """
    ceiling = max_exposure((h.id for h in scored), exposure, category)
    if ceiling <= 0:
        return [dataclasses.replace(h, exposure_raw=None, exposure_norm=None) for h in scored]
    results = []
    for hazard in scored:
        value = exposure.get(hazard.id, {}).get(category)
        if value is None:
            results.append(dataclasses.replace(hazard, exposure_raw=None, exposure_norm=None))
        else:
            results.append(dataclasses.replace(hazard, exposure_raw=value, exposure_norm=value / ceiling * 100))
    return results


def has_exposure_axis(results: Sequence[ScoredHazard]) -> bool:
    return any(h.exposure_norm is not None for h in results)
