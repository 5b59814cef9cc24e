"""Expert relevance classes (A–E) and the hazard × attribute lookup."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from hazard_survey.tables import SkippedRow, clean_cell

logger = logging.getLogger(__name__)

# A is effectively "exclude"; D and E are both "high" until the scale is calibrated.
PLANNING_SCALE: Dict[str, int] = {'A': 0, 'B': 1, 'C': 3, 'D': 5, 'E': 5}
LINEAR_SCALE: Dict[str, int] = {'A': 1, 'B': 2, 'C': 3, 'D': 4, 'E': 5}

SCALES: Dict[str, Dict[str, int]] = {
    'planning': PLANNING_SCALE,
    'linear': LINEAR_SCALE,
}
DEFAULT_SCALE = os.environ.get('GF_SURVEY_SCALE', 'planning')

Scale = Union[str, Mapping[str, int]]


@dataclass(frozen=True)
class RelevanceEntry:
    letter: str
    priority: int


# hazard id -> attribute id -> entry
RelevanceTable = Dict[str, Dict[str, RelevanceEntry]]


def resolve_scale(scale: Optional[Scale] = None) -> Mapping[str, int]:
    if scale is None:
        scale = DEFAULT_SCALE
    if isinstance(scale, str):
        try:
            return SCALES[scale]
        except KeyError:
            raise ValueError(f"Unknown relevance scale '{scale}'. Available: {', '.join(SCALES)}") from None
    return scale


def normalise_letter(letter: object) -> str:
    if letter is None:
        return ''
    return str(letter).strip().upper()


def classify(letter: object, scale: Optional[Scale] = None) -> int:
    """Map a relevance class to its planning priority; unknown classes weigh 0."""
    return resolve_scale(scale).get(normalise_letter(letter), 0)


def build_relevance(
    rows: Iterable[Mapping[str, object]],
    scale: Optional[Scale] = None,
) -> Tuple[RelevanceTable, List[SkippedRow]]:
    mapping = resolve_scale(scale)
    table: RelevanceTable = {}
    skipped: List[SkippedRow] = []
    for row_number, row in enumerate(rows, start=1):
        hazard_id = clean_cell(row.get('hazard_id'))
        attribute_id = clean_cell(row.get('attribute_id'))
        letter = normalise_letter(clean_cell(row.get('score_letter')))
        if not hazard_id or not attribute_id or not letter:
            skipped.append(SkippedRow('hazard_attribute_scores', row_number, 'missing hazard_id, attribute_id or score_letter'))
            continue
        table.setdefault(hazard_id, {})[attribute_id] = RelevanceEntry(letter, mapping.get(letter, 0))
    logger.debug('Built relevance for %d hazards (%d rows skipped)', len(table), len(skipped))
    return table, skipped
