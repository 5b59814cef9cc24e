"""Downloadable results: the priorities CSV and the chart payload."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pandas as pd

from hazard_survey.exposure import has_exposure_axis
from hazard_survey.loader import SurveyModel
from hazard_survey.profiles import PROFILES, get_profile
from hazard_survey.scoring import ScoredHazard, explain, quadrant, visible
from hazard_survey.session import SurveyState

CSV_FILENAME = 'hazard_planning_priorities.csv'
PAYLOAD_FILENAME = 'hazard_priorities.js'
EXPORT_COLUMNS = ['Rank', 'Hazard Code', 'Hazard Name', 'Score', 'Band']


def _format_number(value: Optional[float]) -> str:
    if value is None:
        return ''
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def results_frame(results: Sequence[ScoredHazard], exposure_type: Optional[str] = None) -> pd.DataFrame:
    """Full ranked table; the exposure column exists only when the axis is available."""
    rows = [
        {
            'Rank': rank,
            'Hazard Code': hazard.code or hazard.id,
            'Hazard Name': hazard.name,
            'Score': hazard.normalised,
            'Band': hazard.band,
        }
        for rank, hazard in enumerate(results, start=1)
    ]
    df = pd.DataFrame(rows, columns=EXPORT_COLUMNS)
    if exposure_type and has_exposure_axis(results):
        df[f'Exposure ({exposure_type})'] = [_format_number(h.exposure_raw) for h in results]
    return df


def export_csv(results: Sequence[ScoredHazard], exposure_type: Optional[str] = None) -> str:
    return results_frame(results, exposure_type).to_csv(index=False, lineterminator='\r\n')


def build_payload(model: SurveyModel, state: SurveyState, results: Sequence[ScoredHazard]) -> Dict:
    exposure_type = state.active_exposure(model.exposure_types)
    profile = get_profile(state.profile_key)
    hazards: List[Dict] = []
    for hazard in visible(results, state.show_top):
        hazards.append(
            {
                'id': hazard.id,
                'code': hazard.code,
                'name': hazard.name,
                'rawScore': hazard.raw_score,
                'normalised': hazard.normalised,
                'band': hazard.band,
                'exposureRaw': hazard.exposure_raw,
                'exposureNorm': hazard.exposure_norm,
                'quadrant': quadrant(hazard),
                'breakdown': [
                    {
                        'attribute': row.attribute,
                        'category': row.category,
                        'userImportance': row.user_importance,
                        'priority': row.priority,
                        'letter': row.letter,
                        'contribution': row.contribution,
                    }
                    for row in explain(hazard.id, model.relevance, model.attributes, state.answers)
                ],
            }
        )
    return {
        'profile': {'key': profile.key, 'label': profile.label, 'description': profile.description},
        'profiles': [{'key': p.key, 'label': p.label} for p in PROFILES.values()],
        'exposureType': exposure_type,
        'exposureTypes': list(model.exposure_types),
        'hasExposure': has_exposure_axis(results),
        'hazards': hazards,
    }


def write_csv(results: Sequence[ScoredHazard], exposure_type: Optional[str], output_dir: Path) -> Path:
    path = output_dir / CSV_FILENAME
    path.parent.mkdir(parents=True, exist_ok=True)
    # newline='' keeps the CRLF terminators from being translated again.
    with path.open('w', encoding='utf-8', newline='') as handle:
        handle.write(export_csv(results, exposure_type))
    return path


def write_payload(payload: Dict, output_dir: Path) -> Path:
    path = output_dir / PAYLOAD_FILENAME
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"window.HAZARD_PRIORITIES = {json.dumps(payload)};\n", encoding='utf-8')
    return path
