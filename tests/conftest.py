import pytest

from hazard_survey.loader import build_model
from hazard_survey.relevance import RelevanceEntry
from hazard_survey.tables import Attribute, Hazard


@pytest.fixture
def attributes():
    return [
        Attribute('A1', 'Hazard', 'How likely is the hazard?'),
        Attribute('A2', 'Recovery', 'How long does recovery take?'),
        Attribute('A3', 'Impact – economy', 'Cost to local businesses'),
    ]


@pytest.fixture
def hazards():
    return [
        Hazard('H1', 'H1', 'River flooding'),
        Hazard('H2', 'H2', 'Wildfire'),
        Hazard('H3', 'H3', 'Pandemic "novel" strain'),
    ]


@pytest.fixture
def relevance():
    return {
        'H1': {'A1': RelevanceEntry('D', 5), 'A2': RelevanceEntry('B', 1)},
        'H2': {'A1': RelevanceEntry('A', 0)},
    }


@pytest.fixture
def model():
    return build_model(
        attribute_rows=[
            {'id': 'A1', 'category': 'Hazard', 'attribute_text': 'Likelihood'},
            {'id': 'A2', 'category': 'Impact – people', 'attribute_text': 'Casualties'},
            {'id': 'A3', 'category': 'Impact – economy', 'attribute_text': 'Business losses'},
        ],
        hazard_rows=[
            {'Hazard Code': 'FLD', 'Hazard Descriptions': 'Flooding'},
            {'Hazard Code': 'FIR', 'Hazard Descriptions': 'Wildfire'},
            {'Hazard Code': 'CYB', 'Hazard Descriptions': 'Cyber attack'},
        ],
        score_rows=[
            {'hazard_id': 'FLD', 'attribute_id': 'A1', 'score_letter': 'D'},
            {'hazard_id': 'FLD', 'attribute_id': 'A2', 'score_letter': 'C'},
            {'hazard_id': 'FIR', 'attribute_id': 'A1', 'score_letter': 'C'},
            {'hazard_id': 'FIR', 'attribute_id': 'A3', 'score_letter': 'E'},
            {'hazard_id': 'CYB', 'attribute_id': 'A3', 'score_letter': 'B'},
        ],
        exposure_rows=[
            {'Code': 'FLD', '1': '4', '2': '1', 'Lands1': '2', 'Lands3': '4'},
            {'Code': 'FIR', '1': '2', 'Lands2': 'N/A'},
        ],
    )
