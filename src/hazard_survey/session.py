"""Respondent session state and the results it produces."""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, List, Mapping, Optional, Sequence

from hazard_survey.exposure import normalise_exposure
from hazard_survey.loader import SurveyModel
from hazard_survey.profiles import ALL_PROFILE
from hazard_survey.scoring import DEFAULT_IMPORTANCE, MAX_IMPORTANCE, MIN_IMPORTANCE, ScoredHazard, score
from hazard_survey.tables import Attribute

Listener = Callable[['SurveyState'], None]


def validate_importance(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Importance must be an integer, got {value!r}")
    if not MIN_IMPORTANCE <= value <= MAX_IMPORTANCE:
        raise ValueError(f"Importance must be between {MIN_IMPORTANCE} and {MAX_IMPORTANCE}, got {value}")
    return value


@dataclass(frozen=True)
class SurveyState:
    answers: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))
    profile_key: str = ALL_PROFILE
    exposure_type: Optional[str] = None
    position: int = 0
    show_top: Optional[int] = None

    def set_answer(self, attribute_id: str, value: int) -> 'SurveyState':
        answers = dict(self.answers)
        answers[attribute_id] = validate_importance(value)
        return dataclasses.replace(self, answers=MappingProxyType(answers))

    def select_profile(self, profile_key: str) -> 'SurveyState':
        return dataclasses.replace(self, profile_key=profile_key)

    def select_exposure(self, exposure_type: Optional[str]) -> 'SurveyState':
        return dataclasses.replace(self, exposure_type=exposure_type)

    def filter_top(self, top: Optional[int]) -> 'SurveyState':
        return dataclasses.replace(self, show_top=top)

    def next(self, attributes: Sequence[Attribute]) -> 'SurveyState':
        if self.is_complete(attributes):
            return self
        state = self
        current = attributes[self.position]
        if current.id not in self.answers:
            state = state.set_answer(current.id, DEFAULT_IMPORTANCE)
        return dataclasses.replace(state, position=self.position + 1)

    def back(self) -> 'SurveyState':
        return dataclasses.replace(self, position=max(self.position - 1, 0))

    def restart(self) -> 'SurveyState':
        return dataclasses.replace(self, answers=MappingProxyType({}), position=0)

    def is_complete(self, attributes: Sequence[Attribute]) -> bool:
        return self.position >= len(attributes)

    def active_exposure(self, exposure_types: Sequence[str]) -> Optional[str]:
        if not exposure_types:
            return None
        return self.exposure_type or exposure_types[0]


def build_results(model: SurveyModel, state: SurveyState) -> List[ScoredHazard]:
    scored = score(model.hazards, state.answers, model.relevance, model.attributes, state.profile_key)
    return normalise_exposure(scored, model.exposure, state.active_exposure(model.exposure_types))


class SurveySession:
    """Holds the current state for one respondent and notifies listeners on change."""

    def __init__(self, model: SurveyModel, state: Optional[SurveyState] = None) -> None:
        self.model = model
        self._state = state or SurveyState()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> SurveyState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, state: SurveyState) -> SurveyState:
        if state != self._state:
            self._state = state
            for listener in list(self._listeners):
                listener(state)
        return self._state

    def set_answer(self, attribute_id: str, value: int) -> SurveyState:
        return self._commit(self._state.set_answer(attribute_id, value))

    def select_profile(self, profile_key: str) -> SurveyState:
        return self._commit(self._state.select_profile(profile_key))

    def select_exposure(self, exposure_type: Optional[str]) -> SurveyState:
        return self._commit(self._state.select_exposure(exposure_type))

    def filter_top(self, top: Optional[int]) -> SurveyState:
        return self._commit(self._state.filter_top(top))

    def next(self) -> SurveyState:
        return self._commit(self._state.next(self.model.attributes))

    def back(self) -> SurveyState:
        return self._commit(self._state.back())

    def restart(self) -> SurveyState:
        return self._commit(self._state.restart())

    @property
    def current_attribute(self) -> Optional[Attribute]:
        if self._state.is_complete(self.model.attributes):
            return None
        return self.model.attributes[self._state.position]

    def results(self) -> List[ScoredHazard]:
        return build_results(self.model, self._state)
