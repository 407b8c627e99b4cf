"""
Prediction engine: ranks catalog diseases against a set of selected
symptom ids and re-orders each disease's specialists nearest first.

`rank` is a pure function. `PredictionSession` holds the symptom-checker
state (selection, location, latest results) and recomputes from scratch
whenever either input changes.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Set

from medfinder.models.schemas import Coordinate, Disease, PredictionResult
from medfinder.services.catalog import Catalog
from medfinder.services.geo import annotate_specialists
from medfinder.services.geocoding import ReverseGeocoder
from medfinder.services.location import LocationError, LocationProvider, PermissionDenied

logger = logging.getLogger(__name__)


DENIED_MESSAGE = "Location access was denied. Enable location to see nearby specialists."
UNAVAILABLE_MESSAGE = "Unable to get your location. Some features may be limited."


def _score(disease: Disease, selected: Set[int]) -> Optional[PredictionResult]:
    disease_symptoms = set(disease.symptoms)
    match_count = len(disease_symptoms & selected)
    if match_count == 0:
        return None

    total_symptoms = len(disease_symptoms)
    match_ratio = match_count / total_symptoms
    coverage_ratio = match_count / len(selected)
    confidence = (match_ratio + coverage_ratio) / 2 * 100

    return PredictionResult(
        disease=disease,
        match_count=match_count,
        total_symptoms=total_symptoms,
        confidence=confidence,
    )


def rank(diseases: Sequence[Disease], selected_symptoms: Iterable[int], location: Optional[Coordinate] = None) -> List[PredictionResult]:
    """
    Score every disease against the selected symptoms.

    confidence = (matched / disease symptoms + matched / selected) / 2 * 100

    Diseases with no matching symptom are dropped. Results are ordered by
    confidence descending; ties keep catalog order. Each result carries a
    copy of its disease whose specialists are distance-annotated (when
    `location` and the specialist location are both known) and sorted
    nearest first. The input catalog is never modified.
    """
    selected = set(selected_symptoms)
    if not selected:
        return []

    results: List[PredictionResult] = []
    for disease in diseases:
        result = _score(disease, selected)
        if result is None:
            continue
        specialists = annotate_specialists(disease.specialists, location)
        result.disease = disease.model_copy(update={"specialists": specialists}, deep=True)
        results.append(result)

    results.sort(key=lambda r: r.confidence, reverse=True)
    return results


class PredictionSession:
    def __init__(self, catalog: Catalog, location: Optional[Coordinate] = None):
        self.catalog = catalog
        self.selected: List[int] = []
        self.location = location
        self.location_error: Optional[str] = None
        self.results: List[PredictionResult] = []
        self._seq = 0
        self._committed = 0
        self._location_seq = 0

    # -- recomputation ----------------------------------------------------

    def begin(self) -> int:
        self._seq += 1
        return self._seq

    def commit(self, seq: int, results: List[PredictionResult]) -> bool:
        # Only the newest computation may replace the visible results
        if seq <= self._committed:
            logger.debug("Dropping stale prediction #%d (latest committed #%d)", seq, self._committed)
            return False
        self._committed = seq
        self.results = results
        return True

    def recompute(self) -> List[PredictionResult]:
        seq = self.begin()
        results = rank(self.catalog.diseases, self.selected, self.location)
        self.commit(seq, results)
        return self.results

    # -- inputs -----------------------------------------------------------

    def toggle_symptom(self, symptom_id: int) -> List[PredictionResult]:
        if symptom_id in self.selected:
            self.selected = [i for i in self.selected if i != symptom_id]
        else:
            self.selected = self.selected + [symptom_id]
        return self.recompute()

    def select_symptoms(self, symptom_ids: Iterable[int]) -> List[PredictionResult]:
        self.selected = list(dict.fromkeys(symptom_ids))
        return self.recompute()

    def clear_symptoms(self) -> List[PredictionResult]:
        self.selected = []
        return self.recompute()

    def set_location(self, location: Optional[Coordinate]) -> List[PredictionResult]:
        self.location = location
        return self.recompute()

    # -- location ---------------------------------------------------------

    async def refresh_location(self, provider: LocationProvider, geocoder: ReverseGeocoder) -> Optional[Coordinate]:
        self._location_seq += 1
        ticket = self._location_seq

        try:
            coord = await provider.acquire()
            address = await geocoder.describe(coord)
        except LocationError as exc:
            logger.info("Location error: %s", exc)
            if ticket == self._location_seq:
                denied = isinstance(exc, PermissionDenied) or getattr(exc, "permission_denied", False)
                self.location_error = DENIED_MESSAGE if denied else UNAVAILABLE_MESSAGE
            return None

        if ticket != self._location_seq:
            logger.debug("Discarding superseded location fix #%d", ticket)
            return None

        self.location_error = None
        self.set_location(coord.model_copy(update={"address": address}))
        return self.location

    async def retry_location(self, provider: LocationProvider, geocoder: ReverseGeocoder) -> Optional[Coordinate]:
        provider.reset_permission()
        return await self.refresh_location(provider, geocoder)
