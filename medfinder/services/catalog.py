from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Iterable, List, Optional

from pydantic import ValidationError

from medfinder.core.config import get_settings
from medfinder.models.schemas import Disease, Symptom

logger = logging.getLogger(__name__)


class CatalogError(Exception):
	"""Raised when the catalog document cannot be parsed."""


@dataclass(frozen=True)
class Catalog:
	symptoms: List[Symptom] = field(default_factory=list)
	diseases: List[Disease] = field(default_factory=list)


def parse_catalog(data: dict) -> Catalog:
	try:
		symptoms = [Symptom.model_validate(s) for s in data.get('symptoms', [])]
		diseases = [Disease.model_validate(d) for d in data.get('diseases', [])]
	except (ValidationError, AttributeError) as exc:
		raise CatalogError(f"Invalid catalog document: {exc}") from exc
	# Upstream display order is by name
	symptoms.sort(key=lambda s: s.name.lower())
	diseases.sort(key=lambda d: d.name.lower())
	return Catalog(symptoms=symptoms, diseases=diseases)


@lru_cache(maxsize=4)
def load_catalog(path: Optional[str] = None) -> Catalog:
	path = os.path.normpath(path or get_settings().catalog_path)
	if not os.path.exists(path):
		logger.warning("Catalog file %s not found, using an empty catalog", path)
		return Catalog()
	try:
		with open(path, 'r', encoding='utf-8') as f:
			data = json.load(f)
	except json.JSONDecodeError as exc:
		raise CatalogError(f"Catalog file {path} is not valid JSON: {exc}") from exc
	catalog = parse_catalog(data)
	logger.info("Loaded %d symptoms and %d diseases from %s", len(catalog.symptoms), len(catalog.diseases), path)
	return catalog


def _matches(name: str, query: str) -> bool:
	return query in (name or '').lower()


def search_symptoms(catalog: Catalog, query: str = '') -> List[Symptom]:
	q = (query or '').strip().lower()
	return [s for s in catalog.symptoms if _matches(s.name, q)]


def search_diseases(catalog: Catalog, query: str = '') -> List[Disease]:
	q = (query or '').strip().lower()
	return [d for d in catalog.diseases if _matches(d.name, q)]


def get_disease(catalog: Catalog, disease_id: int) -> Optional[Disease]:
	return next((d for d in catalog.diseases if d.id == disease_id), None)


def symptom_names(catalog: Catalog, ids: Iterable[int]) -> List[str]:
	# Ids with no catalog entry are skipped
	wanted = set(ids)
	return [s.name for s in catalog.symptoms if s.id in wanted]
