#!/usr/bin/env python3
"""
Annonce search pipeline.

filters -> candidates (store) -> free-text filter -> meeting-type filter
-> radius filter -> price sort

Only the candidate retrieval touches the store; every other stage is a pure
function over the candidate list, so concurrent searches share nothing.
"""

import time
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.orm import Session

from apps.annonces.enums import EsgFlag, MeetingMode, SortOrder, meeting_type_aliases
from apps.annonces.schemas.listing import Listing
from apps.annonces.services.geo import within_radius
from apps.annonces.services.repository import (
    CandidateFilters,
    ListingRepository,
    MapBounds,
    SqlListingRepository,
)
from apps.annonces.services.sorting import sort_by_tarif
from apps.annonces.services.text_match import any_field_matches, normalize

logger = logging.getLogger(__name__)

# The search form sends this when no function is selected
FONCTION_ANY = "empty"


@dataclass(frozen=True)
class RadiusFilter:
    lat: Optional[float] = None
    lng: Optional[float] = None
    rayon: Optional[float] = None

    @property
    def is_active(self) -> bool:
        # Truthiness on purpose: a 0 lat, lng or radius disables the filter
        return bool(self.lat) and bool(self.lng) and bool(self.rayon)


@dataclass
class SearchQuery:
    """Validated search request in domain terms."""
    texte: Optional[str] = None
    fonction: Optional[str] = None
    tri: Optional[SortOrder] = None
    domaines: List[str] = field(default_factory=list)
    esg: Optional[EsgFlag] = None
    type_rdv: Optional[MeetingMode] = None
    localisation: Optional[RadiusFilter] = None
    map_bounds: Optional[MapBounds] = None

    def candidate_filters(self) -> CandidateFilters:
        fonction = self.fonction if self.fonction and self.fonction != FONCTION_ANY else None
        return CandidateFilters(
            fonction=fonction,
            esg=self.esg,
            domaines=[d for d in self.domaines if d],
            bounds=self.map_bounds,
        )


def filter_by_text(listings: List[Listing], texte: Optional[str]) -> List[Listing]:
    """Keep listings with at least one matching searchable field.

    A query that normalizes to "" keeps everything.
    """
    query = normalize(texte)
    if not query:
        return list(listings)
    return [listing for listing in listings if any_field_matches(listing.searchable_fields(), query)]


def filter_by_meeting_mode(listings: List[Listing], wanted: Optional[MeetingMode]) -> List[Listing]:
    if wanted is None:
        return list(listings)
    aliases = meeting_type_aliases()
    return [listing for listing in listings if wanted.accepts(listing.meeting_mode(aliases))]


def filter_by_radius(listings: List[Listing], radius: Optional[RadiusFilter]) -> List[Listing]:
    if radius is None or not radius.is_active:
        return list(listings)
    kept = []
    for listing in listings:
        coords = listing.coordinates
        if coords is None:
            continue
        if within_radius(coords[0], coords[1], radius.lat, radius.lng, radius.rayon):
            kept.append(listing)
    return kept


class AnnonceSearchService:
    """Runs the search pipeline against a listing repository"""

    def __init__(self, repository: ListingRepository):
        self.repository = repository

    def search(self, query: SearchQuery) -> List[Listing]:
        """Return matching published listings; an empty list is a normal outcome."""
        start_time = time.time()

        candidates = self.repository.find_candidates(query.candidate_filters())
        results = filter_by_text(candidates, query.texte)
        after_text = len(results)
        results = filter_by_meeting_mode(results, query.type_rdv)
        results = filter_by_radius(results, query.localisation)
        results = sort_by_tarif(results, query.tri)

        took_ms = round((time.time() - start_time) * 1000, 2)
        logger.info(
            "search texte=%r candidates=%d after_text=%d results=%d took=%sms",
            query.texte, len(candidates), after_text, len(results), took_ms,
        )
        return results


def create_search_service(db: Session) -> AnnonceSearchService:
    """Factory function to create AnnonceSearchService on a SQL session"""
    return AnnonceSearchService(SqlListingRepository(db))
