"""
Listing store access.

``ListingRepository`` is the retrieval contract the search pipeline depends on;
``SqlListingRepository`` implements it on the SQLAlchemy models. Equality and
range filters are pushed down to SQL, the text/geo refinement happens in
memory in ``apps.annonces.services.search``.
"""

import copy
import uuid
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from apps.annonces.enums import EsgFlag, PublicationStatus
from apps.annonces.errors import BadRequestError, UpstreamError
from apps.annonces.models import Annonce, AnnonceDomaine
from apps.annonces.schemas.listing import Listing

logger = logging.getLogger(__name__)

PUBLICATION_STEP = 5


@dataclass(frozen=True)
class MapBounds:
    """Rectangle given by its north-east and south-west corners."""
    ne_lat: float
    ne_lng: float
    sw_lat: float
    sw_lng: float


@dataclass
class CandidateFilters:
    """Store-side filters; None / empty means no filter on that dimension."""
    fonction: Optional[str] = None
    esg: Optional[EsgFlag] = None
    domaines: List[str] = field(default_factory=list)
    bounds: Optional[MapBounds] = None


class ListingRepository(ABC):
    """Retrieval contract used by the search pipeline and the list endpoints."""

    @abstractmethod
    def find_candidates(self, filters: CandidateFilters) -> List[Listing]:
        """Published listings matching every filter, newest update first."""

    @abstractmethod
    def list_published(self) -> List[Listing]:
        """All published listings, newest update first."""

    @abstractmethod
    def list_in_bounds(self, bounds: MapBounds) -> List[Listing]:
        """Published listings whose coordinates fall inside ``bounds``."""

    @abstractmethod
    def get(self, annonce_id: str) -> Optional[Listing]:
        """Any listing (published or not) by id."""

    @abstractmethod
    def save_step(
        self,
        step_index: int,
        data: Dict[str, Any],
        annonce_id: Optional[str] = None,
        member_id: Optional[str] = None,
    ) -> str:
        """Merge one submission step into a listing and return its id."""


class SqlListingRepository(ListingRepository):
    """SQLAlchemy-backed listing store"""

    def __init__(self, db: Session):
        self.db = db

    def find_candidates(self, filters: CandidateFilters) -> List[Listing]:
        query = self._published()

        if filters.fonction:
            query = query.filter(Annonce.fonction == filters.fonction)
        if filters.esg is not None:
            query = query.filter(Annonce.esg == filters.esg.value)
        if filters.domaines:
            # array-overlap: at least one shared domain
            with_domain = select(AnnonceDomaine.annonce_id).where(
                AnnonceDomaine.domaine.in_(filters.domaines)
            )
            query = query.filter(Annonce.id.in_(with_domain))
        if filters.bounds is not None:
            query = self._within_bounds(query, filters.bounds)

        return self._fetch(query, "find_candidates")

    def list_published(self) -> List[Listing]:
        return self._fetch(self._published(), "list_published")

    def list_in_bounds(self, bounds: MapBounds) -> List[Listing]:
        return self._fetch(self._within_bounds(self._published(), bounds), "list_in_bounds")

    def get(self, annonce_id: str) -> Optional[Listing]:
        try:
            row = self.db.get(Annonce, annonce_id)
        except SQLAlchemyError as exc:
            logger.error("Annonce lookup failed for %s: %s", annonce_id, exc)
            raise UpstreamError(str(exc)) from exc
        return self._to_listing(row) if row is not None else None

    def save_step(
        self,
        step_index: int,
        data: Dict[str, Any],
        annonce_id: Optional[str] = None,
        member_id: Optional[str] = None,
    ) -> str:
        annonce_id = annonce_id or member_id or str(uuid.uuid4())
        step_key = f"step{step_index}"

        try:
            row = self.db.get(Annonce, annonce_id)
            if row is None:
                row = Annonce(id=annonce_id, data={})
                self.db.add(row)

            document = copy.deepcopy(row.data or {})
            step = dict(document.get(step_key) or {})
            step.update(data or {})

            # Only saving the last step publishes; any other edit unpublishes
            if step_index == PUBLICATION_STEP:
                step["statutPublication"] = PublicationStatus.PUBLISHED.value
                document["nomAnnonce"] = step.get("nomAnnonce") or ""
            elif "step5" in document:
                document["step5"] = {
                    **document["step5"],
                    "statutPublication": PublicationStatus.DRAFT.value,
                }
            document[step_key] = step
            document["annonceId"] = annonce_id
            if member_id:
                document["memberId"] = member_id
                row.member_id = member_id

            # JSON columns only track reassignment
            row.data = document
            self._refresh_columns(row, document)
            row.updated_at = datetime.now(timezone.utc)

            self.db.commit()
        except ValidationError as exc:
            self.db.rollback()
            raise BadRequestError(f"Invalid data for {step_key}: {exc.error_count()} error(s)") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Saving %s of annonce %s failed: %s", step_key, annonce_id, exc)
            raise UpstreamError(str(exc)) from exc

        logger.info("Saved %s of annonce %s (statut=%s)", step_key, annonce_id, row.statut_publication)
        return annonce_id

    def _published(self):
        return self.db.query(Annonce).filter(
            Annonce.statut_publication == PublicationStatus.PUBLISHED.value
        )

    @staticmethod
    def _within_bounds(query, bounds: MapBounds):
        # NULL coordinates never satisfy BETWEEN
        return query.filter(
            Annonce.latitude.between(bounds.sw_lat, bounds.ne_lat),
            Annonce.longitude.between(bounds.sw_lng, bounds.ne_lng),
        )

    def _fetch(self, query, operation: str) -> List[Listing]:
        try:
            rows = query.order_by(Annonce.updated_at.desc(), Annonce.id).all()
        except SQLAlchemyError as exc:
            logger.error("Listing store query %s failed: %s", operation, exc)
            raise UpstreamError(str(exc)) from exc
        logger.debug("%s returned %d annonces", operation, len(rows))
        return [self._to_listing(row) for row in rows]

    @staticmethod
    def _to_listing(row: Annonce) -> Listing:
        document = dict(row.data or {})
        document.update(
            id=row.id,
            memberId=row.member_id,
            nomAnnonce=row.nom_annonce,
            photoURL=row.photo_url,
            updatedAt=row.updated_at,
        )
        return Listing.model_validate(document)

    @staticmethod
    def _refresh_columns(row: Annonce, document: Dict[str, Any]) -> None:
        """Copy the filterable values out of the step document."""
        listing = Listing.model_validate({**document, "id": row.id})
        step1 = listing.step1
        step3 = listing.step3

        row.statut_publication = (
            PublicationStatus.PUBLISHED.value if listing.is_published else PublicationStatus.DRAFT.value
        )
        row.nom_annonce = document.get("nomAnnonce", row.nom_annonce)
        row.fonction = step1.fonction if step1 else None
        row.esg = step1.esg if step1 else None
        row.type_rdv = step3.type_rdv if step3 else None

        coords = listing.coordinates
        row.latitude, row.longitude = coords if coords else (None, None)

        wanted = list(dict.fromkeys(listing.domaines))
        if [d.domaine for d in row.domaines] != wanted:
            row.domaines = [AnnonceDomaine(domaine=d) for d in wanted]
