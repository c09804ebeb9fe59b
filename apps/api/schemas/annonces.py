"""Pydantic schemas for the annonces endpoints"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from apps.annonces.enums import EsgFlag, MeetingMode, SortOrder
from apps.annonces.services.repository import MapBounds
from apps.annonces.services.search import RadiusFilter, SearchQuery
from apps.core.config import settings


class LocalisationIn(BaseModel):
    """Centre and radius (km) for the exact distance filter"""
    lat: Optional[float] = Field(None, ge=-90, le=90, description="Centre latitude")
    lng: Optional[float] = Field(None, ge=-180, le=180, description="Centre longitude")
    rayon: Optional[float] = Field(
        None, gt=0, le=settings.search_max_radius_km, description="Radius in kilometres"
    )


class MapBoundsIn(BaseModel):
    """Visible map rectangle, used as a coarse store-side pre-filter"""
    neLat: float = Field(..., allow_inf_nan=False)
    neLng: float = Field(..., allow_inf_nan=False)
    swLat: float = Field(..., allow_inf_nan=False)
    swLng: float = Field(..., allow_inf_nan=False)

    def to_bounds(self) -> MapBounds:
        return MapBounds(ne_lat=self.neLat, ne_lng=self.neLng, sw_lat=self.swLat, sw_lng=self.swLng)


class SearchRequest(BaseModel):
    """Request schema for POST /search; every field is optional"""
    model_config = ConfigDict(extra="ignore")

    texte: Optional[str] = Field(None, max_length=200, description="Free-text query")
    fonction: Optional[str] = Field(None, max_length=60, description='Category, "empty" for any')
    tri: Optional[Literal["Tarif-croissant", "Tarif-decroissant", ""]] = None
    domaines: Optional[List[str]] = Field(None, max_length=14, description="Expertise domains (any of)")
    esg: Optional[Literal["Oui", "Non", ""]] = None
    typeRDV: Optional[Literal["Presentiel", "Visioconference", ""]] = None
    localisation: Optional[LocalisationIn] = None
    mapBounds: Optional[MapBoundsIn] = None

    def to_query(self) -> SearchQuery:
        localisation = None
        if self.localisation is not None:
            localisation = RadiusFilter(
                lat=self.localisation.lat,
                lng=self.localisation.lng,
                rayon=self.localisation.rayon,
            )
        return SearchQuery(
            texte=self.texte,
            fonction=self.fonction,
            tri=SortOrder(self.tri) if self.tri else None,
            domaines=list(self.domaines or []),
            esg=EsgFlag(self.esg) if self.esg else None,
            type_rdv=MeetingMode.parse(self.typeRDV) if self.typeRDV else None,
            localisation=localisation,
            map_bounds=self.mapBounds.to_bounds() if self.mapBounds else None,
        )


class AnnoncesResponse(BaseModel):
    """List of annonces (search and list endpoints)"""
    success: bool = True
    annonces: List[Dict[str, Any]]


class AnnonceResponse(BaseModel):
    success: bool = True
    annonce: Dict[str, Any]


class SaveStepRequest(BaseModel):
    """One step of the multi-step submission form"""
    annonceId: Optional[str] = Field(None, max_length=128)
    memberId: Optional[str] = Field(None, max_length=128)
    stepIndex: int = Field(..., ge=0, le=5)
    data: Dict[str, Any] = Field(default_factory=dict)


class SaveStepResponse(BaseModel):
    success: bool = True
    annonceId: str
