import math
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from apps.core.db import get_db
from apps.annonces.errors import BadRequestError, NotFoundError
from apps.annonces.services.repository import MapBounds, SqlListingRepository
from apps.annonces.services.search import create_search_service
from apps.api.schemas.annonces import (
    AnnonceResponse,
    AnnoncesResponse,
    SaveStepRequest,
    SaveStepResponse,
    SearchRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/annonces")


def _coordinate_param(name: str, raw: Optional[str]) -> float:
    if raw is None or not raw.strip():
        raise BadRequestError(f"Missing query parameter: {name}")
    try:
        value = float(raw)
    except ValueError:
        raise BadRequestError(f"Query parameter {name} must be a number") from None
    if not math.isfinite(value):
        raise BadRequestError(f"Query parameter {name} must be a finite number")
    return value


@router.post("/search", response_model=AnnoncesResponse)
async def search_annonces(body: SearchRequest, db: Session = Depends(get_db)):
    """Filter, text-match, geo-filter and sort published annonces"""
    search_service = create_search_service(db)
    results = search_service.search(body.to_query())
    return AnnoncesResponse(annonces=[listing.to_public() for listing in results])


@router.get("/list", response_model=AnnoncesResponse)
async def list_annonces(db: Session = Depends(get_db)):
    """All published annonces, most recently updated first"""
    listings = SqlListingRepository(db).list_published()
    return AnnoncesResponse(annonces=[listing.to_public() for listing in listings])


@router.get("/list-publiques", response_model=AnnoncesResponse, include_in_schema=False)
async def list_annonces_publiques(db: Session = Depends(get_db)):
    return await list_annonces(db)


@router.get("/list-in-bounds", response_model=AnnoncesResponse)
async def list_annonces_in_bounds(
    neLat: Optional[str] = Query(None, description="North-east latitude"),
    neLng: Optional[str] = Query(None, description="North-east longitude"),
    swLat: Optional[str] = Query(None, description="South-west latitude"),
    swLng: Optional[str] = Query(None, description="South-west longitude"),
    db: Session = Depends(get_db),
):
    """Published annonces located inside the map rectangle"""
    bounds = MapBounds(
        ne_lat=_coordinate_param("neLat", neLat),
        ne_lng=_coordinate_param("neLng", neLng),
        sw_lat=_coordinate_param("swLat", swLat),
        sw_lng=_coordinate_param("swLng", swLng),
    )
    listings = SqlListingRepository(db).list_in_bounds(bounds)
    return AnnoncesResponse(annonces=[listing.to_public() for listing in listings])


@router.post("/save-step", response_model=SaveStepResponse)
async def save_step(body: SaveStepRequest, db: Session = Depends(get_db)):
    """Save one step of the submission form; step 5 publishes the annonce"""
    annonce_id = SqlListingRepository(db).save_step(
        step_index=body.stepIndex,
        data=body.data,
        annonce_id=body.annonceId,
        member_id=body.memberId,
    )
    return SaveStepResponse(annonceId=annonce_id)


@router.get("/get/{annonce_id}", response_model=AnnonceResponse)
async def get_annonce(annonce_id: str, db: Session = Depends(get_db)):
    """Fetch one annonce (draft or published) to pre-fill the form"""
    listing = SqlListingRepository(db).get(annonce_id)
    if listing is None:
        raise NotFoundError("Annonce not found")
    return AnnonceResponse(annonce=listing.to_public())
