"""Liveness and listing-store probes for the annonces API."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from apps.annonces.enums import PublicationStatus
from apps.annonces.errors import UpstreamError
from apps.annonces.models import Annonce
from apps.core.config import settings
from apps.core.db import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("", summary="API liveness")
def health() -> dict[str, str]:
    """Answers without touching the listing store."""
    return {"status": "ok", "environment": settings.environment, "timestamp": _now()}


@router.get("/db", summary="Listing store reachability")
def health_db(db: Session = Depends(get_db)) -> dict:
    """Counts published annonces, which fails if the store or its schema is missing."""
    try:
        published = (
            db.query(func.count(Annonce.id))
            .filter(Annonce.statut_publication == PublicationStatus.PUBLISHED.value)
            .scalar()
        )
    except SQLAlchemyError as exc:
        logger.error("Listing store health check failed: %s", exc)
        raise UpstreamError("Listing store unavailable") from exc
    return {"status": "ok", "scope": "db", "published_annonces": published, "timestamp": _now()}
