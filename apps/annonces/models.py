from sqlalchemy import Column, Integer, String, Text, Float, DateTime, JSON, CheckConstraint, ForeignKey, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from apps.core.db import Base


class Annonce(Base):
    """Annonce document plus the columns the search filters run on.

    ``data`` holds the step document as submitted; the flat columns are
    refreshed from it on every save so filters can be pushed to SQL.
    """
    __tablename__ = "annonces"
    __table_args__ = (
        Index("ix_annonces_lat_lng", "latitude", "longitude"),
    )

    # Opaque id (member id by default)
    id = Column(String(128), primary_key=True)
    member_id = Column(String(128), nullable=True, index=True)
    nom_annonce = Column(Text, nullable=True)

    # Filter columns
    statut_publication = Column(String(8), nullable=False, default="Non", index=True)
    fonction = Column(Text, nullable=True)
    esg = Column(String(8), nullable=True)
    type_rdv = Column(Text, nullable=True)
    latitude = Column(Float, CheckConstraint('latitude >= -90 AND latitude <= 90'), nullable=True)
    longitude = Column(Float, CheckConstraint('longitude >= -180 AND longitude <= 180'), nullable=True)

    # Full step document (step0..step5)
    data = Column(JSON, nullable=False, default=dict)
    photo_url = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), default=func.now(), onupdate=func.now(), index=True)

    domaines = relationship(
        "AnnonceDomaine",
        back_populates="annonce",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class AnnonceDomaine(Base):
    """One expertise domain of an annonce (step1.domainesExpertise)"""
    __tablename__ = "annonce_domaines"

    id = Column(Integer, primary_key=True, autoincrement=True)
    annonce_id = Column(String(128), ForeignKey('annonces.id', ondelete='CASCADE'), nullable=False)
    domaine = Column(Text, nullable=False)

    annonce = relationship("Annonce", back_populates="domaines")

    __table_args__ = (
        Index("ix_annonce_domaines_domaine", "domaine"),
        Index("ix_annonce_domaines_annonce_id", "annonce_id"),
    )
