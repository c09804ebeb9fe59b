"""
Typed view of an annonce document.

Annonces are stored as a document made of ``step0`` .. ``step5`` sub-records
filled in by the multi-step submission form. Every step is optional and keeps
unknown keys, so a partially filled document still loads. The accessors on
``Listing`` return a defined default instead of propagating missing steps.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from apps.annonces.enums import MeetingMode, PublicationStatus
from apps.annonces.services.geo import valid_coordinates


class _Step(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True, coerce_numbers_to_str=True)


class IdentityStep(_Step):
    """step0"""
    nom: Optional[str] = None
    prenom: Optional[str] = None


class ProfessionalStep(_Step):
    """step1"""
    fonction: Optional[str] = None
    esg: Optional[str] = None
    domaines_expertise: List[str] = Field(default_factory=list, alias="domainesExpertise")

    @field_validator("domaines_expertise", mode="before")
    @classmethod
    def _coerce_domaines(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return [str(v) for v in value if v is not None]


class PresentationStep(_Step):
    """step2"""
    accroche: Optional[str] = None


class LocationStep(_Step):
    """step3"""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    ville: Optional[str] = None
    type_rdv: Optional[str] = Field(None, alias="typeRdv")

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _drop_non_numeric(cls, value: Any) -> Optional[float]:
        if value is None or value == "" or isinstance(value, bool):
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None


class TermsStep(_Step):
    """step4"""
    # keep numeric rates as numbers
    model_config = ConfigDict(coerce_numbers_to_str=False)

    tarif_horaire: Optional[Union[int, float, str]] = Field(None, alias="tarifHoraire")
    proposition_service: Optional[str] = Field(None, alias="propositionService")


class PublicationStep(_Step):
    """step5"""
    statut_publication: Optional[str] = Field(None, alias="statutPublication")
    nom_annonce: Optional[str] = Field(None, alias="nomAnnonce")


def _tarif_text(value: Optional[Union[int, float, str]]) -> Optional[str]:
    """Rate as typed in the form: 80.0 reads "80", 80.5 reads "80.5"."""
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class Listing(BaseModel):
    """A published (or draft) annonce as returned by the API."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    member_id: Optional[str] = Field(None, alias="memberId")
    nom_annonce: Optional[str] = Field(None, alias="nomAnnonce")
    photo_url: Optional[str] = Field(None, alias="photoURL")
    step0: Optional[IdentityStep] = None
    step1: Optional[ProfessionalStep] = None
    step2: Optional[PresentationStep] = None
    step3: Optional[LocationStep] = None
    step4: Optional[TermsStep] = None
    step5: Optional[PublicationStep] = None
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    @property
    def is_published(self) -> bool:
        return self.step5 is not None and self.step5.statut_publication == PublicationStatus.PUBLISHED.value

    @property
    def domaines(self) -> List[str]:
        """Expertise domains; [] when step1 is missing."""
        return list(self.step1.domaines_expertise) if self.step1 is not None else []

    @property
    def coordinates(self) -> Optional[Tuple[float, float]]:
        """(lat, lng) when step3 holds valid degrees, else None."""
        if self.step3 is None:
            return None
        return valid_coordinates(self.step3.latitude, self.step3.longitude)

    @property
    def type_rdv(self) -> Optional[str]:
        return self.step3.type_rdv if self.step3 is not None else None

    def meeting_mode(self, aliases: Optional[Dict[str, MeetingMode]] = None) -> Optional[MeetingMode]:
        return MeetingMode.parse(self.type_rdv, aliases)

    @property
    def tarif_horaire(self) -> Optional[Union[int, float, str]]:
        return self.step4.tarif_horaire if self.step4 is not None else None

    def searchable_fields(self) -> List[str]:
        """Texts the free-text query is matched against; missing ones are skipped."""
        step0 = self.step0 if self.step0 is not None else IdentityStep()
        step1 = self.step1 if self.step1 is not None else ProfessionalStep()
        step2 = self.step2 if self.step2 is not None else PresentationStep()
        step3 = self.step3 if self.step3 is not None else LocationStep()
        step4 = self.step4 if self.step4 is not None else TermsStep()

        fields = [
            step0.prenom,
            step0.nom,
            step3.ville,
            step1.fonction,
            step3.type_rdv,
            step2.accroche,
            _tarif_text(step4.tarif_horaire),
            *step1.domaines_expertise,
            step4.proposition_service,
        ]
        return [f for f in fields if f]

    def to_public(self) -> Dict[str, Any]:
        """JSON-ready dict using the document's camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
