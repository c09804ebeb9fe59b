"""
Closed value sets used by annonce documents and search requests.

Raw strings coming from the submission flow are mapped onto these enums at the
boundary; the search pipeline never compares raw spellings itself.
"""

import logging
from enum import Enum
from typing import Dict, List, Optional

from apps.core.config import settings
from apps.core.config_cache import load_yaml_cached
from apps.annonces.services.text_match import normalize

logger = logging.getLogger(__name__)


class PublicationStatus(str, Enum):
    """statutPublication"""
    PUBLISHED = "Oui"
    DRAFT = "Non"


class EsgFlag(str, Enum):
    YES = "Oui"
    NO = "Non"


class SortOrder(str, Enum):
    """Price sort requested by the search form (``tri``)."""
    PRICE_ASC = "Tarif-croissant"
    PRICE_DESC = "Tarif-decroissant"


# Fallback when config/meeting_types.yml is absent
DEFAULT_MEETING_TYPE_ALIASES: Dict[str, List[str]] = {
    "presentiel": ["Presentiel", "Présentiel"],
    "visioconference": ["Visioconference", "Visioconférence", "Visio"],
    "both": [
        "Présentiel ou visioconférence",
        "Presentiel ou visioconference",
        "Presentiel-ou-visioconference",
        "Présentiel-ou-visioconférence",
        "Presentiel ou Visio",
    ],
}


class MeetingMode(str, Enum):
    """Meeting mode offered by a listing (``step3.typeRdv``)."""
    PRESENTIEL = "presentiel"
    VISIOCONFERENCE = "visioconference"
    BOTH = "both"

    @classmethod
    def parse(
        cls, raw: Optional[str], aliases: Optional[Dict[str, "MeetingMode"]] = None
    ) -> Optional["MeetingMode"]:
        """Map any accepted spelling onto a mode; unknown values give None.

        Pass ``aliases`` (from ``meeting_type_aliases()``) when parsing many values.
        """
        key = normalize(raw)
        if not key:
            return None
        if aliases is None:
            aliases = meeting_type_aliases()
        return aliases.get(key)

    def accepts(self, listed: Optional["MeetingMode"]) -> bool:
        """True if a listing offering ``listed`` satisfies a request for ``self``."""
        if listed is None:
            return False
        return listed is self or listed is MeetingMode.BOTH


def meeting_type_aliases() -> Dict[str, MeetingMode]:
    """Normalized spelling -> mode, read from the YAML alias table."""
    cfg = load_yaml_cached(
        settings.meeting_types_path,
        default={"meeting_types": DEFAULT_MEETING_TYPE_ALIASES},
    )
    table = cfg.get("meeting_types") or DEFAULT_MEETING_TYPE_ALIASES

    # Canonical names always resolve to their own mode
    aliases: Dict[str, MeetingMode] = {normalize(mode.value): mode for mode in MeetingMode}
    for mode_name, spellings in table.items():
        try:
            mode = MeetingMode(str(mode_name).strip().lower())
        except ValueError:
            logger.warning("Unknown meeting type %r in alias table, skipped", mode_name)
            continue
        if isinstance(spellings, str):
            spellings = [spellings]
        for spelling in spellings or []:
            key = normalize(spelling)
            if key:
                aliases[key] = mode
    return aliases
