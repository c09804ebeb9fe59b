import math
import re
from typing import List, Optional, Sequence, TypeVar, Union

from apps.annonces.enums import SortOrder

T = TypeVar("T")

# Leading decimal number, the way a form field like "45.5 €/h" is read
_LEADING_NUMBER_RE = re.compile(r"^\s*[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?")


def parse_tarif(value: Union[int, float, str, None]) -> float:
    """Hourly rate as float; missing or unparseable values count as 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _LEADING_NUMBER_RE.match(str(value))
        if not match:
            return 0.0
        number = float(match.group(0))
    return number if math.isfinite(number) else 0.0


def sort_by_tarif(listings: Sequence[T], order: Optional[SortOrder]) -> List[T]:
    """Stable price sort; any other order keeps the incoming (store) order."""
    if order is SortOrder.PRICE_ASC:
        return sorted(listings, key=lambda item: parse_tarif(item.tarif_horaire))
    if order is SortOrder.PRICE_DESC:
        # reverse=True keeps ties in their original relative order
        return sorted(listings, key=lambda item: parse_tarif(item.tarif_horaire), reverse=True)
    return list(listings)
