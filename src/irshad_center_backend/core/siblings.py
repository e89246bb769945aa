'''
Scoring helpers for sibling suggestions.
'''
from datetime import date
from typing import Optional

from ..database.db_enums import DetectionMethod

# Birth dates closer than this count as "similar age" for name matches.
SIMILAR_AGE_YEARS = 5


def last_name(full_name: Optional[str]) -> Optional[str]:
    """The final word of a name with at least two words, else None."""
    parts = (full_name or '').split()
    if len(parts) < 2:
        return None
    return parts[-1]


def years_apart(first: Optional[date], second: Optional[date]) -> Optional[float]:
    if first is None or second is None:
        return None
    return abs((first - second).days) / 365


def calculate_confidence_score(
    method: DetectionMethod | str,
    shared_guardians: int = 0,
    name_match: bool = False,
    age_difference_years: Optional[float] = None,
    shared_contacts: int = 0
) -> float:
    """
    Confidence in [0, 1] for a sibling link found by `method`.

    - MANUAL: 1.0
    - GUARDIAN_MATCH: 0.9, or 0.95 with more than one shared guardian
    - CONTACT_MATCH: 0.7 plus 0.1 per shared contact, capped at 0.95
    - NAME_MATCH: 0.5 (0.6 on a full name match), plus 0.2 when the ages
      are under SIMILAR_AGE_YEARS apart, capped at 0.9
    """
    method = DetectionMethod(method)
    score = 0.0

    if method == DetectionMethod.MANUAL:
        score = 1.0
    elif method == DetectionMethod.GUARDIAN_MATCH:
        score = 0.95 if shared_guardians > 1 else 0.9
    elif method == DetectionMethod.CONTACT_MATCH:
        score = min(0.7 + shared_contacts * 0.1, 0.95)
    elif method == DetectionMethod.NAME_MATCH:
        score = 0.6 if name_match else 0.5
        if age_difference_years is not None and age_difference_years < SIMILAR_AGE_YEARS:
            score += 0.2
        score = min(score, 0.9)

    return round(min(max(score, 0.0), 1.0), 2)
