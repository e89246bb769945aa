'''
Duplicate detection over an in-memory roster snapshot.

Students are indexed by normalized email and by the last ten digits of their
phone number; any index bucket holding more than one record becomes a group.
A record can land in an email group and a phone group at the same time.
'''
import re
from typing import Iterable, Optional, Sequence

from ..models.students import StudentSnapshot, DuplicateGroup

PHONE_MATCH_DIGITS = 10

_NON_DIGITS = re.compile(r'\D')


def normalize_email(email: Optional[str]) -> Optional[str]:
    if email is None:
        return None
    normalized = email.strip().lower()
    return normalized or None


def normalize_phone(phone: Optional[str]) -> Optional[str]:
    """Strips everything but digits."""
    if phone is None:
        return None
    digits = _NON_DIGITS.sub('', phone)
    return digits or None


def phone_match_key(phone: Optional[str]) -> Optional[str]:
    """
    Last ten digits of the phone, so '555-123-4567' and '+1 (555) 123-4567'
    collide. Numbers shorter than ten digits never match anything.
    """
    digits = normalize_phone(phone)
    if digits is None or len(digits) < PHONE_MATCH_DIGITS:
        return None
    return digits[-PHONE_MATCH_DIGITS:]


def _keep_priority(record: StudentSnapshot) -> tuple:
    # Lower sorts first: subscribed, then batched, then oldest.
    return (
        record.subscription is None,
        record.batch_id is None,
        record.created_at,
    )


def select_keep_record(records: Sequence[StudentSnapshot]) -> StudentSnapshot:
    """
    Picks the record to keep from a duplicate group.
    Full ties resolve to the earliest record in input order.
    """
    if not records:
        raise ValueError("Cannot select a keep record from an empty group.")
    return min(records, key=_keep_priority)


def _build_index(students: Iterable[StudentSnapshot]) -> dict[str, list[StudentSnapshot]]:
    index: dict[str, list[StudentSnapshot]] = {}
    for student in students:
        email = normalize_email(student.email)
        if email:
            index.setdefault(f"email:{email}", []).append(student)

        phone = phone_match_key(student.phone)
        if phone:
            index.setdefault(f"phone:{phone}", []).append(student)
    return index


def find_duplicate_groups(students: Iterable[StudentSnapshot]) -> list[DuplicateGroup]:
    """
    Groups likely duplicates for manual review.
    Output order follows the first appearance of each key in the input.
    """
    groups = []
    for key, members in _build_index(students).items():
        if len(members) < 2:
            continue

        keep = select_keep_record(members)
        match_type, match_value = key.split(':', 1)
        groups.append(DuplicateGroup(
            key=key,
            match_type=match_type,
            match_value=match_value,
            keep_record=keep,
            duplicate_records=[m for m in members if m is not keep]
        ))
    return groups
