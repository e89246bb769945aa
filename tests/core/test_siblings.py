'''
testing the sibling suggestion scoring helpers
'''
import pytest
from datetime import date

from src.irshad_center_backend.core.siblings import (
    calculate_confidence_score,
    last_name,
    years_apart,
)
from src.irshad_center_backend.database.db_enums import DetectionMethod


class TestLastName:

    def test_last_word_of_full_name(self):
        assert last_name("  Khadra  Abdi Warsame ") == "Warsame"

    @pytest.mark.parametrize("name", ["Khadra", "", "   ", None])
    def test_single_word_or_empty_has_no_last_name(self, name):
        assert last_name(name) is None


class TestYearsApart:

    def test_order_does_not_matter(self):
        assert years_apart(date(2010, 1, 1), date(2015, 1, 1)) == years_apart(date(2015, 1, 1), date(2010, 1, 1))
        assert years_apart(date(2010, 1, 1), date(2011, 1, 1)) == 1.0

    def test_missing_birth_date(self):
        assert years_apart(date(2010, 1, 1), None) is None


class TestCalculateConfidenceScore:

    def test_manual_is_certain(self):
        assert calculate_confidence_score(DetectionMethod.MANUAL) == 1.0

    def test_guardian_match(self):
        assert calculate_confidence_score(DetectionMethod.GUARDIAN_MATCH, shared_guardians=1) == 0.9
        assert calculate_confidence_score(DetectionMethod.GUARDIAN_MATCH, shared_guardians=2) == 0.95

    @pytest.mark.parametrize("shared_contacts, expected", [
        (0, 0.7),
        (1, 0.8),
        (2, 0.9),
        (5, 0.95),
    ])
    def test_contact_match_grows_with_shared_contacts(self, shared_contacts, expected):
        assert calculate_confidence_score(DetectionMethod.CONTACT_MATCH, shared_contacts=shared_contacts) == expected

    def test_name_match_raised_by_similar_age(self):
        assert calculate_confidence_score(DetectionMethod.NAME_MATCH) == 0.5
        assert calculate_confidence_score(DetectionMethod.NAME_MATCH, age_difference_years=4.9) == 0.7
        assert calculate_confidence_score(DetectionMethod.NAME_MATCH, age_difference_years=5) == 0.5
        assert calculate_confidence_score(DetectionMethod.NAME_MATCH, name_match=True, age_difference_years=1) == 0.8

    def test_accepts_raw_method_name(self):
        assert calculate_confidence_score("GUARDIAN_MATCH") == 0.9
