import pytest

from src.dentalmap.services.providers import directory_score, estimate_provider, verify_provider
from src.dentalmap.services.providers.invisalign import analyze_name, normalize
from src.dentalmap.services.territories import ValidationError

ORTHO_NAME = "Atlanta Orthodontic Associates"
ORTHO_ADDRESS = "3400 Peachtree Rd NE, Suite 200, Atlanta, GA 30326"
ORTHO_PHONE = "(404) 555-0142"


def test_normalize_strips_punctuation_and_spacing():
    assert normalize("  Smile  Design, P.C. ") == "smile design pc"
    assert normalize(None) == ""


def test_strong_indicator_outranks_weak():
    analysis = analyze_name("Invisalign Smile Center")

    assert analysis["has_strong_indicator"] is True
    assert analysis["matched_weak"] == ["smile", "align"]
    assert directory_score("Invisalign Smile Center")["factors"] == ["strong_name_indicator"]


def test_orthodontic_practice_scores_high():
    result = directory_score(ORTHO_NAME, ORTHO_ADDRESS, ORTHO_PHONE)

    assert result["score"] == 65
    assert result["factors"] == ["strong_name_indicator", "valid_phone", "address_provided", "urban_location"]
    assert result["isProvider"] is True
    assert result["confidence"] == "high"


def test_estimate_breaks_score_into_factors():
    estimate = estimate_provider(ORTHO_NAME, ORTHO_ADDRESS, ORTHO_PHONE)

    assert estimate["factors"] == {
        "nameIndicators": 25,
        "locationFactors": 15,
        "specialization": 40,
        "practiceSize": 5,
    }
    assert estimate["totalScore"] == 85
    assert estimate["confidence"] == "high"
    assert estimate["analysis"]["specialization"]["factors"] == ["orthodontic_specialist", "group_practice"]


@pytest.mark.parametrize(
    "phone, expected_score, confidence, is_provider",
    [(None, 30, "low", False), ("404-555-0100", 40, "medium", True)],
)
def test_phone_moves_a_general_practice_over_the_threshold(phone, expected_score, confidence, is_provider):
    result = directory_score("Bright Smile Dental", "12 Oak St", phone)

    assert result["score"] == expected_score
    assert result["confidence"] == confidence
    assert result["isProvider"] is is_provider


def test_unrelated_name_scores_nothing():
    result = verify_provider("Main Street Family Practice")

    assert result["is_provider"] is False
    assert result["confidence"] == "low"
    assert result["details"]["totalScore"] == 0
    assert result["details"]["estimate"]["totalScore"] == 0


def test_verification_is_flagged_as_heuristic():
    result = verify_provider(ORTHO_NAME, ORTHO_ADDRESS, ORTHO_PHONE)

    assert result["verification_method"] == "database_cross_reference"
    assert result["simulated"] is True
    assert result["data_quality"] == "heuristic"


@pytest.mark.parametrize("name", [None, "", "   "])
def test_practice_name_is_required(name):
    with pytest.raises(ValidationError) as excinfo:
        verify_provider(name)

    assert excinfo.value.detail == {"error": "Practice name required"}
