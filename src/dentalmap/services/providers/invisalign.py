"""Heuristic Invisalign provider confidence scoring.

No official provider directory is reachable from the backend, so a practice is
scored from what the rep already knows: its name, street address and phone
number. Two scorers are kept. ``directory_score`` is the cross-reference score
that decides the verdict. ``estimate_provider`` is a finer breakdown (name,
location, specialization and size factors, 100 points in total) returned
alongside it so reps can see why a practice scored the way it did. Every
result is flagged ``simulated`` because nothing was checked against the
actual directory.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from ..territories.errors import ValidationError

METHOD_CROSS_REFERENCE = "database_cross_reference"
DATA_QUALITY_HEURISTIC = "heuristic"

DIRECTORY_THRESHOLD = 35
ESTIMATE_THRESHOLD = 40
ESTIMATE_MAX_SCORE = 100

STRONG_NAME_INDICATORS = ("invisalign", "orthodontic", "orthodontist")
WEAK_NAME_INDICATORS = ("smile", "cosmetic", "straighten", "align")
DENTAL_NAME_INDICATORS = ("dental", "dentist", "dds", "dmd")
URBAN_ADDRESS_INDICATORS = ("suite", "avenue", "boulevard", "plaza", "center")
MEDICAL_ADDRESS_INDICATORS = ("medical", "dental", "professional", "healthcare")

_NON_WORD = re.compile(r"[^\w\s]")
_SPACES = re.compile(r"\s+")
_NON_DIGIT = re.compile(r"\D")


def normalize(text: Optional[str]) -> str:
    if not text:
        return ""
    return _SPACES.sub(" ", _NON_WORD.sub("", text.lower())).strip()


def phone_digits(phone: Optional[str]) -> str:
    return _NON_DIGIT.sub("", phone or "")


def analyze_name(name: str) -> dict[str, Any]:
    normalized = normalize(name)
    strong = [word for word in STRONG_NAME_INDICATORS if word in normalized]
    weak = [word for word in WEAK_NAME_INDICATORS if word in normalized]
    return {
        "has_strong_indicator": bool(strong),
        "has_weak_indicator": bool(weak),
        "is_dental": any(word in normalized for word in DENTAL_NAME_INDICATORS),
        "matched_strong": strong,
        "matched_weak": weak,
    }


def _scored(checks: list[tuple[bool, int, str]]) -> dict[str, Any]:
    hits = [(points, factor) for matched, points, factor in checks if matched]
    return {"score": sum(points for points, _ in hits), "factors": [factor for _, factor in hits]}


def analyze_location(address: Optional[str]) -> dict[str, Any]:
    """Up to 25 points for urban and medical-district addresses."""
    normalized = normalize(address)
    if not normalized:
        return {"score": 0, "factors": []}
    return _scored(
        [
            (any(word in normalized for word in URBAN_ADDRESS_INDICATORS), 15, "urban_location"),
            (any(word in normalized for word in MEDICAL_ADDRESS_INDICATORS), 10, "medical_district"),
        ]
    )


def analyze_specialization(name: str) -> dict[str, Any]:
    normalized = normalize(name)
    return _scored(
        [
            ("orthodontic" in normalized or "orthodontist" in normalized, 30, "orthodontic_specialist"),
            ("cosmetic" in normalized, 20, "cosmetic_specialist"),
            ("smile" in normalized or "aesthetic" in normalized, 15, "smile_focused"),
            ("associates" in normalized or "group" in normalized, 10, "group_practice"),
        ]
    )


def analyze_practice_size(name: str, phone: Optional[str]) -> dict[str, Any]:
    normalized = normalize(name)
    return _scored(
        [
            (any(word in normalized for word in ("center", "institute", "clinic")), 15, "large_practice"),
            (any(word in normalized for word in ("professional", "premier", "advanced")), 10, "professional_branding"),
            (len(phone_digits(phone)) == 10, 5, "established_contact"),
        ]
    )


def _confidence(score: int, high: int, medium: int) -> str:
    if score >= high:
        return "high"
    if score >= medium:
        return "medium"
    return "low"


def estimate_provider(name: str, address: Optional[str] = None, phone: Optional[str] = None) -> dict[str, Any]:
    name_analysis = analyze_name(name)
    if name_analysis["has_strong_indicator"]:
        name_points = 25
    elif name_analysis["has_weak_indicator"]:
        name_points = 15
    elif name_analysis["is_dental"]:
        name_points = 5
    else:
        name_points = 0

    location = analyze_location(address)
    specialization = analyze_specialization(name)
    size = analyze_practice_size(name, phone)
    factors = {
        "nameIndicators": name_points,
        "locationFactors": location["score"],
        "specialization": specialization["score"],
        "practiceSize": size["score"],
    }
    total = sum(factors.values())
    return {
        "isProvider": total >= ESTIMATE_THRESHOLD,
        "confidence": _confidence(total, 70, 50),
        "totalScore": total,
        "maxPossibleScore": ESTIMATE_MAX_SCORE,
        "threshold": ESTIMATE_THRESHOLD,
        "factors": factors,
        "analysis": {
            "name": name_analysis,
            "location": location,
            "specialization": specialization,
            "size": size,
        },
    }


def directory_score(name: str, address: Optional[str] = None, phone: Optional[str] = None) -> dict[str, Any]:
    name_analysis = analyze_name(name)
    lowered = (address or "").lower()
    score_card = _scored(
        [
            (name_analysis["has_strong_indicator"], 30, "strong_name_indicator"),
            (
                name_analysis["has_weak_indicator"] and not name_analysis["has_strong_indicator"],
                15,
                "weak_name_indicator",
            ),
            (len(phone_digits(phone)) >= 10, 10, "valid_phone"),
            (bool(address), 15, "address_provided"),
            (any(word in lowered for word in ("ave", "boulevard", "suite")), 10, "urban_location"),
        ]
    )
    score = score_card["score"]
    return {
        "score": score,
        "isProvider": score >= DIRECTORY_THRESHOLD,
        "confidence": _confidence(score, 50, DIRECTORY_THRESHOLD),
        "factors": score_card["factors"],
        "threshold": DIRECTORY_THRESHOLD,
    }


def verify_provider(name: Optional[str], address: Optional[str] = None, phone: Optional[str] = None) -> dict[str, Any]:
    if not name or not name.strip():
        raise ValidationError("Practice name required")
    verdict = directory_score(name, address, phone)
    return {
        "is_provider": verdict["isProvider"],
        "confidence": verdict["confidence"],
        "verification_method": METHOD_CROSS_REFERENCE,
        "simulated": True,
        "data_quality": DATA_QUALITY_HEURISTIC,
        "details": {
            "totalScore": verdict["score"],
            "threshold": verdict["threshold"],
            "scoreFactors": verdict["factors"],
            "estimate": estimate_provider(name, address, phone),
        },
    }
