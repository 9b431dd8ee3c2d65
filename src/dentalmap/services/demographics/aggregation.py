"""Population-weighted roll-up of ZIP-level census figures for a territory circle."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Sequence

# Share of each age band assumed to clear the income bar before scaling.
PRIMARY_AGE_SHARE = 0.70
SECONDARY_AGE_SHARE = 0.55
INCOME_BASELINE = 60_000
MIN_INCOME_MULTIPLIER = 0.4
MAX_INCOME_MULTIPLIER = 1.0


@dataclass(slots=True)
class ZipDemographics:
    zip_code: str
    total_population: int = 0
    median_income: int = 0
    median_home_value: int = 0
    bachelors: int = 0
    masters: int = 0
    professional: int = 0
    doctorate: int = 0
    age_25_to_29: int = 0
    age_30_to_34: int = 0
    age_35_to_39: int = 0
    age_40_to_44: int = 0
    age_45_to_49: int = 0
    age_50_to_54: int = 0
    simulated: bool = False

    @property
    def college_educated(self) -> int:
        return self.bachelors + self.masters + self.professional + self.doctorate

    @property
    def prime_age(self) -> int:
        """Residents aged 25-44, the core aligner market."""
        return self.age_25_to_29 + self.age_30_to_34 + self.age_35_to_39 + self.age_40_to_44

    @property
    def secondary_age(self) -> int:
        return self.age_45_to_49 + self.age_50_to_54


def income_multiplier(median_income: int) -> float:
    return min(MAX_INCOME_MULTIPLIER, max(MIN_INCOME_MULTIPLIER, median_income / INCOME_BASELINE))


def aggregate(records: Sequence[ZipDemographics], radius_miles: float) -> dict[str, Any]:
    """Combine ZIP records into territory totals.

    Medians are weighted by each ZIP's population, so a ZIP with no residents
    contributes nothing to income or home value. The qualified audience scales
    the prime (25-44) and secondary (45-54) age bands by a fixed share and by
    how the weighted median income compares with ``INCOME_BASELINE``.
    """

    total_population = sum(record.total_population for record in records)
    income_weight = sum(record.median_income * record.total_population for record in records)
    home_weight = sum(record.median_home_value * record.total_population for record in records)
    prime_age = sum(record.prime_age for record in records)
    secondary_age = sum(record.secondary_age for record in records)

    median_income = income_weight // total_population if total_population else 0
    median_home_value = home_weight // total_population if total_population else 0

    multiplier = income_multiplier(median_income)
    qualified = math.floor(prime_age * PRIMARY_AGE_SHARE * multiplier) + math.floor(
        secondary_age * SECONDARY_AGE_SHARE * multiplier
    )
    area = math.pi * radius_miles * radius_miles

    return {
        "total_population": total_population,
        "qualified_audience": qualified,
        "median_income": median_income,
        "median_home_value": median_home_value,
        "college_educated": sum(record.college_educated for record in records),
        "prime_age": prime_age,
        "secondary_age": secondary_age,
        "qualified_percent": qualified / total_population if total_population else 0.0,
        "area_sq_miles": area,
        "population_density": total_population / area if area else 0.0,
        "zip_codes": [record.zip_code for record in records],
    }
