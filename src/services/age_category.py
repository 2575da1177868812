"""
Applicant age bands and age-based coverage eligibility.

Age bands drive routing in the review rules:
    seniors   65 and over
    adults    18 to 64
    youth     16 to 17
    children  0 to 15
"""

from dataclasses import dataclass
from datetime import date
from typing import Literal, Optional, Sequence

from config.settings import EligibilityRule, WizardSettings, get_wizard_settings

AgeCategory = Literal["children", "youth", "adults", "seniors"]

CHILDREN: AgeCategory = "children"
YOUTH: AgeCategory = "youth"
ADULTS: AgeCategory = "adults"
SENIORS: AgeCategory = "seniors"


@dataclass(frozen=True)
class EligibilityResult:
    eligible: bool
    start_date: Optional[date] = None


def today(settings: Optional[WizardSettings] = None) -> date:
    """Current date, honouring the configured override."""
    settings = settings or get_wizard_settings()
    return settings.current_date or date.today()


def compute_age(date_of_birth: date, as_of: Optional[date] = None) -> int:
    """Whole years between date_of_birth and as_of (defaults to today)."""
    as_of = as_of or today()
    age = as_of.year - date_of_birth.year
    if (as_of.month, as_of.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


def age_category_from_age(age: int) -> AgeCategory:
    if age >= 65:
        return SENIORS
    if age >= 18:
        return ADULTS
    if age >= 16:
        return YOUTH
    if age >= 0:
        return CHILDREN
    raise ValueError(f"Invalid age [{age}]")


def age_category(date_of_birth: date, as_of: Optional[date] = None) -> AgeCategory:
    """Age band of a person born on date_of_birth."""
    return age_category_from_age(compute_age(date_of_birth, as_of))


def eligibility_by_age(
    date_of_birth: date,
    settings: Optional[WizardSettings] = None,
    rules: Optional[Sequence[EligibilityRule]] = None,
) -> EligibilityResult:
    """
    Check whether coverage is already open for the applicant's age group.

    The first rule whose age range contains the applicant decides. Ages not
    covered by any rule are eligible.
    """
    settings = settings or get_wizard_settings()
    current = today(settings)
    age = compute_age(date_of_birth, current)

    for rule in (rules if rules is not None else settings.eligibility_rules):
        if rule.min_age <= age <= rule.max_age:
            if current < rule.start_date:
                return EligibilityResult(eligible=False, start_date=rule.start_date)
            return EligibilityResult(eligible=True)

    return EligibilityResult(eligible=True)
