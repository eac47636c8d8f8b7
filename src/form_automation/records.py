"""
Form Records

The profile record submitted to the target form, plus the rules for the fields
that are derived from other fields.
"""

import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


EMAIL_DOMAIN = "nitresearchcenter.com"
DEFAULT_FORM_NO = "form"
PASSWORD_SUFFIX = "@1234"
HOW_TO_KNOW_ABOUT_US = "My Friend"

# alias field -> primary field it copies
ALIASED_FIELDS = {
    "educationDetails": "education",
    "subCaste": "caste",
    "homeCityDistrict": "homeState",
    "countryLivingIn": "citizenship",
    "stateCityLivingIn": "homeState",
}


class FormRecord(BaseModel):
    """A single profile to be submitted. Keys serialize in camelCase."""
    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    # Identity
    name: Optional[str] = None
    age: Optional[str] = None
    gender: Optional[str] = None
    marital_status: Optional[str] = None

    # Background
    education: Optional[str] = None
    education_details: Optional[str] = None
    occupation: Optional[str] = None
    religion: Optional[str] = None
    caste: Optional[str] = None
    sub_caste: Optional[str] = None
    gothra: Optional[str] = None
    mother_tongue: Optional[str] = None
    horoscope_match: Optional[str] = None
    star: Optional[str] = None
    raasi_moon_sign: Optional[str] = None
    dosham_manglik: Optional[str] = None

    # Physical
    height_feet: Optional[str] = None
    height_inches: Optional[str] = None
    height_cms: Optional[str] = None
    weight_kg: Optional[str] = None
    weight_lbs: Optional[str] = None
    body_type: Optional[str] = None
    complexion: Optional[str] = None
    physical_status: Optional[str] = None

    # Location
    citizenship: Optional[str] = None
    home_state: Optional[str] = None
    home_city_district: Optional[str] = None
    country_living_in: Optional[str] = None
    state_city_living_in: Optional[str] = None

    # Lifestyle and family
    eating_habit: Optional[str] = None
    drinking_habit: Optional[str] = None
    smoking_habit: Optional[str] = None
    family_value: Optional[str] = None
    family_type: Optional[str] = None
    family_status: Optional[str] = None
    annual_income: Optional[str] = None

    # Free text
    about_parents_siblings: Optional[str] = None
    more_about_self: Optional[str] = None
    your_expectation: Optional[str] = None

    # Account
    email: Optional[str] = None
    retype_email: Optional[str] = None
    password: Optional[str] = None
    retype_password: Optional[str] = None
    how_to_know_about_us: Optional[str] = None

    @property
    def subject_name(self) -> str:
        """Name used in submission logs."""
        return self.name or "N/A"

    def as_fields(self) -> dict[str, str]:
        """Return the record as a flat camelCase field -> string mapping."""
        fields: dict[str, str] = {}
        for key, value in self.model_dump(by_alias=True, exclude_none=True).items():
            if isinstance(value, (str, int, float)) and not isinstance(value, bool):
                fields[key] = str(value)
        return fields


def make_email(name: str, form_no: str = DEFAULT_FORM_NO) -> str:
    """`<formNo>_<name with whitespace as underscores>@nitresearchcenter.com`."""
    email_name = re.sub(r"\s+", "_", name)
    return f"{form_no}_{email_name}@{EMAIL_DOMAIN}"


def make_password(name: str) -> str:
    """First word of the name followed by `@1234`."""
    words = name.split()
    first_name = words[0] if words else ""
    return f"{first_name}{PASSWORD_SUFFIX}"


def derived_fields(fields: dict[str, Any], form_no: str = DEFAULT_FORM_NO) -> dict[str, Any]:
    """Compute the derived fields for a camelCase field mapping."""
    derived: dict[str, Any] = {}

    name = fields.get("name")
    if name:
        derived["email"] = make_email(name, form_no)
        derived["retypeEmail"] = derived["email"]
        derived["password"] = make_password(name)
        derived["retypePassword"] = derived["password"]

    for alias, primary in ALIASED_FIELDS.items():
        derived[alias] = fields.get(primary)

    derived["howToKnowAboutUs"] = HOW_TO_KNOW_ABOUT_US
    return derived


def build_record(fields: dict[str, Any], form_no: str = DEFAULT_FORM_NO) -> FormRecord:
    """Build a record from primary fields, filling in every derived field."""
    merged = dict(fields)
    merged.update(derived_fields(fields, form_no))
    return FormRecord.model_validate(merged)
