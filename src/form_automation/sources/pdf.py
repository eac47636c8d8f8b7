"""
PDF Record Source

Extracts text from an uploaded PDF and parses the `Name:`-led profile blocks
it contains into form records.
"""

import logging
import re

import pymupdf

from ..errors import SourceError
from ..records import FormRecord, build_record


logger = logging.getLogger(__name__)

RECORD_MARKER = "Name:"

# Free-text sections run up to the next section label.
FIELD_PATTERNS: dict[str, re.Pattern] = {
    "name": re.compile(r"Name:\s*(.+)"),
    "age": re.compile(r"Age:\s*(\d+)"),
    "gender": re.compile(r"Gender:\s*(.+)"),
    "maritalStatus": re.compile(r"Marital Status:\s*(.+)"),
    "education": re.compile(r"Education:\s*(.+)"),
    "occupation": re.compile(r"Occupation:\s*(.+)"),
    "religion": re.compile(r"Religion:\s*(.+)"),
    "caste": re.compile(r"Caste:\s*(.+)"),
    "gothra": re.compile(r"Gothra:\s*(.+)"),
    "motherTongue": re.compile(r"Mother Tongue:\s*(.+)"),
    "horoscopeMatch": re.compile(r"Horoscope Match:\s*(.+)"),
    "star": re.compile(r"Star:\s*(.+)"),
    "raasiMoonSign": re.compile(r"Raasi / Moon Sign:\s*(.+)"),
    "doshamManglik": re.compile(r"Dosham / Manglik:\s*(.+)"),
    "heightFeet": re.compile(r"Height:\s*(\d+)'"),
    "heightInches": re.compile(r"Height:\s*\d+'\s*(\d+)\""),
    "heightCms": re.compile(r"Height \(cms\):\s*(\d+)"),
    "weightKg": re.compile(r"Weight \(Kg\):\s*([\d.]+)"),
    "weightLbs": re.compile(r"Weight \(Lbs\):\s*([\d.]+)"),
    "citizenship": re.compile(r"Citizenship:\s*(.+)"),
    "homeState": re.compile(r"Home State:\s*(.+)"),
    "bodyType": re.compile(r"Body Type:\s*(.+)"),
    "complexion": re.compile(r"Complexion:\s*(.+)"),
    "physicalStatus": re.compile(r"Physical Status:\s*(.+)"),
    "eatingHabit": re.compile(r"Eating Habit:\s*(.+)"),
    "drinkingHabit": re.compile(r"Drinking Habit:\s*(.+)"),
    "smokingHabit": re.compile(r"Smoking Habit:\s*(.+)"),
    "familyValue": re.compile(r"Family Value:\s*(.+)"),
    "familyType": re.compile(r"Family Type:\s*(.+)"),
    "familyStatus": re.compile(r"Family Status:\s*(.+)"),
    "annualIncome": re.compile(r"Annual Income:\s*(.+)"),
    "aboutParentsSiblings": re.compile(r"About Parents/Siblings:\s*([\s\S]+?)(?=More About Self:)"),
    "moreAboutSelf": re.compile(r"More About Self:\s*([\s\S]+?)(?=Your Expectation:)"),
    "yourExpectation": re.compile(r"Your Expectation:\s*([\s\S]+)"),
}


def extract_text_from_pdf(file_bytes: bytes) -> str:
    """Extract text from PDF using PyMuPDF."""
    try:
        doc = pymupdf.open(stream=file_bytes, filetype="pdf")
    except RuntimeError as e:
        raise SourceError(f"Invalid or corrupted PDF file: {e}") from e

    try:
        if doc.is_encrypted:
            raise SourceError("Password-protected PDFs are not supported.")
        if doc.page_count == 0:
            raise SourceError("PDF file has no pages.")
        return "".join(page.get_text() for page in doc)
    finally:
        doc.close()


def _clean(value: str) -> str:
    return re.sub(r"\s+", " ", value.strip())


def parse_block(block: str) -> dict[str, str]:
    """Apply the field pattern table to one record block."""
    fields: dict[str, str] = {}
    for key, pattern in FIELD_PATTERNS.items():
        match = pattern.search(block)
        if match and match.group(1):
            value = _clean(match.group(1))
            if value:
                fields[key] = value
    return fields


def parse_records(text: str) -> list[FormRecord]:
    """
    Parse every `Name:`-led block in the text into a record.

    Text before the first marker is ignored, and blocks where no name could be
    captured are dropped rather than emitted as partial records.
    """
    records: list[FormRecord] = []

    for block in re.split(rf"(?={re.escape(RECORD_MARKER)})", text):
        if not block.strip().startswith(RECORD_MARKER):
            continue

        fields = parse_block(block)
        if not fields.get("name"):
            logger.debug("Dropping record block without a name")
            continue

        records.append(build_record(fields))

    return records
