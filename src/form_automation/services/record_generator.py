"""
AI Record Generation

Turns a free-text description of a person into a form record using OpenAI.
Derived fields (credentials, aliases) are recomputed locally so they never
depend on the model's output.
"""

import json
import logging
from typing import Optional

from openai import OpenAI
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import RecordGenerationError
from ..records import FormRecord, build_record, derived_fields


logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an expert at parsing user descriptions and converting them into "
    "structured JSON data. Return ONLY valid JSON."
)

PROMPT_TEMPLATE = """Generate a single JSON record based on the provided form number and description.

formNo={form_no}
Description: {description}

Adhere strictly to the following keys (all values are strings):
- name, age, gender, maritalStatus, education, occupation
- religion (one of: "Hindu", "Muslim", "Sikh", "Christian", "Other")
- caste, gothra, motherTongue, horoscopeMatch
- star (one of: "Ashwini", "Bharani", "Krittika", "Other")
- raasiMoonSign
- doshamManglik (one of: "Yes", "No", "Other")
- heightFeet (e.g. "5 ft"), heightInches (e.g. "7 in"), heightCms (e.g. "170 cm")
- weightKg (e.g. "76 kg"), weightLbs (e.g. "138 lbs")
- citizenship (one of: "India", "USA", "Canada")
- homeState
- bodyType (one of: "Slim", "Average", "Athletic", "Heavy", "Other")
- complexion, physicalStatus
- eatingHabit (one of: "Vegetarian", "Non-Vegetarian", "Eggetarian", "Others")
- drinkingHabit
- smokingHabit (one of: "No", "Occasionally", "Yes", "Other")
- familyValue (one of: "Other", "Traditional", "Moderate", "Liberal")
- familyType (one of: "Joint", "Nuclear")
- familyStatus, annualIncome
- aboutParentsSiblings, moreAboutSelf, yourExpectation (each ending with a full stop)
"""


class GenerateRecordRequest(BaseModel):
    """Input for AI record generation."""
    model_config = ConfigDict(populate_by_name=True)

    form_no: str = Field(alias="formNo", min_length=1)
    description: str = Field(min_length=1)


def _strip_code_fences(content: str) -> str:
    content = content.strip()
    if content.startswith("```json"):
        content = content[7:]
    if content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]
    return content.strip()


class RecordGenerator:
    """Generates form records from natural-language descriptions."""

    def __init__(self, api_key: Optional[str] = None, model: str = "gpt-4o", client: Optional[OpenAI] = None):
        self.model = model
        self._api_key = api_key
        self._client = client

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            if not self._api_key:
                raise RecordGenerationError("OPENAI_API_KEY is not configured.")
            self._client = OpenAI(api_key=self._api_key)
        return self._client

    def generate(self, request: GenerateRecordRequest) -> FormRecord:
        prompt = PROMPT_TEMPLATE.format(form_no=request.form_no, description=request.description)

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=0,
            )
        except RecordGenerationError:
            raise
        except Exception as e:
            raise RecordGenerationError(f"AI generation failed: {e}") from e

        content = response.choices[0].message.content or ""
        try:
            data = json.loads(_strip_code_fences(content))
        except json.JSONDecodeError as e:
            raise RecordGenerationError(f"Failed to parse AI response as JSON: {e}") from e

        if not isinstance(data, dict) or not data.get("name"):
            raise RecordGenerationError("AI failed to generate a valid record.")

        derived_keys = set(derived_fields({}))
        derived_keys.update({"email", "retypeEmail", "password", "retypePassword"})
        primary = {key: value for key, value in data.items() if key not in derived_keys}
        logger.info("Generated record for form %s", request.form_no)
        try:
            return build_record(primary, form_no=request.form_no)
        except ValidationError as e:
            raise RecordGenerationError(f"AI returned an invalid record: {e.errors()[0]['msg']}") from e
