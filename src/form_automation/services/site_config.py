"""
Site Configuration

Target URL, field selectors and pacing for the form being automated, read from
the `config/siteMapping` document.
"""

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from ..browsers.filler import SUBMIT_KEY
from ..errors import ConfigurationError
from ..storage import DocumentStore


CONFIG_COLLECTION = "config"
SITE_MAPPING_DOC = "siteMapping"
DEFAULT_DELAY_MS = 2500


class SiteConfiguration(BaseModel):
    """Where to submit and how to find each field."""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    target_url: str = Field(min_length=1)
    selectors: dict[str, str]
    delay_ms: int = Field(default=DEFAULT_DELAY_MS, ge=0)

    @field_validator("selectors")
    @classmethod
    def require_submit_selector(cls, selectors: dict[str, str]) -> dict[str, str]:
        if not selectors.get(SUBMIT_KEY):
            raise ValueError(f'selectors must include a "{SUBMIT_KEY}" locator')
        return selectors


class SiteConfigProvider:
    """Loads and stores the site mapping document."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def load(self) -> SiteConfiguration:
        data = self.store.get(CONFIG_COLLECTION, SITE_MAPPING_DOC)
        if data is None:
            raise ConfigurationError("siteMapping configuration not found.")
        if not data.get("targetUrl") or not data.get("selectors"):
            raise ConfigurationError("targetUrl or selectors missing from siteMapping config.")
        if data.get("delayMs") is None:
            data = {k: v for k, v in data.items() if k != "delayMs"}

        try:
            return SiteConfiguration.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid siteMapping config: {e.errors()[0]['msg']}") from e

    def save(self, config: SiteConfiguration) -> None:
        self.store.set(CONFIG_COLLECTION, SITE_MAPPING_DOC, config.model_dump(by_alias=True))
