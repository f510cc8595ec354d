"""
Shared Pydantic types: localized text and media attachments
"""
from pydantic import BaseModel, Field, model_validator
from typing import Dict, Optional

from quizhub.models.enums import Language, MediaKind


LANGUAGE_CODES = {language.value for language in Language}


def check_localized(value: Optional[Dict[str, str]], required: bool = True) -> Optional[Dict[str, str]]:
    """Validate a {language: text} mapping; at least one language must be filled in"""
    if value is None:
        if required:
            raise ValueError("Localized text is required")
        return value
    unknown = set(value) - LANGUAGE_CODES
    if unknown:
        raise ValueError(f"Unsupported language(s): {', '.join(sorted(unknown))}")
    cleaned = {lang: text.strip() for lang, text in value.items() if text and text.strip()}
    if not cleaned:
        raise ValueError("At least one language version of the text is required")
    return cleaned


class Media(BaseModel):
    """Media attached to a question or a choice; images need alternative text"""
    kind: MediaKind
    url: str = Field(..., pattern=r"^https?://.+", max_length=500)
    alt_text: Optional[str] = Field(None, max_length=200)

    @model_validator(mode="after")
    def require_alt_text_for_images(self):
        if self.kind == MediaKind.IMAGE and not (self.alt_text and self.alt_text.strip()):
            raise ValueError("alt_text is required for image media")
        return self
