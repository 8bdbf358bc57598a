from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_PRESENTATION_TITLE = "Generated Presentation"


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# --- Request payloads ---
class AnalyzeRequest(BaseModel):
    # Every field is optional here; presence is checked by the pipeline so
    # that a missing field produces the API's own 400 message.
    text: Optional[str] = None
    guidance: Optional[str] = None
    provider: Optional[str] = None
    apiKey: Optional[str] = None


# --- Slide document ---
class Slide(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    title: str
    content: Optional[Union[List[str], str]] = None
    type: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("content", mode="before")
    @classmethod
    def _coerce_content(cls, value: Any) -> Any:
        # Models occasionally emit numbers, alone or inside bullet lists
        if isinstance(value, list):
            return [item if isinstance(item, str) else str(item) for item in value if item is not None]
        if _is_scalar(value):
            return str(value)
        return value

    @field_validator("type", "notes", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)


class SlideDocument(BaseModel):
    """Validated slide outline; `slides` order is presentation order."""

    model_config = ConfigDict(frozen=True, extra="allow")

    presentationTitle: str = DEFAULT_PRESENTATION_TITLE
    totalSlides: int = Field(default=0, ge=0)
    slides: List[Slide]

    @model_validator(mode="before")
    @classmethod
    def _fill_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        slides = data.get("slides")
        if not isinstance(slides, list):
            return data

        data = dict(data)
        filled = []
        for index, slide in enumerate(slides):
            # Anything that is not an object still takes a place in the deck
            if not isinstance(slide, dict):
                slide = {}
            title = slide.get("title")
            if _is_scalar(title):
                title = str(title)
            if not isinstance(title, str) or not title.strip():
                title = f"Slide {index + 1}"
            filled.append({**slide, "title": title})
        data["slides"] = filled

        total = data.get("totalSlides")
        if isinstance(total, bool) or not isinstance(total, int) or total <= 0:
            data["totalSlides"] = len(filled)

        title = data.get("presentationTitle")
        if not isinstance(title, str) or not title.strip():
            data["presentationTitle"] = DEFAULT_PRESENTATION_TITLE
        return data


# --- Template styling ---
class BackgroundFill(BaseModel):
    model_config = ConfigDict(frozen=True)

    color: str = "FFFFFF"


class ThemeDescriptor(BaseModel):
    """Style hints pulled out of an uploaded template."""

    model_config = ConfigDict(frozen=True)

    titleFont: str = "Arial"
    titleFontSize: int = 32
    titleColor: str = "1F4E79"
    contentFont: str = "Arial"
    contentFontSize: int = 18
    contentColor: str = "404040"
    background: BackgroundFill = Field(default_factory=BackgroundFill)
