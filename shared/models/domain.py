"""Domain models for business logic."""
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter


class GeneratedBy(str, Enum):
    """Provenance of a problem node."""
    USER_UPLOAD = "user_upload"
    LLM_SUBPROBLEM = "llm_subproblem"


class ProblemStatus(str, Enum):
    """Lifecycle state of a problem node."""
    ACTIVE = "active"
    SOLVED = "solved"
    ABORTED = "aborted"  # Terminal; only reachable through external administration


# Every status change not listed here is rejected by the store.
ALLOWED_STATUS_TRANSITIONS: dict[ProblemStatus, frozenset[ProblemStatus]] = {
    ProblemStatus.ACTIVE: frozenset({ProblemStatus.SOLVED, ProblemStatus.ABORTED}),
    ProblemStatus.SOLVED: frozenset(),
    ProblemStatus.ABORTED: frozenset(),
}


def is_transition_allowed(current: ProblemStatus, target: ProblemStatus) -> bool:
    """Same-status writes count as allowed (idempotent no-op)."""
    if current == target:
        return True
    return target in ALLOWED_STATUS_TRANSITIONS[current]


class TextContent(BaseModel):
    """Problem stated as text only."""
    kind: Literal["text"] = "text"
    text: str = Field(..., min_length=1)
    category: Optional[str] = None
    title: Optional[str] = None


class ImageContent(BaseModel):
    """Problem known only by its image."""
    kind: Literal["image"] = "image"
    image_url: str = Field(..., min_length=1)


class TextWithImageContent(BaseModel):
    """Image problem with a transcription (or text problem with an attached image)."""
    kind: Literal["text_with_image"] = "text_with_image"
    text: str = Field(..., min_length=1)
    image_url: str = Field(..., min_length=1)
    category: Optional[str] = None
    title: Optional[str] = None


ProblemContent = Annotated[
    Union[TextContent, ImageContent, TextWithImageContent],
    Field(discriminator="kind"),
]

problem_content_adapter: TypeAdapter = TypeAdapter(ProblemContent)


def build_content(
    text: Optional[str] = None,
    image_url: Optional[str] = None,
    category: Optional[str] = None,
    title: Optional[str] = None,
):
    """
    Pick the content variant matching the fields that are present.

    Raises:
        ValueError: if neither text nor image_url is given
    """
    text = text.strip() if text else None
    image_url = image_url.strip() if image_url else None

    if text and image_url:
        return TextWithImageContent(text=text, image_url=image_url, category=category, title=title)
    if text:
        return TextContent(text=text, category=category, title=title)
    if image_url:
        return ImageContent(image_url=image_url)
    raise ValueError("Problem content needs text, an image, or both")


def content_text(content) -> Optional[str]:
    return getattr(content, "text", None)


def content_image_url(content) -> Optional[str]:
    return getattr(content, "image_url", None)


class StudentWork(BaseModel):
    """Evidence a student submits: canvas/photo image URLs plus typed text."""
    images: List[str] = Field(default_factory=list)
    text: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.images and not (self.text and self.text.strip())


class HiddenFields(BaseModel):
    """The confidential pair only the reveal operation may return."""
    hidden_solution: str
    hidden_answer: str
