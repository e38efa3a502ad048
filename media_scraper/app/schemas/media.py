from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, model_validator


class MediaType(str, Enum):
    IMAGE = "image"
    GIF = "gif"
    VIDEO = "video"


class SourceTag(str, Enum):
    TWITTER = "twitter"
    REDDIT = "reddit"
    IMGUR = "imgur"
    DIRECT = "direct"
    UNKNOWN = "unknown"
    INVALID = "invalid"


class ErrorKind(str, Enum):
    INVALID_URL = "invalid_url"
    BLOCKED = "blocked"
    DOMAIN_NOT_ALLOWED = "domain_not_allowed"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    EXTRACTION_FAILED = "extraction_failed"


class MediaReference(BaseModel):
    """A single loadable media item. ``metadata`` is provenance only."""

    model_config = ConfigDict(populate_by_name=True)

    media_url: str = Field(alias="mediaUrl")
    media_type: MediaType = Field(alias="mediaType")
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ExtractionRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str


class ExtractionSuccess(BaseModel):
    success: Literal[True] = True
    media: List[MediaReference]


class ExtractionFailure(BaseModel):
    success: Literal[False] = False
    reason: ErrorKind
    message: str


def _outcome_tag(value: Any) -> str:
    success = value.get("success") if isinstance(value, dict) else getattr(value, "success", None)
    return "success" if success is True else "failure"


# Tagged on ``success``.
ExtractionOutcome = Annotated[
    Union[
        Annotated[ExtractionSuccess, Tag("success")],
        Annotated[ExtractionFailure, Tag("failure")],
    ],
    Discriminator(_outcome_tag),
]


class ExtractionResult(BaseModel):
    """Outcome of running one URL through the extraction pipeline."""

    url: str
    source_tag: SourceTag
    outcome: ExtractionOutcome

    @property
    def succeeded(self) -> bool:
        return isinstance(self.outcome, ExtractionSuccess)


class BatchResult(BaseModel):
    total: int
    succeeded: int
    failed: int
    items: List[ExtractionResult] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_counts(self) -> "BatchResult":
        if len(self.items) != self.total or self.succeeded + self.failed != self.total:
            raise ValueError("batch counts do not add up to the number of items")
        return self

    @classmethod
    def from_items(cls, items: List[ExtractionResult]) -> "BatchResult":
        succeeded = sum(1 for item in items if item.succeeded)
        return cls(
            total=len(items),
            succeeded=succeeded,
            failed=len(items) - succeeded,
            items=items,
        )
