import logging
from typing import List, Optional

import httpx
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator
from starlette import status

from media_scraper.app.api.deps import get_http_client
from media_scraper.app.core.config import get_settings
from media_scraper.app.schemas.media import (
    ErrorKind,
    ExtractionResult,
    ExtractionSuccess,
    MediaReference,
    SourceTag,
)
from media_scraper.app.services import batch_service, extraction_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["scraper"])


class ExtractRequest(BaseModel):
    url: str


class ExtractBatchRequest(BaseModel):
    urls: List[str] = Field(default_factory=list)

    @field_validator("urls")
    @classmethod
    def _limit_batch_size(cls, urls: List[str]) -> List[str]:
        max_urls = get_settings().batch_max_urls
        if len(urls) > max_urls:
            raise ValueError(f"at most {max_urls} URLs are allowed per batch")
        return urls


class ExtractResponse(BaseModel):
    success: bool
    url: str
    type: SourceTag
    media: Optional[List[MediaReference]] = None
    error: Optional[str] = None
    error_code: Optional[ErrorKind] = None


class ExtractBatchResponse(BaseModel):
    total: int
    success: int
    failed: int
    results: List[ExtractResponse]


def to_response(result: ExtractionResult) -> ExtractResponse:
    outcome = result.outcome
    if isinstance(outcome, ExtractionSuccess):
        return ExtractResponse(success=True, url=result.url, type=result.source_tag, media=outcome.media)
    return ExtractResponse(
        success=False,
        url=result.url,
        type=result.source_tag,
        error=outcome.message,
        error_code=outcome.reason,
    )


@router.post(
    "/extract",
    response_model=ExtractResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ExtractResponse}},
)
async def extract(payload: ExtractRequest, client: httpx.AsyncClient = Depends(get_http_client)):
    result = await extraction_service.extract_media(payload.url, client=client)
    response = to_response(result)
    if not response.success:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=response.model_dump(mode="json", by_alias=True, exclude_none=True),
        )
    return response


@router.post("/extract-batch", response_model=ExtractBatchResponse, response_model_exclude_none=True)
async def extract_batch(payload: ExtractBatchRequest, client: httpx.AsyncClient = Depends(get_http_client)):
    batch = await batch_service.extract_batch(payload.urls, client=client)
    return ExtractBatchResponse(
        total=batch.total,
        success=batch.succeeded,
        failed=batch.failed,
        results=[to_response(item) for item in batch.items],
    )
