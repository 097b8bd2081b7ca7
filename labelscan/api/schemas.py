"""Pydantic request/response schemas for the FastAPI endpoints."""

from pydantic import BaseModel, Field


class ExistingEntry(BaseModel):
    """A previously received entry used for duplicate detection."""

    item_number: str | None = None
    barcode: str | None = None


class ExtractRequest(BaseModel):
    """Request body for a single label extraction."""

    text: str
    existing_entries: list[ExistingEntry] = Field(default_factory=list)


class BatchExtractRequest(BaseModel):
    """Request body for extracting several labels at once."""

    texts: list[str]


class FieldsResponse(BaseModel):
    """Extracted fields; ``None`` marks a field that was not found."""

    item_number: str | None = None
    barcode: str | None = None
    quantity: int | None = None


class ReviewResultResponse(BaseModel):
    """Response schema for a single review check."""

    field_name: str
    is_valid: bool
    message: str
    rule_name: str


class ExtractionResponse(BaseModel):
    """Response schema for a label extraction request."""

    success: bool
    fields: FieldsResponse
    missing_fields: list[str]
    duplicate: bool
    all_valid: bool
    review: list[ReviewResultResponse]
    warnings: list[str]
    processing_time_ms: float


class BatchItemResponse(BaseModel):
    """Response schema for a single item in a batch extraction."""

    index: int
    result: ExtractionResponse | None = None
    error: str | None = None


class BatchExtractionResponse(BaseModel):
    """Response schema for batch extraction of several labels."""

    success: bool
    total: int
    complete: int
    partial: int
    empty: int
    results: list[BatchItemResponse]


class PatternsResponse(BaseModel):
    """Active pattern labels per field, in priority order."""

    fields: dict[str, list[str]]
    fallback_enabled: bool


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
