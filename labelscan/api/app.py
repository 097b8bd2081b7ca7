"""FastAPI application for the label scan service.

Provides REST endpoints for extracting receiving fields from OCR text,
batch extraction, pattern listing, and health checks.
"""

import time
from pathlib import Path

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from labelscan import __version__
from labelscan.extraction.field_extractor import ExtractedFields, FieldExtractor
from labelscan.utils.config import AppConfig, load_config
from labelscan.utils.logger import get_logger
from labelscan.validation.rules_engine import RulesEngine

from .schemas import (
    BatchExtractionResponse,
    BatchExtractRequest,
    BatchItemResponse,
    ExtractionResponse,
    ExtractRequest,
    FieldsResponse,
    HealthResponse,
    PatternsResponse,
    ReviewResultResponse,
)

logger = get_logger(__name__)

app = FastAPI(
    title="Label Scan API",
    description="Extract item number, barcode and unit count from label OCR text",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _get_components() -> tuple[AppConfig, FieldExtractor, RulesEngine]:
    """Initialize and return shared processing components.

    Returns:
        Tuple of (config, field_extractor, rules_engine).
    """
    config = load_config()
    extractor = FieldExtractor.from_config(config.extraction)
    rules_engine = RulesEngine(Path(config.validation.rules_path))
    return config, extractor, rules_engine


def _build_response(
    fields: ExtractedFields,
    rules_engine: RulesEngine,
    profile: str,
    existing: list[dict[str, str | None]],
    start_time: float,
) -> ExtractionResponse:
    report = rules_engine.review(fields, profile, existing)
    return ExtractionResponse(
        success=not fields.is_empty,
        fields=FieldsResponse(
            item_number=fields.item_number,
            barcode=fields.barcode,
            quantity=fields.quantity,
        ),
        missing_fields=report.missing_fields,
        duplicate=report.duplicate,
        all_valid=report.all_valid,
        review=[
            ReviewResultResponse(
                field_name=r.field_name,
                is_valid=r.is_valid,
                message=r.message,
                rule_name=r.rule_name,
            )
            for r in report.results
        ],
        warnings=report.warnings,
        processing_time_ms=(time.time() - start_time) * 1000,
    )


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return system health status."""
    return HealthResponse(status="healthy", version=__version__)


@app.post("/extract", response_model=ExtractionResponse)
async def extract_label(request: ExtractRequest) -> ExtractionResponse:
    """Extract receiving fields from label OCR text.

    An empty result is returned with ``success=False`` so the caller can
    fall back to manual entry; it is not an error.

    Args:
        request: OCR text and optional previously received entries.

    Returns:
        Extracted fields with review results.
    """
    start_time = time.time()
    try:
        config, extractor, rules_engine = _get_components()
        fields = extractor.extract(request.text)
        return _build_response(
            fields,
            rules_engine,
            config.validation.profile,
            [entry.model_dump() for entry in request.existing_entries],
            start_time,
        )
    except Exception as exc:
        logger.error("Extraction failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@app.post("/extract/batch", response_model=BatchExtractionResponse)
async def extract_batch(request: BatchExtractRequest) -> BatchExtractionResponse:
    """Extract receiving fields from several label texts.

    Args:
        request: List of OCR texts.

    Returns:
        Per-text results with complete, partial and empty counts.
    """
    config, extractor, rules_engine = _get_components()
    results: list[BatchItemResponse] = []
    complete = partial = empty = 0

    for index, text in enumerate(request.texts):
        start_time = time.time()
        try:
            fields = extractor.extract(text)
            result = _build_response(
                fields, rules_engine, config.validation.profile, [], start_time
            )
        except Exception as exc:
            logger.error("Extraction failed for item %d: %s", index, exc)
            results.append(BatchItemResponse(index=index, error=str(exc)))
            continue

        if fields.is_empty:
            empty += 1
        elif fields.missing_fields():
            partial += 1
        else:
            complete += 1
        results.append(BatchItemResponse(index=index, result=result))

    return BatchExtractionResponse(
        success=complete + partial > 0,
        total=len(request.texts),
        complete=complete,
        partial=partial,
        empty=empty,
        results=results,
    )


@app.get("/patterns", response_model=PatternsResponse)
async def list_patterns() -> PatternsResponse:
    """List the active extraction patterns per field in priority order."""
    config, extractor, _ = _get_components()
    return PatternsResponse(
        fields=extractor.pattern_labels(),
        fallback_enabled=config.extraction.fallback_enabled,
    )
