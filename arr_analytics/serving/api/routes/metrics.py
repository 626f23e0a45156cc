"""
Metrics API Endpoints

Upload a billing export and receive the computed recurring-revenue
metrics with their diagnostics.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, File, HTTPException, Query, UploadFile
import structlog

from arr_analytics.config import get_settings
from arr_analytics.metrics import MetricsProcessor, ProcessingError

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.post("")
async def compute_metrics(
    file: UploadFile = File(..., description="Billing export (CSV)"),
    now: Optional[datetime] = Query(
        default=None,
        description="Reference instant for all periods; defaults to the current UTC time",
    ),
    cents_threshold: Optional[float] = Query(
        default=None,
        gt=0,
        description="Bare amounts above this are treated as cents",
    ),
) -> Dict[str, Any]:
    """
    Compute ARR, retention, cohort and monthly metrics for an uploaded export.
    """
    settings = get_settings()
    content = await file.read()

    if len(content) > settings.metrics.max_upload_bytes:
        raise HTTPException(status_code=413, detail="Export exceeds the maximum upload size")

    reference = now or datetime.now(timezone.utc)
    logger.info(
        "Metrics requested",
        filename=file.filename,
        size=len(content),
        reference_date=reference.isoformat(),
    )

    processor = MetricsProcessor(cents_threshold=cents_threshold)
    try:
        report = await processor.process_file(content, now=reference)
    except ProcessingError as e:
        logger.warning("Export rejected", filename=file.filename, reason=e.reason)
        raise HTTPException(status_code=422, detail=e.reason)

    return report.model_dump(by_alias=True, mode="json")
