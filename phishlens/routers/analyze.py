import logging
import random

from fastapi import APIRouter, Depends, HTTPException

from phishlens.dependencies import ImageUpload, get_rng, get_storage, image_upload
from phishlens.schemas import AnalysisResponse, ScanCreate, URLAnalyzeRequest
from phishlens.services.screenshot_analyzer import analyze_screenshot
from phishlens.services.url_analyzer import analyze_url
from phishlens.storage import MemStorage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analyze", tags=["analyze"])


@router.post("/url", response_model=AnalysisResponse)
def analyze_url_endpoint(
    payload: URLAnalyzeRequest,
    storage: MemStorage = Depends(get_storage),
    rng: random.Random = Depends(get_rng),
):
    """
    Score a URL, store the result as a ``url`` scan and return it.
    ``analysisTime`` is cosmetic, not measured.
    """
    try:
        analysis = analyze_url(payload.url)
        scan = storage.create_scan(
            ScanCreate(type="url", target=payload.url, **analysis.model_dump())
        )
    except Exception:
        logger.exception(f"URL analysis failed for {payload.url!r}")
        raise HTTPException(status_code=500, detail="Analysis failed")

    logger.info(f"Scan {scan.id}: {payload.url!r} -> {analysis.verdict} ({analysis.confidence})")

    return AnalysisResponse(
        scan_id=scan.id,
        analysis_time=rng.random() * 2 + 0.5,
        **analysis.model_dump(),
    )


@router.post("/screenshot", response_model=AnalysisResponse)
def analyze_screenshot_endpoint(
    upload: ImageUpload = Depends(image_upload),
    storage: MemStorage = Depends(get_storage),
    rng: random.Random = Depends(get_rng),
):
    """
    Run the mock screenshot analyzer on an uploaded image and store the scan.
    """
    try:
        analysis = analyze_screenshot(upload.filename, upload.content, rng=rng)
        scan = storage.create_scan(
            ScanCreate(type="screenshot", target=upload.filename, **analysis.model_dump())
        )
    except Exception:
        logger.exception(f"Screenshot analysis failed for {upload.filename!r}")
        raise HTTPException(status_code=500, detail="Screenshot analysis failed")

    logger.info(f"Scan {scan.id}: {upload.filename!r} -> {analysis.verdict} ({analysis.confidence})")

    return AnalysisResponse(
        scan_id=scan.id,
        analysis_time=rng.random() * 3 + 1,
        **analysis.model_dump(),
    )
