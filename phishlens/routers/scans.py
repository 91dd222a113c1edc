import logging
import re
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from phishlens.config import Settings
from phishlens.dependencies import get_settings, get_storage
from phishlens.schemas import Scan, ScanType, Stats
from phishlens.storage import MemStorage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["history"])

LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")


def leading_int(value: Optional[str]) -> Optional[int]:
    """Parse the integer a string starts with ("10abc" -> 10), else None."""
    match = LEADING_INT.match(value or "")
    return int(match.group(1)) if match else None


@router.get("/stats", response_model=Stats)
def get_stats(storage: MemStorage = Depends(get_storage)):
    try:
        return storage.get_stats()
    except Exception:
        logger.exception("Stats query failed")
        raise HTTPException(status_code=500, detail="Failed to fetch stats")


@router.get("/scans", response_model=List[Scan])
def list_scans(
    limit: Optional[str] = None,
    offset: Optional[str] = None,
    scan_type: Optional[ScanType] = Query(None, alias="type"),
    storage: MemStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
):
    """
    Scan history, newest first. ``type`` narrows it to url or screenshot scans.
    """
    page_size = leading_int(limit)
    start = leading_int(offset)
    # unparseable, zero or negative values fall back to the defaults
    if not page_size or page_size < 1:
        page_size = settings.default_page_size
    if not start or start < 0:
        start = 0

    try:
        if scan_type is not None:
            return storage.get_scans_by_type(scan_type, limit=start + page_size)[start:]
        return storage.get_scans(limit=page_size, offset=start)
    except Exception:
        logger.exception("Scan history query failed")
        raise HTTPException(status_code=500, detail="Failed to fetch scan history")


@router.get("/scans/{scan_id}", response_model=Scan)
def get_scan(scan_id: str, storage: MemStorage = Depends(get_storage)):
    parsed_id = leading_int(scan_id)
    try:
        scan = storage.get_scan(parsed_id) if parsed_id is not None else None
    except Exception:
        logger.exception(f"Fetching scan {scan_id!r} failed")
        raise HTTPException(status_code=500, detail="Failed to fetch scan")

    if scan is None:
        raise HTTPException(status_code=404, detail="Scan not found")
    return scan
