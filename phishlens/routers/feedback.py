import logging

from fastapi import APIRouter, Depends, HTTPException

from phishlens.dependencies import get_storage
from phishlens.schemas import Feedback, FeedbackCreate, FeedbackRequest
from phishlens.storage import FeedbackExistsError, MemStorage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["feedback"])

DUPLICATE_FEEDBACK = "Feedback already submitted for this scan"


@router.post("/feedback", response_model=Feedback)
def submit_feedback(payload: FeedbackRequest, storage: MemStorage = Depends(get_storage)):
    """
    Record whether a scan's verdict was correct. One feedback per scan.
    """
    if storage.get_scan(payload.scan_id) is None:
        raise HTTPException(status_code=404, detail="Scan not found")

    if storage.get_feedback_by_scan_id(payload.scan_id) is not None:
        logger.warning(f"Duplicate feedback for scan {payload.scan_id}")
        raise HTTPException(status_code=400, detail=DUPLICATE_FEEDBACK)

    try:
        feedback = storage.create_feedback(FeedbackCreate(**payload.model_dump()))
    except FeedbackExistsError:
        # lost a race with a concurrent submission
        logger.warning(f"Duplicate feedback for scan {payload.scan_id}")
        raise HTTPException(status_code=400, detail=DUPLICATE_FEEDBACK)
    except Exception:
        logger.exception(f"Storing feedback for scan {payload.scan_id} failed")
        raise HTTPException(status_code=500, detail="Failed to submit feedback")

    return feedback
