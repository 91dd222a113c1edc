"""
Screenshot analysis (mock).

No OCR or image inspection happens here. Each canned finding group fires on
an independent random draw, so the verdict is random but always has the same
shape and range as the URL analyzer's. Pass a seeded ``random.Random`` to get
repeatable results.
"""

import logging
import math
import random
from typing import Optional

from phishlens.schemas import AnalysisResult

logger = logging.getLogger(__name__)

_default_rng = random.Random()

# (probability, points, findings)
FINDING_GROUPS = [
    (0.4, 40, ["Suspicious login form detected", "Urgent language patterns found"]),
    (0.3, 30, ["Mimics legitimate banking interface"]),
    (0.2, 25, ["Password field without proper security indicators"]),
]

SAFE_FINDINGS = [
    "No suspicious elements detected",
    "Legitimate webpage structure",
]


def _verdict_from_score(score: int) -> tuple[str, float]:
    if score >= 60:
        return "phishing", min(80 + (score - 60) / 2, 95)
    if score >= 30:
        return "suspicious", 50 + score
    return "safe", max(85 - score, 60)


def analyze_screenshot(
    filename: str, content: bytes, rng: Optional[random.Random] = None
) -> AnalysisResult:
    rng = rng or _default_rng
    details = []
    score = 0

    for probability, points, findings in FINDING_GROUPS:
        if rng.random() < probability:
            score += points
            details.extend(findings)

    verdict, confidence = _verdict_from_score(score)
    if verdict == "safe":
        details.extend(SAFE_FINDINGS)

    logger.debug(f"Mock analysis of {filename} ({len(content)} bytes): score {score}")

    return AnalysisResult(
        verdict=verdict,
        confidence=min(int(math.floor(confidence + 0.5)), 100),
        details=details,
    )
