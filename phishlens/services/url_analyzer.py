import math
import re
from typing import Optional
from urllib.parse import SplitResult, urlsplit

import validators

from phishlens.schemas import AnalysisResult


IP_HOST_PATTERN = re.compile(r"^\d+\.\d+\.\d+\.\d+")

# characters that can never appear in a host
FORBIDDEN_HOST_CHARS = re.compile(r"[\x00-\x20#%/:<>?@\[\\\]^|\x7f]")

SUSPICIOUS_PATHS = [
    "/wp-content/",
    ".php",
    "/secure/",
    "/login/",
    "/account/",
    "/verify/",
]

SUSPICIOUS_SUBDOMAINS = ["secure", "account", "verify", "update", "confirm"]

# URL shorteners (common in phishing)
SHORTENERS = ["bit.ly", "tinyurl.com", "t.co", "short.link"]

MAX_URL_LENGTH = 100

SAFE_FINDINGS = [
    "Valid domain structure",
    "No suspicious URL patterns detected",
]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _verdict_from_score(score: int) -> tuple[str, float]:
    if score >= 50:
        return "phishing", min(85 + (score - 50) / 2, 98)
    if score >= 25:
        return "suspicious", 60 + score
    return "safe", max(90 - score * 2, 70)


def normalize_url(url: str) -> str:
    normalized = url.strip().lower()
    if not normalized.startswith("http"):
        normalized = "https://" + normalized
    return normalized


def _valid_host(parts: SplitResult) -> bool:
    hostname = parts.hostname
    if not hostname:
        return False

    if parts.netloc.split("@")[-1].startswith("["):
        return bool(validators.ipv6(hostname))

    if FORBIDDEN_HOST_CHARS.search(hostname):
        return False

    # a host whose last label is numeric has to be a full IPv4 address
    if hostname.rstrip(".").rsplit(".", 1)[-1].isdigit():
        return bool(validators.ipv4(hostname.rstrip("."), cidr=False))

    if not hostname.isascii():
        try:
            hostname.encode("idna")
        except UnicodeError:
            return False
    return True


def parse_url(normalized: str) -> Optional[SplitResult]:
    """
    Split a normalized URL, or return None when it has no usable host
    or an out-of-range port.

    Query strings, single-label hosts, underscores and spaces in the
    path are all accepted; only the host and port are checked.
    """
    try:
        parts = urlsplit(normalized)
        parts.port  # raises ValueError when out of range
    except ValueError:
        return None
    return parts if _valid_host(parts) else None


def analyze_url(url: str) -> AnalysisResult:
    """
    Score a URL with fixed heuristic rules.

    Each rule that fires adds points and a finding. The total picks the
    verdict: 50 and up is phishing, 25 to 49 suspicious, below 25 safe.
    A string that does not parse as a URL is reported as suspicious
    with confidence 30 and no further checks.
    """
    normalized = normalize_url(url)

    parts = parse_url(normalized)
    if parts is None:
        return AnalysisResult(
            verdict="suspicious",
            confidence=30,
            details=["Invalid URL format"],
        )

    hostname = parts.hostname.lower()
    path = parts.path.lower()

    details = []
    score = 0

    if IP_HOST_PATTERN.match(hostname):
        score += 30
        details.append("Domain uses IP address instead of domain name")

    for suspicious_path in SUSPICIOUS_PATHS:
        if suspicious_path in path:
            score += 15
            details.append(f"Suspicious path detected: {suspicious_path}")

    if "//" in path:
        score += 20
        details.append("Double slashes detected in URL path")

    if len(normalized) > MAX_URL_LENGTH:
        score += 10
        details.append("URL length exceeds normal limits")

    for subdomain in SUSPICIOUS_SUBDOMAINS:
        if subdomain in hostname:
            score += 15
            details.append(f"Suspicious subdomain detected: {subdomain}")

    if any(shortener in hostname for shortener in SHORTENERS):
        score += 25
        details.append("URL shortener detected")

    verdict, confidence = _verdict_from_score(score)
    if verdict == "safe":
        details.extend(SAFE_FINDINGS)

    return AnalysisResult(
        verdict=verdict,
        confidence=min(_round_half_up(confidence), 100),
        details=details,
    )
