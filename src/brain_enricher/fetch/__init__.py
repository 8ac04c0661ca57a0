"""Hardened outbound fetch layer used by every extractor."""

from brain_enricher.fetch.safe_fetch import SafeFetcher
from brain_enricher.fetch.ssrf import check_ssrf, is_private_address

__all__ = [
    "SafeFetcher",
    "check_ssrf",
    "is_private_address",
]
