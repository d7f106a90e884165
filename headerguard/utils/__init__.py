"""Utility functions and helpers."""

from headerguard.utils.url_normalizer import is_private_host, normalize_url
from headerguard.utils.validation import is_valid_github_token, is_valid_repository_url

__all__ = [
    "is_private_host",
    "is_valid_github_token",
    "is_valid_repository_url",
    "normalize_url",
]
