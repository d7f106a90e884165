"""
HeaderGuard - HTTP security headers analyzer and remediation generator.

Scores a site's response headers against a fixed rule table and renders
ready-to-apply configuration patches for common deployment platforms.
"""

__version__ = "0.1.0"
__author__ = "HeaderGuard Team"
__email__ = "team@headerguard.dev"

from headerguard.analyzers.csp import validate_csp
from headerguard.analyzers.engine import SecurityHeaderAnalyzer
from headerguard.analyzers.hsts import check_hsts_preload
from headerguard.config import settings
from headerguard.fixes.generators import generate_fixes

__all__ = [
    "SecurityHeaderAnalyzer",
    "check_hsts_preload",
    "generate_fixes",
    "settings",
    "validate_csp",
]
