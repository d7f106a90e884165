"""
Header analysis engine.

- Rule table and data model
- CSP / HSTS semantic validators
- Header evaluation and framework detection
"""

from headerguard.analyzers.engine import SecurityHeaderAnalyzer

__all__ = ["SecurityHeaderAnalyzer"]
