"""Fix-set building, platform patch generation and validation."""

from headerguard.fixes.builder import build_fixes
from headerguard.fixes.generators import generate_fixes, get_generator, render_patches
from headerguard.fixes.models import FixAction, FrameworkConfig, Platform, SecurityFix
from headerguard.fixes.validator import validate_patch

__all__ = [
    "FixAction",
    "FrameworkConfig",
    "Platform",
    "SecurityFix",
    "build_fixes",
    "generate_fixes",
    "get_generator",
    "render_patches",
    "validate_patch",
]
