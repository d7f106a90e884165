"""Data model for remediation fixes and platform patches."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from headerguard.analyzers.models import Severity


class FixAction(str, Enum):
    ADD = "add"
    UPDATE = "update"


class Platform(str, Enum):
    """Deployment platforms a patch can be rendered for."""

    NGINX = "nginx"
    APACHE = "apache"
    EXPRESS = "express"
    NEXTJS = "nextjs"
    NETLIFY = "netlify"
    VERCEL = "vercel"
    AMPLIFY = "amplify"
    CLOUDFLARE = "cloudflare"
    GENERIC = "generic"

    @classmethod
    def resolve(cls, value: "str | Platform | None") -> "Platform":
        """Resolve a platform name or alias; unknown names become GENERIC."""
        if isinstance(value, Platform):
            return value
        if not value:
            return cls.GENERIC
        key = str(value).strip().lower()
        try:
            return cls(key)
        except ValueError:
            return _PLATFORM_ALIASES.get(key, cls.GENERIC)


_PLATFORM_ALIASES = {
    "express.js": Platform.EXPRESS,
    "expressjs": Platform.EXPRESS,
    "next.js": Platform.NEXTJS,
    "next": Platform.NEXTJS,
    "httpd": Platform.APACHE,
    "htaccess": Platform.APACHE,
    "cloudflare-workers": Platform.CLOUDFLARE,
    "aws-amplify": Platform.AMPLIFY,
}

# Where each platform's configuration conventionally lives in a repository
DEFAULT_CONFIG_FILES = {
    Platform.NGINX: "nginx/security-headers.conf",
    Platform.APACHE: ".htaccess",
    Platform.EXPRESS: "middleware/securityHeaders.js",
    Platform.NEXTJS: "next.config.js",
    Platform.NETLIFY: "_headers",
    Platform.VERCEL: "vercel.json",
    Platform.AMPLIFY: "customHttp.yml",
    Platform.CLOUDFLARE: "workers/security-headers.js",
    Platform.GENERIC: "SECURITY_HEADERS.md",
}


@dataclass(frozen=True)
class SecurityFix:
    """A concrete header/value pair that remediates one header."""

    header: str
    value: str
    description: str
    action: FixAction
    severity: Severity
    reference: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "header": self.header,
            "value": self.value,
            "description": self.description,
            "action": self.action.value,
            "severity": self.severity.value,
            "reference": self.reference,
        }


@dataclass(frozen=True)
class FrameworkConfig:
    """
    Descriptor of one target platform's configuration file.

    ``content`` is supplied by the caller (for example read from the
    target repository); generators only read it.
    """

    type: Platform
    config_file: str = ""
    exists: bool = False
    content: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "type", Platform.resolve(self.type))
        if not self.config_file:
            object.__setattr__(self, "config_file", DEFAULT_CONFIG_FILES[self.type])

    @classmethod
    def for_platform(
        cls, platform: "str | Platform", content: str | None = None
    ) -> "FrameworkConfig":
        return cls(
            type=Platform.resolve(platform), exists=bool(content), content=content
        )

    @property
    def has_content(self) -> bool:
        return bool(self.content and self.content.strip())


@dataclass
class PatchValidation:
    """Structural check outcome; warnings never block emission."""

    valid: bool = True
    warnings: list[str] = field(default_factory=list)

    def warn(self, message: str, fatal: bool = False) -> None:
        self.warnings.append(message)
        if fatal:
            self.valid = False

    def to_dict(self) -> dict[str, Any]:
        return {"valid": self.valid, "warnings": list(self.warnings)}
