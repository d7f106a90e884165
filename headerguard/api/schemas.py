"""Pydantic schemas for API request/response models."""

from pydantic import BaseModel, Field, field_validator

MAX_URL_LENGTH = 2083


def _check_url(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("URL cannot be empty")
    if len(v) > MAX_URL_LENGTH:
        raise ValueError(f"URL too long (>{MAX_URL_LENGTH} characters)")
    return v


class UrlAnalysisRequest(BaseModel):
    """Request schema for live URL analysis."""

    url: str = Field(
        ...,
        description="URL whose response headers are analyzed",
        examples=["https://example.com"],
    )
    platforms: list[str] | None = Field(
        None, description="Platforms to render patches for (default: all)"
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        return _check_url(v)


class HeaderAnalysisRequest(BaseModel):
    """Analyze a header map that was captured elsewhere."""

    url: str = Field(..., description="URL the headers were captured from")
    headers: dict[str, str] = Field(default_factory=dict)
    platforms: list[str] | None = None
    existing_configs: dict[str, str] | None = Field(
        None, description="Current config file content keyed by platform"
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        return _check_url(v)


class EvaluatedHeaderSchema(BaseModel):
    name: str
    present: bool
    value: str | None = None
    score: float
    weight: int
    severity: str
    recommendation: str
    description: str


class HeaderBucketsSchema(BaseModel):
    found: list[EvaluatedHeaderSchema] = Field(default_factory=list)
    missing: list[EvaluatedHeaderSchema] = Field(default_factory=list)
    misconfigured: list[EvaluatedHeaderSchema] = Field(default_factory=list)


class RecommendationSchema(BaseModel):
    header: str
    severity: str
    issue: str
    solution: str
    priority: int


class AnalysisResponse(BaseModel):
    """Response schema for header analysis."""

    url: str = Field(..., description="Normalized URL analyzed")
    timestamp: str
    score: int = Field(..., ge=0, le=100)
    grade: str = Field(..., description="Letter grade from A+ to F")
    headers: HeaderBucketsSchema
    recommendations: list[RecommendationSchema] = Field(default_factory=list)
    fixes: dict[str, str] = Field(
        default_factory=dict, description="Rendered patch per platform"
    )
    framework: str | None = Field(None, description="Detected server or framework")
    cached: bool = False
    processing_time_ms: float = 0.0


class CSPValidationRequest(BaseModel):
    policy: str = Field(..., description="Content-Security-Policy header value")


class CSPDirectiveSchema(BaseModel):
    directive: str
    sources: list[str]
    is_unsafe: bool


class CSPValidationResponse(BaseModel):
    is_valid: bool
    directives: list[CSPDirectiveSchema] = Field(default_factory=list)
    issues: list[str] = Field(default_factory=list)


class HSTSCheckRequest(BaseModel):
    header: str = Field(..., description="Strict-Transport-Security header value")


class HSTSCheckResponse(BaseModel):
    max_age: int
    include_subdomains: bool
    preload: bool
    is_eligible: bool


class FixesRequest(BaseModel):
    """Build fixes for a header map and render them per platform."""

    headers: dict[str, str] = Field(default_factory=dict)
    platforms: list[str] | None = None
    existing_configs: dict[str, str] | None = None


class SecurityFixSchema(BaseModel):
    header: str
    value: str
    description: str
    action: str
    severity: str
    reference: str | None = None


class PatchValidationSchema(BaseModel):
    valid: bool
    warnings: list[str] = Field(default_factory=list)


class PlatformPatchSchema(BaseModel):
    platform: str
    config_file: str
    content: str
    validation: PatchValidationSchema


class FixesResponse(BaseModel):
    fixes: list[SecurityFixSchema] = Field(default_factory=list)
    patches: dict[str, PlatformPatchSchema] = Field(default_factory=dict)


class PullRequestRequest(BaseModel):
    """Open a pull request with security header fixes."""

    url: str = Field(..., description="Site whose headers are analyzed")
    repository_url: str = Field(
        ..., examples=["https://github.com/octocat/hello-world"]
    )
    github_token: str = Field(..., description="Token with contents/PR write access")
    platforms: list[str] | None = Field(
        None, description="Platforms to commit (default: inferred from the site)"
    )
    headers: dict[str, str] | None = Field(
        None, description="Use these headers instead of fetching the site"
    )
    title: str | None = None

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        return _check_url(v)


class PullRequestResponse(BaseModel):
    success: bool
    branch: str
    pull_request_url: str | None = None
    pull_request_number: int | None = None
    files_changed: list[str] = Field(default_factory=list)
    error: str | None = None
    score: int | None = None
    grade: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Application version")
    timestamp: str
    uptime_seconds: float
    rules: int = Field(..., description="Number of header rules loaded")
