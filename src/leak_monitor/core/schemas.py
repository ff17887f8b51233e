from typing import Any, Dict, List, Optional, Pattern, Set
from datetime import datetime, timezone
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field

# --- Credential Pattern Models ---


class CredentialPattern(BaseModel):
    """A named regular-expression signature for one class of secret."""

    model_config = ConfigDict(frozen=True)

    type: str
    regex: Pattern[str]
    name: Optional[str] = None

    @property
    def label(self) -> str:
        return self.name or self.type


class ExtractedCredential(BaseModel):
    """A single credential-shaped match, as reported by extraction mode."""

    type: str
    name: str
    value: str
    index: int


# --- Source & Post Models ---


class SourceKind(str, Enum):
    SEARCH = "search"
    HTML = "html"


class Source(BaseModel):
    """A public web origin that is queried once per monitored domain."""

    model_config = ConfigDict(frozen=True)

    name: str
    url: str  # must contain a {domain} placeholder
    kind: SourceKind
    link_marker: str = "/r/"
    block_selector: str = ".tweet"


class Post(BaseModel):
    title: str
    url: str
    domain: str


class SourceFetchResult(BaseModel):
    """Posts gathered from one source plus the per-domain fetch errors."""

    source: str
    posts: List[Post] = Field(default_factory=list)
    errors: Dict[str, str] = Field(default_factory=dict)


# --- Finding & Monitor Models ---


class Finding(BaseModel):
    """A post that mentions a monitored domain and carries credential patterns."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    source: str
    title: str
    url: str
    matched_domains: Set[str]
    credentials: Set[str]
    snippet: str


class MonitorState(BaseModel):
    """Mutable state owned by a single Monitor instance."""

    running: bool = False
    check_in_progress: bool = False
    last_check: Optional[datetime] = None
    cycles: int = 0
    findings: List[Finding] = Field(default_factory=list)
    timer: Optional[Any] = Field(default=None, exclude=True)


class MonitorResult(BaseModel):
    """Serializable report of a monitoring run."""

    domains: List[str]
    cycles: int = 0
    total_scanned: int = 0
    last_check: Optional[datetime] = None
    findings: List[Finding] = Field(default_factory=list)
    total_findings: int = 0
    error: Optional[str] = None


# --- Configuration Models ---


class AlertsConfig(BaseModel):
    console: bool = True
    email: Optional[str] = None
    slack_webhook_url: Optional[str] = None
    teams_webhook_url: Optional[str] = None


class NetworkConfig(BaseModel):
    timeout: float = 10.0
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
    )


class MonitorConfig(BaseModel):
    """Configuration loaded from config.json and overridden from the CLI."""

    domains: List[str] = Field(default_factory=list)
    interval: int = Field(30, ge=1)  # minutes
    verbose: bool = False
    alerts: AlertsConfig = Field(default_factory=AlertsConfig)
