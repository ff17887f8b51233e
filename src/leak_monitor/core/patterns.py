"""
Credential signature library for the leak monitor.

Holds the ordered, read-only table of credential patterns and the regular
expression builders used to find mentions of a monitored domain. Key names
(e.g. "password", "api_key") match case-insensitively, while token formats
whose alphabet is case-sensitive by design are matched as written.
"""

import re
from typing import Pattern, Tuple

from .schemas import CredentialPattern

EMAIL_LOCAL_PART = r"[a-zA-Z0-9._%+-]+"


def _pattern(name: str, regex: str, type_: str, flags: int = 0) -> CredentialPattern:
    return CredentialPattern(name=name, regex=re.compile(regex, flags), type=type_)


CREDENTIAL_PATTERNS: Tuple[CredentialPattern, ...] = (
    _pattern(
        "API Key",
        r"(?i:api[ _-]?key)[\"']?\s*[:=]\s*[\"']?[a-zA-Z0-9_]{16,}",
        "api_key",
    ),
    _pattern(
        "AWS Access Key",
        r"(?i:aws[_-]?access[_-]?key[_-]?id)[\"']?\s*[:=]\s*[\"']?[A-Z0-9]{20,}",
        "aws_key",
    ),
    _pattern(
        "Password",
        r"(?i:password|passwd|pwd|secret)[\"']?\s*[:=]\s*[\"']?[^\s'\"]{4,}",
        "password",
    ),
    _pattern("Private Key", r"-----BEGIN.*PRIVATE KEY-----", "private_key"),
    _pattern(
        "JWT Token",
        r"eyJ[a-zA-Z0-9_-]*\.eyJ[a-zA-Z0-9_-]*\.[a-zA-Z0-9_-]*",
        "jwt",
    ),
    _pattern("GitHub Token", r"gh[pousr]_[a-zA-Z0-9]{36,}", "github_token"),
    _pattern(
        "Slack Token",
        r"xox[baprs]-[0-9]{10,13}-[0-9]{10,13}[a-zA-Z0-9-]*",
        "slack_token",
    ),
    _pattern(
        "Database Connection String",
        r"(?i:mongodb|mysql|postgres|postgresql|redis|amqp|jdbc)://[^\s]+",
        "connection_string",
    ),
    _pattern(
        "Email:Password",
        EMAIL_LOCAL_PART + r"@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}:[^\s]+",
        "email_password",
    ),
    _pattern("Bearer Token", r"bearer\s+[a-zA-Z0-9_\-.]+", "bearer_token", re.IGNORECASE),
    _pattern("Basic Auth", r"basic\s+[a-zA-Z0-9+/=]+", "basic_auth", re.IGNORECASE),
    _pattern("NPM Token", r"npm_[a-zA-Z0-9]{36}", "npm_token"),
    _pattern(
        "Stripe Key",
        r"(?:sk|pk)_(?:test|live)_[a-zA-Z0-9]{24,}",
        "stripe_key",
        re.IGNORECASE,
    ),
    _pattern("Twilio Key", r"SK[a-f0-9]{32}", "twilio_key"),
    _pattern(
        "SendGrid Key",
        r"SG\.[a-zA-Z0-9_-]{22}\.[a-zA-Z0-9_-]{43}",
        "sendgrid_key",
    ),
    _pattern(
        "Generic Token",
        r"(?:token|auth|access[_-]?key)[_-]?secret[\"']?\s*[:=]\s*[\"']?[a-zA-Z0-9_]{20,}",
        "generic_token",
        re.IGNORECASE,
    ),
)


def bare_domain_pattern(domain: str) -> Pattern[str]:
    """Matches the literal domain anywhere in the text."""
    return re.compile(re.escape(domain), re.IGNORECASE)


def email_domain_pattern(domain: str) -> Pattern[str]:
    """Matches an email address hosted on the domain (``user@domain``)."""
    return re.compile(EMAIL_LOCAL_PART + "@" + re.escape(domain), re.IGNORECASE)
