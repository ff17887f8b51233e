"""
Credential detection and domain scanning.

The built-in signatures from ``patterns.CREDENTIAL_PATTERNS`` are wrapped in a
``CredentialScanner``. Extra signatures can be added per scanner instance with
``create_scanner`` without touching the shared table.
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Set, Tuple, Union

from .patterns import CREDENTIAL_PATTERNS, bare_domain_pattern, email_domain_pattern
from .schemas import CredentialPattern, ExtractedCredential
from .utils import truncate

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 50

PatternSpec = Union[CredentialPattern, Mapping[str, Any]]


class CredentialScanner:
    """Runs a fixed, ordered set of credential patterns over text."""

    def __init__(self, additional_patterns: Optional[Iterable[PatternSpec]] = None):
        extra = tuple(
            p if isinstance(p, CredentialPattern) else CredentialPattern.model_validate(p)
            for p in (additional_patterns or ())
        )
        self.patterns: Tuple[CredentialPattern, ...] = CREDENTIAL_PATTERNS + extra

    def detect_credential_types(self, content: Any) -> Set[str]:
        """
        Returns the set of credential types present anywhere in *content*.

        Each pattern is only tested for a match, never fully extracted. Several
        patterns may share a type, so the result collapses duplicates.
        """
        if not content or not isinstance(content, str):
            return set()
        return {p.type for p in self.patterns if p.regex.search(content)}

    def extract_credentials(self, content: Any) -> List[ExtractedCredential]:
        """
        Returns every individual credential match in *content*, grouped by
        pattern in table order, with a truncated preview and its offset.
        """
        if not content or not isinstance(content, str):
            return []

        extracted = []
        for pattern in self.patterns:
            for match in pattern.regex.finditer(content):
                extracted.append(
                    ExtractedCredential(
                        type=pattern.type,
                        name=pattern.label,
                        value=truncate(match.group(0), PREVIEW_LENGTH),
                        index=match.start(),
                    )
                )
        return extracted


DEFAULT_SCANNER = CredentialScanner()


def create_scanner(
    additional_patterns: Optional[Iterable[PatternSpec]] = None,
) -> CredentialScanner:
    """Builds a scanner whose patterns are the built-ins plus *additional_patterns*."""
    return CredentialScanner(additional_patterns)


def detect_credential_types(content: Any) -> Set[str]:
    return DEFAULT_SCANNER.detect_credential_types(content)


def extract_credentials(content: Any) -> List[ExtractedCredential]:
    return DEFAULT_SCANNER.extract_credentials(content)


def match_domains(content: Any, domains: Sequence[str]) -> Set[str]:
    """
    Returns the domains mentioned in *content*.

    A domain matches when it appears literally (case-insensitive) or as the
    host of an email address such as ``user@domain``.
    """
    if not content or not isinstance(content, str) or not domains:
        return set()

    matched = set()
    for domain in domains:
        if not domain:
            continue
        if bare_domain_pattern(domain).search(content):
            matched.add(domain)
        if email_domain_pattern(domain).search(content):
            matched.add(domain)
    logger.debug("Domain scan matched %d of %d domain(s)", len(matched), len(domains))
    return matched
