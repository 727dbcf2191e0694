"""The bundled list of known throwaway email providers.

Matching against this list is exact equality on the email's domain, unlike
the administrator's bad-domains list which is a substring regex.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path

from safetykit.errors import ConfigurationError

BUILTIN_DOMAINS_PATH = Path(__file__).resolve().parent.parent / "data" / "disposable_domains.json"


def parse_domain_list(text: str) -> frozenset[str]:
    """Parse a JSON array of domain strings.

    Raises:
        ConfigurationError: the text is not a JSON array of strings.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"failed to parse builtin domains list: {e}") from e
    if not isinstance(data, list) or not all(isinstance(d, str) for d in data):
        raise ConfigurationError("builtin domains list must be a JSON array of strings")
    return frozenset(d.strip() for d in data if d.strip())


@lru_cache(maxsize=None)
def load_builtin_domains(path: Path = BUILTIN_DOMAINS_PATH) -> frozenset[str]:
    """Load (once per path) the bundled disposable-domain set."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"failed to read builtin domains list {path}: {e}") from e
    return parse_domain_list(text)


def email_domain(email: str) -> str | None:
    """Return everything after the first ``@``, or None when there is no ``@``."""
    _, sep, domain = email.partition("@")
    if not sep:
        return None
    return domain


def in_domain_list(domains: frozenset[str], email: str) -> bool:
    """True when the email's domain exactly equals a member of *domains*."""
    domain = email_domain(email)
    if domain is None:
        return False
    return domain in domains
