"""
Input sanitisation helpers for untrusted request data.

Two flavours:
  • sanitize_input — strips characters outright. Used for identifiers
    (usernames, ids, categories, slugs) that never need them.
  • sanitize_html  — entity-escapes markup characters. Used for free text
    that is stored and later rendered (titles, problem statements, blogs).

Both are pure and total: any string (or None) in, a string out.
"""

from __future__ import annotations

import ipaddress
import re
from urllib.parse import urlsplit

MAX_INPUT_LENGTH = 1000

# < > ' " plus shell metacharacters ; & | ` $
_DANGEROUS_CHARS = re.compile(r"[<>'\";&|`$]")

_HTML_ESCAPES = str.maketrans({
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#x27;",
    "/": "&#x2F;",
})

_SLUG_SEPARATORS = re.compile(r"[^a-z0-9]+")

# ── SSRF guard for the code-execution backend ───────────────
_BLOCKED_HOSTS = frozenset({
    "localhost",
    "0.0.0.0",
    "metadata.google.internal",
})

ALLOWED_JUDGE_DOMAINS = (
    "ce.judge0.com",
    "judge0-ce.p.rapidapi.com",
    "api.judge0.com",
)


def sanitize_input(text: str | None) -> str:
    """Drop dangerous characters, trim, and cap at MAX_INPUT_LENGTH."""
    if not text:
        return ""
    cleaned = _DANGEROUS_CHARS.sub("", text).strip()
    # Re-strip after the cut so a trailing space can't survive truncation
    return cleaned[:MAX_INPUT_LENGTH].strip()


def sanitize_html(text: str | None) -> str:
    """Entity-escape < > " ' / in a single pass."""
    if not text:
        return ""
    return text.translate(_HTML_ESCAPES)


def slugify(title: str) -> str:
    """URL slug from a blog title: lowercase, dash-separated, sanitised."""
    slug = _SLUG_SEPARATORS.sub("-", title.lower()).strip("-")
    return sanitize_input(slug)


def validate_url(url: str) -> bool:
    """
    True only for https URLs pointing at a known Judge0 host.

    Private, loopback and link-local addresses (cloud metadata endpoints)
    are rejected even before the allow-list check.
    """
    try:
        parts = urlsplit(url)
    except ValueError:
        return False

    if parts.scheme != "https" or not parts.hostname:
        return False

    hostname = parts.hostname.lower()
    if hostname in _BLOCKED_HOSTS:
        return False

    try:
        address = ipaddress.ip_address(hostname)
    except ValueError:
        address = None
    if address is not None:
        # Raw IPs are never on the allow-list
        return False

    return any(
        hostname == domain or hostname.endswith(f".{domain}")
        for domain in ALLOWED_JUDGE_DOMAINS
    )
