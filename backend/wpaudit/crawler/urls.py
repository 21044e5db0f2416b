"""
URL helpers shared by the collectors, the pipeline and the reports.
"""

from urllib.parse import urljoin, urlparse, urlunparse

import tldextract

from wpaudit.core.exceptions import ValidationError

# Bundled public-suffix snapshot only; audits never fetch the live list
_extract = tldextract.TLDExtract(suffix_list_urls=())


def normalize_base_url(url: str) -> str:
    """Reduce a site URL to scheme://host[:port]; reject non-HTTP schemes."""
    candidate = (url or "").strip()
    parsed = urlparse(candidate)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError("Invalid URL", detail=f"Expected an http(s) URL, got {url!r}")
    return urlunparse((parsed.scheme, parsed.netloc, "", "", "", ""))


def page_url(base_url: str, path: str) -> str:
    """Absolute URL of `path` on the site."""
    return urljoin(base_url.rstrip("/") + "/", path.lstrip("/"))


def host_of(url: str) -> str:
    """Full host name of `url` (no port), or "" when there is none."""
    ext = _extract(url)
    if ext.domain and ext.suffix:
        host = f"{ext.domain}.{ext.suffix}"
        if ext.subdomain:
            host = f"{ext.subdomain}.{host}"
        return host.lower()
    # localhost, bare IPs and private names have no public suffix
    return (urlparse(url).hostname or "").lower()
