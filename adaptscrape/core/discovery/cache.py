"""Per-domain selector cache."""

from typing import Protocol
from urllib.parse import urlparse

from adaptscrape.models.selectors import ScrapingConfig


def normalize_domain(url: str) -> str:
    """Reduce a URL to its cache key.

    Lower-cases the host and drops the port and a leading ``www.``.

    Args:
        url: Absolute URL (or bare host)

    Returns:
        Normalized domain, e.g. 'example.com'

    """
    netloc = urlparse(url).netloc or urlparse(f'//{url}').netloc
    domain = netloc.lower().rsplit('@', 1)[-1].split(':', 1)[0]
    if domain.startswith('www.'):
        domain = domain[4:]
    return domain


class SelectorCache(Protocol):
    """Storage for selector configs keyed by normalized domain."""

    def get(self, domain: str) -> ScrapingConfig | None:
        """Return the cached config for a domain, if any."""
        ...

    def set(self, domain: str, config: ScrapingConfig) -> None:
        """Store a config for a domain."""
        ...

    def delete(self, domain: str) -> None:
        """Remove a domain's config if present."""
        ...

    def clear(self) -> None:
        """Remove every cached config."""
        ...


class InMemorySelectorCache:
    """Process-local selector cache with no expiry.

    Entries live until they are evicted after failing validation or
    cleared explicitly.
    """

    def __init__(self):
        """Initialize an empty cache."""
        self._configs: dict[str, ScrapingConfig] = {}

    def get(self, domain: str) -> ScrapingConfig | None:
        """Return the cached config for a domain, if any."""
        return self._configs.get(domain)

    def set(self, domain: str, config: ScrapingConfig) -> None:
        """Store a config for a domain."""
        self._configs[domain] = config

    def delete(self, domain: str) -> None:
        """Remove a domain's config if present."""
        self._configs.pop(domain, None)

    def clear(self) -> None:
        """Remove every cached config."""
        self._configs.clear()

    def __len__(self) -> int:
        return len(self._configs)

    def __contains__(self, domain: object) -> bool:
        return domain in self._configs
