"""Redirect chain resolution over plain HTTP or a live browser page."""

import logging
from typing import Any
from urllib.parse import urljoin

import logfire
import requests

from adaptscrape.core.redirects.patterns import find_redirect_target
from adaptscrape.models.results import RedirectInfo, RedirectOptions
from adaptscrape.utils.headers import HeaderGenerator

# Returns window.location.href when it no longer matches document.URL
LOCATION_MISMATCH_SCRIPT = """
() => {
    const href = window.location.href;
    return href !== document.URL ? href : null;
}
"""


def _is_redirect_status(status: int | None) -> bool:
    return status is not None and 300 <= status < 400


class RedirectResolver:
    """Follows redirect chains without ever raising to the caller.

    HTTP resolution follows 3xx responses manually, then optionally meta
    refresh and JavaScript redirects found in the final page. Browser
    resolution watches a live page's responses instead.

    Attributes:
        session: Requests session used for HTTP probes
        user_agent: User agent sent with every probe, or None for a random one per request
        logger: Logger instance for redirect tracing

    """

    def __init__(self, session: requests.Session | None = None, user_agent: str | None = None):
        """Initialize the resolver.

        Args:
            session: Requests session to reuse. Defaults to None (creates a new session).
            user_agent: Fixed user agent. Defaults to None (rotates per request).

        """
        self.session = session or requests.Session()
        self.user_agent = user_agent
        self.logger = logging.getLogger(__name__)

    def detect_redirect(self, url: str, options: RedirectOptions | None = None) -> bool:
        """Check whether a URL answers with a redirect status.

        Uses HEAD and falls back to GET when the server rejects HEAD.

        Args:
            url: URL to probe
            options: Redirect options (only the timeout is used)

        Returns:
            True if the first response is a 3xx redirect

        """
        options = options or RedirectOptions()
        timeout = options.timeout / 1000
        headers = HeaderGenerator.generate_headers(user_agent=self.user_agent)

        try:
            response = self.session.head(url, headers=headers, timeout=timeout, allow_redirects=False)
            if response.status_code == 405:
                response = self.session.get(url, headers=headers, timeout=timeout, allow_redirects=False)
            return _is_redirect_status(response.status_code)
        except Exception as e:
            self.logger.debug(f'Redirect probe failed for {url}: {e}')
            return False

    def resolve_http(self, url: str, options: RedirectOptions | None = None) -> RedirectInfo:
        """Resolve a redirect chain with manual HTTP requests.

        Args:
            url: URL to start from
            options: Limits and which in-page redirects to follow

        Returns:
            RedirectInfo for the chain; on any error, the original URL with
            zero redirects and the error recorded

        """
        options = options or RedirectOptions()
        timeout = options.timeout / 1000
        chain = [url]
        current = url

        with logfire.span('resolve_redirects_http', url=url, max_redirects=options.max_redirects):
            try:
                while len(chain) - 1 < options.max_redirects:
                    response = self.session.get(
                        current,
                        headers=HeaderGenerator.generate_headers(user_agent=self.user_agent),
                        timeout=timeout,
                        allow_redirects=False,
                    )
                    status = response.status_code

                    if _is_redirect_status(status):
                        location = response.headers.get('Location')
                        if not location:
                            self.logger.info(f'Redirect from {current} without Location header')
                            break

                        next_url = urljoin(current, location)
                        if next_url in chain:
                            self.logger.info(f'Redirect cycle detected at {next_url}')
                            break

                        chain.append(next_url)
                        current = next_url
                        continue

                    if not 200 <= status < 300:
                        break

                    target = find_redirect_target(
                        response.text,
                        follow_meta_refresh=options.follow_meta_refresh,
                        follow_javascript=options.follow_javascript_redirects,
                        visited=chain,
                    )
                    if not target:
                        break

                    self.logger.info(f'In-page redirect from {current} to {target}')
                    chain.append(target)
                    current = target

            except Exception as e:
                self.logger.warning(f'HTTP redirect resolution failed for {url}: {e}')
                logfire.warn('Redirect resolution failed', url=url, method='http', error=str(e))
                return RedirectInfo.unresolved(url, method='http', error=str(e))

            info = RedirectInfo(original_url=url, final_url=chain[-1], redirect_chain=tuple(chain), method='http')
            logfire.info('Redirects resolved', url=url, final_url=info.final_url, count=info.redirect_count)
            return info

    def resolve_with_browser(self, page: Any, url: str, options: RedirectOptions | None = None) -> RedirectInfo:
        """Resolve a redirect chain by navigating a live Playwright page.

        Args:
            page: Playwright Page to navigate
            url: URL to start from
            options: Limits, JavaScript wait, and which in-page redirects to follow

        Returns:
            RedirectInfo for the chain; on any error, the original URL with
            zero redirects and the error recorded

        """
        options = options or RedirectOptions()
        chain = [url]

        def record_redirect(response: Any) -> None:
            if (
                _is_redirect_status(response.status)
                and response.url not in chain
                and len(chain) - 1 < options.max_redirects
            ):
                chain.append(response.url)

        with logfire.span('resolve_redirects_browser', url=url):
            try:
                page.on('response', record_redirect)
                page.goto(url, wait_until='networkidle', timeout=options.timeout)

                if options.follow_javascript_redirects or options.follow_meta_refresh:
                    page.wait_for_timeout(options.wait_for_javascript)
                    target = self._find_live_target(page, chain, options)
                    if target and len(chain) - 1 < options.max_redirects:
                        self.logger.info(f'Following in-page redirect to {target}')
                        page.goto(target, wait_until='networkidle', timeout=options.timeout)

                final_url = page.url or chain[-1]
                if final_url not in chain and len(chain) - 1 < options.max_redirects:
                    chain.append(final_url)

            except Exception as e:
                self.logger.warning(f'Browser redirect resolution failed for {url}: {e}')
                logfire.warn('Redirect resolution failed', url=url, method='browser', error=str(e))
                return RedirectInfo.unresolved(url, method='browser', error=str(e))
            finally:
                try:
                    page.remove_listener('response', record_redirect)
                except Exception as e:
                    self.logger.debug(f'Could not detach response listener: {e}')

            # Past the redirect cap the chain stops growing but the page may still have moved
            return RedirectInfo(original_url=url, final_url=final_url, redirect_chain=tuple(chain), method='browser')

    def resolve(self, url: str, options: RedirectOptions | None = None) -> RedirectInfo:
        """Resolve redirects, HTTP first.

        Browser resolution is never attempted here; callers that need live
        JavaScript redirect handling call ``resolve_with_browser`` directly.

        Args:
            url: URL to start from
            options: Redirect options

        Returns:
            The HTTP RedirectInfo, with or without redirects

        """
        info = self.resolve_http(url, options)
        if info.has_redirects:
            self.logger.info(f'{url} redirects {info.redirect_count} time(s) to {info.final_url}')
        return info

    def _find_live_target(self, page: Any, chain: list[str], options: RedirectOptions) -> str | None:
        """Look for a pending redirect in the live DOM."""
        html = page.content()
        target = find_redirect_target(
            html,
            follow_meta_refresh=options.follow_meta_refresh,
            follow_javascript=options.follow_javascript_redirects,
            visited=chain,
        )
        if target:
            return target

        if options.follow_javascript_redirects:
            location = page.evaluate(LOCATION_MISMATCH_SCRIPT)
            if location and location not in chain:
                return location
        return None
