"""Realistic user agents and request headers for HTTP and browser fetches."""

import random

LANGUAGES = (
    'en-US,en;q=0.9',
    'en-GB,en;q=0.9',
    'en-US,en;q=0.9,es;q=0.8',
    'en-US,en;q=0.8',
)


class UserAgentRotator:
    """Pool of current desktop browser user agents.

    Attributes:
        USER_AGENTS: User agents a fetch may present

    """

    USER_AGENTS = [
        # Chrome
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36',
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/130.0.0.0 Safari/537.36',
        'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36',
        'Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36',
        # Firefox
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:133.0) Gecko/20100101 Firefox/133.0',
        'Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:133.0) Gecko/20100101 Firefox/133.0',
        # Safari
        'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/18.1 Safari/605.1.15',
        # Edge
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36 Edg/131.0.0.0',
    ]

    @classmethod
    def get_random(cls) -> str:
        """Get a random user agent from the pool."""
        return random.choice(cls.USER_AGENTS)

    @classmethod
    def get_chromium(cls) -> str:
        """Get a Chrome user agent.

        Playwright drives Chromium, so browser fetches present a matching
        user agent rather than a Firefox or Safari one.

        Returns:
            A random Chrome (non-Edge) user agent

        """
        chrome = [ua for ua in cls.USER_AGENTS if 'Chrome' in ua and 'Edg' not in ua]
        return random.choice(chrome)


class HeaderGenerator:
    """Builds browser-like request headers."""

    @staticmethod
    def generate_headers(user_agent: str | None = None, referer: str | None = None) -> dict[str, str]:
        """Generate headers for a plain HTTP page request.

        Args:
            user_agent: User agent to send. Defaults to a random one.
            referer: Referer to send, if any

        Returns:
            Header dict for requests

        """
        if user_agent is None:
            user_agent = UserAgentRotator.get_random()

        headers = {
            'User-Agent': user_agent,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8',
            'Accept-Language': random.choice(LANGUAGES),
            'Accept-Encoding': 'gzip, deflate',
            'DNT': '1',
            'Connection': 'keep-alive',
            'Upgrade-Insecure-Requests': '1',
        }

        if 'Chrome' in user_agent:
            headers.update(
                {
                    'Sec-Fetch-Dest': 'document',
                    'Sec-Fetch-Mode': 'navigate',
                    'Sec-Fetch-Site': 'none' if referer is None else 'same-origin',
                    'Sec-Fetch-User': '?1',
                }
            )

        if referer:
            headers['Referer'] = referer

        return headers

    @staticmethod
    def browser_context_headers() -> dict[str, str]:
        """Extra headers for a Playwright browser context.

        The browser sets its own User-Agent and Accept headers, so only the
        ones Chromium leaves out by default are added.
        """
        return {
            'Accept-Language': LANGUAGES[0],
            'DNT': '1',
            'Upgrade-Insecure-Requests': '1',
        }
