import pytest

from adaptscrape.core.fetcher import MethodSelector, detect_dynamic_content_needs
from adaptscrape.core.fetcher.selector import is_transient_browser_error
from adaptscrape.exceptions import BotDetectionError, FetchError
from adaptscrape.models import ContentMetadata, FetchMethod, FetchResult

URL = 'https://example.com/page'


def page_with_links(count: int, filler: int = 1500) -> str:
    links = ''.join(f'<a href="/story-{i}">Story {i}</a>' for i in range(count))
    return f'<html><body><p>{"x" * filler}</p>{links}</body></html>'


def ok(html: str, url: str = URL) -> FetchResult:
    return FetchResult(url=url, html=html, status_code=200, final_url=url)


def failed(reason: str) -> FetchResult:
    return FetchResult(url=URL, html=None, block_reason=reason)


@pytest.fixture
def fetchers(mocker):
    return mocker.Mock(), mocker.Mock()


def make_selector(fetchers):
    http, browser = fetchers
    return MethodSelector(http_fetcher=http, browser_fetcher=browser, retry_wait=0)


def test_http_content_is_used_for_articles(fetchers):
    http, browser = fetchers
    http.fetch.return_value = ok(page_with_links(2))

    content = make_selector(fetchers).get_content(URL, is_article=True)

    assert content.method == FetchMethod.HTTP
    assert content.browser_attempts == 0
    browser.fetch.assert_not_called()


def test_short_http_content_escalates(fetchers):
    http, browser = fetchers
    http.fetch.return_value = ok('<html><body>short</body></html>')
    browser.fetch.return_value = ok(page_with_links(20))

    content = make_selector(fetchers).get_content(URL, is_article=True)

    assert content.method == FetchMethod.BROWSER
    assert content.browser_attempts == 1
    assert content.escalation_reason.startswith('insufficient content')
    options = browser.fetch.call_args.args[1]
    assert options.is_article_page
    assert not options.handle_htmx


def test_bot_detection_escalates(fetchers):
    http, browser = fetchers
    http.fetch.side_effect = BotDetectionError(URL, 403, ['HTTP 403'])
    browser.fetch.return_value = ok(page_with_links(20))

    content = make_selector(fetchers).get_content(URL, is_article=True)

    assert content.method == FetchMethod.BROWSER
    assert 'Bot detection' in content.escalation_reason


def test_transient_browser_error_is_retried(fetchers):
    http, browser = fetchers
    http.fetch.return_value = failed('HTTP 500')
    browser.fetch.side_effect = [failed('Target closed'), ok(page_with_links(20))]

    content = make_selector(fetchers).get_content(URL)

    assert content.method == FetchMethod.BROWSER
    assert content.browser_attempts == 2
    assert content.escalation_reason == 'HTTP 500'


def test_permanent_browser_error_is_not_retried(fetchers):
    http, browser = fetchers
    http.fetch.return_value = failed('HTTP 500')
    browser.fetch.return_value = failed('net::ERR_NAME_NOT_RESOLVED')

    with pytest.raises(FetchError) as exc_info:
        make_selector(fetchers).get_content(URL)

    assert browser.fetch.call_count == 1
    assert exc_info.value.message == 'net::ERR_NAME_NOT_RESOLVED'
    assert exc_info.value.url == URL


def test_browser_retries_are_capped(fetchers):
    http, browser = fetchers
    http.fetch.return_value = failed('timeout')
    browser.fetch.return_value = failed('Protocol error: connection closed')

    with pytest.raises(FetchError):
        make_selector(fetchers).get_content(URL)

    assert browser.fetch.call_count == 2


def test_missing_playwright_becomes_fetch_error(fetchers):
    http, browser = fetchers
    http.fetch.return_value = failed('timeout')
    browser.fetch.side_effect = ImportError('Playwright not installed')

    with pytest.raises(FetchError, match='Playwright not installed'):
        make_selector(fetchers).get_content(URL)


def test_dynamic_listing_escalates(fetchers):
    http, browser = fetchers
    http.fetch.return_value = ok(page_with_links(2))
    browser.fetch.return_value = ok(page_with_links(30))

    content = make_selector(fetchers).get_content(URL, is_article=False)

    assert content.method == FetchMethod.BROWSER
    assert content.escalation_reason == 'dynamic_content'
    assert browser.fetch.call_args.args[1].handle_htmx


def test_failed_escalation_keeps_http_content(fetchers):
    http, browser = fetchers
    http.fetch.return_value = ok(page_with_links(2))
    browser.fetch.return_value = failed('net::ERR_CONNECTION_REFUSED')

    content = make_selector(fetchers).get_content(URL, is_article=False)

    assert content.method == FetchMethod.HTTP
    assert content.diagnostic.startswith('browser escalation failed')


def test_javascript_shell_escalates_articles(fetchers):
    http, browser = fetchers
    shell = FetchResult(
        url=URL,
        html=page_with_links(20),
        status_code=200,
        final_url=URL,
        metadata=ContentMetadata(requires_js=True, js_framework='next'),
    )
    http.fetch.return_value = shell
    browser.fetch.return_value = ok(page_with_links(20, filler=4000))

    content = make_selector(fetchers).get_content(URL, is_article=True)

    assert content.method == FetchMethod.BROWSER
    assert content.escalation_reason == 'requires_javascript'
    assert browser.fetch.call_args.args[1].is_article_page


def test_static_listing_stays_on_http(fetchers):
    http, browser = fetchers
    http.fetch.return_value = ok(page_with_links(25))

    content = make_selector(fetchers).get_content(URL, is_article=False)

    assert content.method == FetchMethod.HTTP
    browser.fetch.assert_not_called()


@pytest.mark.parametrize(
    ('html', 'expected'),
    [
        (page_with_links(25), False),
        (page_with_links(2), True),
        (page_with_links(25) + '<div hx-get="/items/" hx-trigger="load"></div>', True),
        (page_with_links(7) + '<div id="react-root"></div>', True),
        (page_with_links(25) + '<div class="articles-container loading"></div>', True),
    ],
)
def test_detect_dynamic_content_needs(html, expected):
    assert detect_dynamic_content_needs(html, URL) is expected


def test_large_pages_ignore_weak_signals():
    html = page_with_links(7, filler=60_000) + '<div id="react-root"></div>'

    assert not detect_dynamic_content_needs(html)


@pytest.mark.parametrize(
    ('message', 'expected'),
    [('Target closed', True), ('Execution context was destroyed', True), ('HTTP 404', False), (None, False)],
)
def test_is_transient_browser_error(message, expected):
    assert is_transient_browser_error(message) is expected
