import pytest
import requests

from adaptscrape.core.redirects import RedirectResolver, find_redirect_target
from adaptscrape.models import RedirectOptions


def make_response(mocker, status, location=None, text=''):
    response = mocker.Mock()
    response.status_code = status
    response.headers = {'Location': location} if location else {}
    response.text = text
    return response


def test_meta_refresh_target():
    html = '<meta http-equiv="refresh" content="0; url=https://example.com/target">'
    assert find_redirect_target(html) == 'https://example.com/target'


def test_meta_refresh_with_content_before_http_equiv():
    html = '<meta content="3; URL=https://example.com/moved" http-equiv="Refresh">'
    assert find_redirect_target(html) == 'https://example.com/moved'


def test_meta_refresh_decodes_entities():
    html = '<meta http-equiv="refresh" content="5;url=https://example.com/a?x=1&amp;y=2">'
    assert find_redirect_target(html) == 'https://example.com/a?x=1&y=2'


@pytest.mark.parametrize(
    'script',
    [
        'window.location.href = "https://example.com/js";',
        "window.location.replace('https://example.com/js');",
        'window.location = "https://example.com/js";',
        'document.location = "https://example.com/js";',
    ],
)
def test_javascript_targets(script):
    assert find_redirect_target(f'<script>{script}</script>') == 'https://example.com/js'


def test_relative_javascript_target_is_ignored():
    assert find_redirect_target('<script>window.location.href = "/relative";</script>') is None


def test_visited_target_is_ignored():
    html = '<script>window.location.href = "https://example.com/js";</script>'
    assert find_redirect_target(html, visited=['https://example.com/js']) is None


def test_disabled_kinds_are_skipped():
    js = '<script>window.location.href = "https://example.com/js";</script>'
    meta = '<meta http-equiv="refresh" content="0; url=https://example.com/target">'

    assert find_redirect_target(js, follow_javascript=False) is None
    assert find_redirect_target(meta, follow_meta_refresh=False) is None
    assert find_redirect_target('') is None


def test_resolve_http_follows_location_headers(mocker):
    session = mocker.Mock()
    session.get.side_effect = [
        make_response(mocker, 301, location='/step2'),
        make_response(mocker, 200, text='<html><body>done</body></html>'),
    ]

    info = RedirectResolver(session=session).resolve_http('https://example.com/start')

    assert info.redirect_chain == ('https://example.com/start', 'https://example.com/step2')
    assert info.final_url == 'https://example.com/step2'
    assert info.redirect_count == 1
    assert info.method == 'http'
    assert info.error is None


def test_resolve_http_follows_meta_refresh(mocker):
    session = mocker.Mock()
    session.get.side_effect = [
        make_response(mocker, 200, text='<meta http-equiv="refresh" content="0; url=https://example.com/final">'),
        make_response(mocker, 200, text='<html><body>final</body></html>'),
    ]

    info = RedirectResolver(session=session).resolve_http('https://example.com/start')

    assert info.final_url == 'https://example.com/final'
    assert info.has_redirects


def test_resolve_http_stops_on_cycle(mocker):
    session = mocker.Mock()
    session.get.side_effect = [
        make_response(mocker, 302, location='https://example.com/b'),
        make_response(mocker, 302, location='https://example.com/a'),
    ]

    info = RedirectResolver(session=session).resolve_http('https://example.com/a')

    assert info.redirect_chain == ('https://example.com/a', 'https://example.com/b')
    assert session.get.call_count == 2


def test_resolve_http_respects_max_redirects(mocker):
    session = mocker.Mock()
    counter = iter(range(100))
    session.get.side_effect = lambda *args, **kwargs: make_response(
        mocker, 301, location=f'https://example.com/hop{next(counter)}'
    )

    info = RedirectResolver(session=session).resolve_http('https://example.com/start', RedirectOptions(max_redirects=2))

    assert info.redirect_count == 2
    assert info.final_url == 'https://example.com/hop1'


def test_resolve_http_fails_open(mocker):
    session = mocker.Mock()
    session.get.side_effect = requests.ConnectionError('connection refused')

    info = RedirectResolver(session=session).resolve('https://example.com/start')

    assert info.final_url == 'https://example.com/start'
    assert info.redirect_count == 0
    assert 'connection refused' in info.error


def test_detect_redirect(mocker):
    session = mocker.Mock()
    session.head.return_value = make_response(mocker, 301, location='/elsewhere')

    assert RedirectResolver(session=session).detect_redirect('https://example.com/a')


def test_detect_redirect_falls_back_to_get(mocker):
    session = mocker.Mock()
    session.head.return_value = make_response(mocker, 405)
    session.get.return_value = make_response(mocker, 200)

    assert not RedirectResolver(session=session).detect_redirect('https://example.com/a')
    session.get.assert_called_once()


def test_detect_redirect_swallows_errors(mocker):
    session = mocker.Mock()
    session.head.side_effect = requests.Timeout('slow')

    assert not RedirectResolver(session=session).detect_redirect('https://example.com/a')


class FakeResponse:
    def __init__(self, url, status):
        self.url = url
        self.status = status


class FakePage:
    def __init__(self, hops, final_url, html='<html><body>landing</body></html>', location=None):
        self.hops = hops
        self.final_url = final_url
        self.html = html
        self.location = location
        self.handlers = []
        self.visited = []
        self.url = 'about:blank'

    def on(self, event, handler):
        self.handlers.append(handler)

    def remove_listener(self, event, handler):
        self.handlers.remove(handler)

    def goto(self, url, wait_until=None, timeout=None):
        self.visited.append(url)
        if len(self.visited) == 1:
            for hop in self.hops:
                for handler in self.handlers:
                    handler(FakeResponse(hop, 302))
            self.url = self.final_url
        else:
            self.url = url

    def wait_for_timeout(self, ms):
        pass

    def content(self):
        return self.html

    def evaluate(self, script):
        return self.location


def test_resolve_with_browser_records_chain():
    page = FakePage(hops=['https://example.com/hop'], final_url='https://example.com/final')

    info = RedirectResolver().resolve_with_browser(page, 'https://example.com/start')

    assert info.redirect_chain == (
        'https://example.com/start',
        'https://example.com/hop',
        'https://example.com/final',
    )
    assert info.method == 'browser'
    assert page.handlers == []


def test_resolve_with_browser_follows_live_location():
    page = FakePage(hops=[], final_url='https://example.com/start', location='https://example.com/js-target')

    info = RedirectResolver().resolve_with_browser(page, 'https://example.com/start')

    assert page.visited == ['https://example.com/start', 'https://example.com/js-target']
    assert info.final_url == 'https://example.com/js-target'


def test_resolve_with_browser_fails_open():
    page = FakePage(hops=[], final_url='https://example.com/start')

    def broken_goto(*args, **kwargs):
        raise RuntimeError('navigation timeout')

    page.goto = broken_goto

    info = RedirectResolver().resolve_with_browser(page, 'https://example.com/start')

    assert info.final_url == 'https://example.com/start'
    assert info.error == 'navigation timeout'


def test_resolve_with_browser_reports_loaded_page_past_the_cap():
    hops = ['https://example.com/hop1', 'https://example.com/hop2']
    page = FakePage(hops=hops, final_url='https://example.com/landing')

    info = RedirectResolver().resolve_with_browser(
        page, 'https://example.com/start', RedirectOptions(max_redirects=1)
    )

    assert info.redirect_chain == ('https://example.com/start', 'https://example.com/hop1')
    assert info.final_url == 'https://example.com/landing'


def test_resolver_sends_configured_user_agent(mocker):
    session = mocker.Mock()
    session.get.return_value = make_response(mocker, 200, text='<html></html>')

    RedirectResolver(session=session, user_agent='NewsBot/1.0').resolve_http('https://example.com/start')

    assert session.get.call_args.kwargs['headers']['User-Agent'] == 'NewsBot/1.0'
