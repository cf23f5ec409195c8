import pytest

from adaptscrape.core.validation import (
    extract_title_from_url,
    is_corrupted_text,
    is_valid_article_content,
    is_valid_title,
    sanitize_content,
    validate_content,
)
from adaptscrape.models import ProtectionType

ARTICLE_TEXT = (
    'The city council voted on Tuesday to approve a plan for a new riverside park. '
    'The project has been discussed for nearly three years. Supporters say the park will give families '
    'a green space within walking distance. Opponents raised concerns about maintenance costs. '
    'Construction is expected to begin next spring.'
)


def test_valid_article_content():
    assert is_valid_article_content(ARTICLE_TEXT)


@pytest.mark.parametrize(
    'content',
    [
        '',
        'Too short. To be an article.',
        ARTICLE_TEXT + ' Just a moment while we check your browser.',
        '503 Service Unavailable. ' + ARTICLE_TEXT,
        ARTICLE_TEXT + ' Bad Gateway. Please try again later.',
        ARTICLE_TEXT + ' Internal Server Error. The request could not be completed.',
        ARTICLE_TEXT + ' 403 Forbidden. You do not have access.',
        ARTICLE_TEXT + ' Please enable JavaScript to view this page.',
        'word ' * 80,
    ],
)
def test_invalid_article_content(content):
    assert not is_valid_article_content(content)


def test_article_content_respects_min_length():
    assert not is_valid_article_content(ARTICLE_TEXT, min_length=len(ARTICLE_TEXT) + 1)


@pytest.mark.parametrize(
    'text',
    ['', 'broken \x00 text', 'mis���decoded', 'abababababababab', 'ÄÖÜßÄÖÜßÄÖÜß ok'],
)
def test_corrupted_text(text):
    assert is_corrupted_text(text)


def test_separator_lines_are_not_corrupted():
    assert not is_corrupted_text('Section one\n==========\nMore text here')


@pytest.mark.parametrize('title', ['City Council Approves New Park Plan', 'Q&A: What the new rules mean'])
def test_valid_titles(title):
    assert is_valid_title(title)


@pytest.mark.parametrize(
    'title', ['', 'ab', 'Untitled', '404 Not Found', 'Just a moment...', 'Error: something broke', '12345']
)
def test_invalid_titles(title):
    assert not is_valid_title(title)


def test_sanitize_content_strips_control_characters():
    assert sanitize_content('Hello\x00 �world\n\n   again') == 'Hello world again'
    assert sanitize_content('') == ''


def test_extract_title_from_url():
    url = 'https://example.com/news/city-council-approves-park-plan-12345.html'
    assert extract_title_from_url(url) == 'City Council Approves Park Plan'


def test_extract_title_from_url_without_slug():
    assert extract_title_from_url('https://example.com/') is None


def test_validate_short_page():
    result = validate_content('<html><body>tiny</body></html>')

    assert not result.is_valid
    assert result.confidence == 0
    assert not result.has_content


def test_validate_article_page(article_html):
    result = validate_content(article_html, 'https://example.com/a', is_article=True)

    assert result.is_valid
    assert not result.is_error_page
    assert result.confidence == 100
    assert result.protection_type == ProtectionType.NONE


def test_validate_challenge_page():
    html = f"""
    <html>
    <head><title>Just a moment...</title></head>
    <body>
        <div class="cf-browser-verification">
            <form id="challenge-form" action="/verify">Checking your connection</form>
        </div>
        <p>Performance and security by Cloudflare</p>
        <!-- {'padding ' * 60} -->
    </body>
    </html>
    """
    result = validate_content(html, 'https://example.com/a', is_article=True)

    assert result.is_error_page
    assert not result.is_valid
    assert result.protection_type == ProtectionType.CLOUDFLARE
    assert 'title:Just a moment' in result.error_indicators


def test_validate_listing_page_counts_links(listing_html):
    result = validate_content(listing_html, 'https://example.com/news')

    assert result.link_count >= 10
    assert result.is_valid
