import json
from datetime import date, datetime, timezone

import pytest

from adaptscrape.core.extraction import DateExtractor, parse_date

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    ('value', 'expected'),
    [
        ('2024-03-15T09:30:00Z', date(2024, 3, 15)),
        ('March 15, 2024', date(2024, 3, 15)),
        ('15 March 2024', date(2024, 3, 15)),
        ('1710495000', date(2024, 3, 15)),
        ('1710495000000', date(2024, 3, 15)),
        ('3 days ago', date(2024, 5, 29)),
        ('2 weeks ago', date(2024, 5, 18)),
    ],
)
def test_parse_date(value, expected):
    assert parse_date(value, now=NOW) == expected


@pytest.mark.parametrize(
    'value',
    ['By Jane Reporter', 'Jane Reporter', '12345', '1985-01-01', '2030-01-01', 'not a date', '', None],
)
def test_parse_date_rejects_implausible_values(value):
    assert parse_date(value, now=NOW) is None


def test_extract_uses_selector_hint(article_html):
    assert DateExtractor().extract(article_html, 'time') == date(2024, 3, 15)


def test_extract_ignores_invalid_hint(article_html):
    assert DateExtractor().extract(article_html, 'div[') == date(2024, 3, 15)


def test_extract_from_meta_tag():
    html = """
    <html><head>
        <meta property="article:published_time" content="2023-07-04T12:00:00+00:00">
    </head><body><p>Fireworks lit up the harbour.</p></body></html>
    """
    assert DateExtractor().extract(html) == date(2023, 7, 4)


def test_extract_from_json_ld_graph():
    data = {
        '@context': 'https://schema.org',
        '@graph': [
            {'@type': 'WebPage', 'datePublished': 'yesterday'},
            {'@type': 'NewsArticle', 'datePublished': '2022-11-02'},
        ],
    }
    html = f'<html><head><script type="application/ld+json">{json.dumps(data)}</script></head><body></body></html>'
    assert DateExtractor().extract(html) == date(2022, 11, 2)


def test_extract_skips_broken_json_ld():
    html = """
    <html><head><script type="application/ld+json">{not json</script></head>
    <body><span class="publish-date">2021-08-09</span></body></html>
    """
    assert DateExtractor().extract(html) == date(2021, 8, 9)


def test_extract_from_byline_text():
    html = '<html><body><div class="byline">Posted Jan 5, 2021 by staff</div><p>Text</p></body></html>'
    assert DateExtractor().extract(html) == date(2021, 1, 5)


def test_extract_returns_none_without_dates():
    assert DateExtractor().extract('<html><body><p>Nothing here</p></body></html>') is None
    assert DateExtractor().extract('') is None
