import pytest
from bs4 import BeautifulSoup

from adaptscrape.core.extraction.recovery import (
    base_class_name,
    generate_selector_variations,
    is_low_quality_content,
    safe_select,
    select_first_text,
    select_text,
)

ARTICLE_TEXT = (
    'The city council voted on Tuesday to approve a plan for a new riverside park. '
    'The project has been discussed for nearly three years.'
)


def test_variations_for_class_selector():
    assert generate_selector_variations('.story_body') == [
        '.story_body',
        '.story-body',
        '[class="story_body"]',
        '[class*="story_body"]',
        '[class^="story_body"]',
        '[class$="story_body"]',
    ]


def test_variations_toggle_child_combinator():
    assert generate_selector_variations('div.content > p') == ['div.content > p', 'div.content p']
    assert generate_selector_variations('main article') == ['main article', 'main > article']


def test_variations_strip_pseudo_classes():
    variations = generate_selector_variations('article p:not(.ad):first-of-type')

    assert variations[0] == 'article p:not(.ad):first-of-type'
    assert 'article p' in variations


def test_variations_have_no_duplicates():
    variations = generate_selector_variations('.a-b_c')

    assert len(variations) == len(set(variations))
    assert generate_selector_variations('   ') == []


@pytest.mark.parametrize(
    ('selector', 'expected'),
    [('div.article-body p', 'article-body'), ('div.a.b', 'b'), ('.story:first-child', 'story'), ('article', None)],
)
def test_base_class_name(selector, expected):
    assert base_class_name(selector) == expected


@pytest.mark.parametrize(
    'text',
    [
        '',
        'Too short to matter',
        'Menu Home News Sports Weather Opinion Obituaries Contact Subscribe Today',
        'ha' * 30,
        '!!!! ---- **** //// ???? !!!! ---- **** //// ???? !!!! ----',
    ],
)
def test_low_quality_content(text):
    assert is_low_quality_content(text)


def test_article_text_is_not_low_quality():
    assert not is_low_quality_content(ARTICLE_TEXT)


def test_safe_select_tolerates_invalid_selectors():
    soup = BeautifulSoup('<div class="a">x</div>', 'lxml')

    assert safe_select(soup, 'div[') == []
    assert safe_select(soup, '') == []
    assert len(safe_select(soup, '.a')) == 1


def test_select_text_skips_nested_matches():
    soup = BeautifulSoup('<div class="c"><div class="c">inner</div> outer</div><div class="c">second</div>', 'lxml')

    assert select_text(soup, '.c') == 'inner outer\n\nsecond'


def test_select_first_text_skips_empty_matches():
    soup = BeautifulSoup('<h1></h1><h1>  Real   headline </h1>', 'lxml')

    assert select_first_text(soup, 'h1') == 'Real headline'
    assert select_first_text(soup, 'h2') == ''
