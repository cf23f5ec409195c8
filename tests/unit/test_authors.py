import pytest

from adaptscrape.core.extraction.authors import clean_author_name, is_plausible_fallback_author, is_rejected_author


@pytest.mark.parametrize(
    ('raw', 'expected'),
    [
        ('By Jane Reporter', 'Jane Reporter'),
        ('written by   Jane   Reporter', 'Jane Reporter'),
        ('Author: Jane Reporter', 'Jane Reporter'),
        ('Jane Reporter is a senior writer covering city hall.', 'Jane Reporter'),
        ('Jane Reporter has been covering politics since 2001', 'Jane Reporter'),
        ('Jane Reporter. She lives in Portland with two cats.', 'Jane Reporter'),
        ('John Smith, Staff Writer', 'John Smith, Staff Writer'),
        ('JANE DOE IS A SENIOR REPORTER', 'JANE DOE'),
        ('Jane Doe Has Been Covering Courts Since 2010', 'Jane Doe'),
    ],
)
def test_clean_author_name(raw, expected):
    assert clean_author_name(raw) == expected


def test_clean_author_name_uses_first_line_of_long_bios():
    raw = 'Jane Reporter\n' + 'lorem ipsum dolor sit amet ' * 6

    assert clean_author_name(raw) == 'Jane Reporter'


def test_clean_author_name_truncates_at_word_boundary():
    raw = 'jane reporter and the whole metro desk team with additional reporting from several contributors'

    cleaned = clean_author_name(raw)

    assert len(cleaned) <= 60
    assert raw.startswith(cleaned)
    assert not cleaned.endswith(' ')


@pytest.mark.parametrize(
    ('text', 'expected'),
    [
        ('Contact: press@example.com', True),
        ('MEDIA CONTACT Jane Reporter', True),
        ('March 15, 2024', True),
        ('Updated 10:30 AM', True),
        ('15 March 2024', True),
        ('May 3', True),
        ('Jane Reporter', False),
        ('April Glaser', False),
        ('By June Carter', False),
    ],
)
def test_is_rejected_author(text, expected):
    assert is_rejected_author(text) is expected


@pytest.mark.parametrize(
    ('text', 'expected'),
    [('Jo', False), ('12345', False), ('x' * 81, False), ('Jane Reporter', True), ('By Jane Reporter', True)],
)
def test_is_plausible_fallback_author(text, expected):
    assert is_plausible_fallback_author(text) is expected
