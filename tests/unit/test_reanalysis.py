from dataclasses import replace
from datetime import date

import pytest
from pydantic_ai import Agent
from pydantic_ai.models.test import TestModel

from adaptscrape.core import AIReanalyzer
from adaptscrape.models import ArticleContent, ExtractedArticle

LONG_TEXT = ' '.join(
    [
        'The council approved the riverside park after a long debate.',
        'Residents of the east district spoke in favour of the plan.',
        'Construction should begin next spring if the weather allows.',
        'The first phase includes trails, a playground and an amphitheater.',
    ]
)


def ai_agent(**output):
    return Agent(TestModel(custom_output_args=output), output_type=ExtractedArticle)


@pytest.fixture
def weak_result():
    return ArticleContent(
        title='City Council Approves New Park Plan',
        content='Too short',
        author='Jane Reporter',
        extraction_method='validation_failed',
        confidence=0.1,
        diagnostic='content from body_fallback is not valid article text',
    )


@pytest.mark.parametrize(
    ('changes', 'expected'),
    [
        ({}, False),
        ({'content': 'Short body text.'}, True),
        ({'confidence': 0.4}, True),
        ({'title': 'Park'}, True),
        ({'content': 'Menu ' + LONG_TEXT}, True),
    ],
)
def test_should_trigger(changes, expected):
    result = ArticleContent(title='City Council Approves New Park Plan', content=LONG_TEXT, confidence=0.9)
    result = replace(result, **changes)

    assert AIReanalyzer.should_trigger(result) is expected


def test_confident_ai_result_is_used(article_html, weak_result):
    agent = ai_agent(title=' Park plan approved ', content=LONG_TEXT, date='March 15, 2024', confidence=0.8)
    reanalyzer = AIReanalyzer(agent=agent, retry_wait=0)

    result = reanalyzer.reanalyze(article_html, 'https://example.com/news/park', weak_result)

    assert result.extraction_method == 'ai_reanalysis'
    assert result.confidence == 0.8
    assert result.title == 'Park plan approved'
    assert result.content == LONG_TEXT
    assert result.author == 'Jane Reporter'
    assert result.publish_date == date(2024, 3, 15)
    assert result.diagnostic is None


def test_unsure_ai_falls_through_to_recovery(article_html, weak_result):
    agent = ai_agent(title='Park', content=LONG_TEXT, confidence=0.3)
    reanalyzer = AIReanalyzer(agent=agent, retry_wait=0)

    result = reanalyzer.reanalyze(article_html, 'https://example.com/news/park', weak_result)

    assert result.extraction_method == 'multi_attempt_1'
    assert result.confidence == 0.6
    assert 'riverside park' in result.content
    assert result.title == weak_result.title
    assert result.diagnostic is None


def test_ai_error_falls_through_to_recovery(article_html, weak_result, mocker):
    agent = mocker.Mock()
    agent.run_sync.side_effect = RuntimeError('model unavailable')
    reanalyzer = AIReanalyzer(agent=agent, retry_wait=0)

    result = reanalyzer.reanalyze(article_html, 'https://example.com/news/park', weak_result)

    agent.run_sync.assert_called_once()
    assert result.extraction_method == 'multi_attempt_1'


def test_paragraph_recovery(weak_result, article_paragraphs):
    html = '<html><body>' + ''.join(f'<p>{text}</p>' for text in article_paragraphs) + '</body></html>'

    result = AIReanalyzer(retry_wait=0).reanalyze(html, 'https://example.com/a', weak_result)

    assert result.extraction_method == 'multi_attempt_3'
    assert result.confidence == 0.5
    assert result.content.split('\n\n') == list(article_paragraphs)


def test_body_line_recovery_for_pages_without_paragraphs(weak_result, article_paragraphs):
    lines = ''.join(f'<div>{text}</div>' for text in article_paragraphs)
    html = f'<html><body><div>Menu</div><p>Short teaser line.</p>{lines}</body></html>'

    result = AIReanalyzer(retry_wait=0).reanalyze(html, 'https://example.com/a', weak_result)

    assert result.extraction_method == 'multi_attempt_3'
    assert result.confidence == 0.4
    assert result.content.split('\n') == list(article_paragraphs)
    assert result.diagnostic is None


def test_recovery_failure_keeps_previous_fields(weak_result):
    result = AIReanalyzer(retry_wait=0).reanalyze('<html><body><p>Hi</p></body></html>', 'https://a.b', weak_result)

    assert result.extraction_method == 'recovery_failed'
    assert result.confidence == 0.2
    assert result.title == weak_result.title
    assert result.content == weak_result.content
    assert result.author == 'Jane Reporter'
    assert result.diagnostic


def test_recovery_waits_between_attempts(weak_result, mocker):
    sleep = mocker.patch('adaptscrape.core.reanalysis.time.sleep')

    AIReanalyzer(retry_wait=1.5).recover('<html><body></body></html>', weak_result)

    assert sleep.call_count == 2
    sleep.assert_called_with(1.5)
