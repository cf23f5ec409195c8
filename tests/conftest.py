import pytest

from adaptscrape.llm_config import LLMConfig
from adaptscrape.models import ScrapingConfig

ARTICLE_PARAGRAPHS = (
    'The city council voted on Tuesday to approve a plan for a new riverside park. '
    'The project has been discussed for nearly three years.',
    'Supporters say the park will give families in the east district a green space within walking distance. '
    'Opponents raised concerns about the cost of long term maintenance.',
    'Construction is expected to begin next spring. The first phase includes walking trails, '
    'a playground and a small amphitheater near the water.',
    'The mayor said the budget for the first phase is already secured. Further phases depend on state grants '
    'that the city plans to apply for later this year.',
)


@pytest.fixture
def article_paragraphs():
    return ARTICLE_PARAGRAPHS


@pytest.fixture
def mock_llm_config():
    return LLMConfig(provider='groq', model_name='llama-3.3-70b-versatile', api_key='test-key', temperature=0.0)


@pytest.fixture
def article_html():
    paragraphs = '\n'.join(f'<p>{text}</p>' for text in ARTICLE_PARAGRAPHS)
    return f"""
    <!DOCTYPE html>
    <html>
    <head>
        <title>City Council Approves New Park Plan | Example News</title>
        <meta name="author" content="Jane Reporter">
        <script>var tracking = "ignore me";</script>
    </head>
    <body>
        <nav><a href="/">Home</a> <a href="/news">News</a> <a href="/sports">Sports</a></nav>
        <header class="site-header">Example News</header>
        <main>
            <article class="story">
                <h1 class="headline">City Council Approves New Park Plan</h1>
                <div class="byline">
                    <span class="author-name">By Jane Reporter</span>
                    <time datetime="2024-03-15T09:30:00Z">March 15, 2024</time>
                </div>
                <div class="story-body">
                    {paragraphs}
                </div>
            </article>
        </main>
        <footer>Copyright Example News. All rights reserved.</footer>
    </body>
    </html>
    """


@pytest.fixture
def article_config():
    return ScrapingConfig(
        title_selector='h1.headline',
        content_selector='.story-body',
        author_selector='.author-name',
        date_selector='time',
        confidence=0.9,
    )


@pytest.fixture
def listing_html():
    items = '\n'.join(
        f'<li><a href="/news/2024/story-{i}">Headline number {i} about something that happened today</a></li>'
        for i in range(1, 13)
    )
    return f"""
    <html>
    <head><title>Latest News | Example News</title></head>
    <body>
        <nav><a href="/">Home</a> <a href="/about">About us</a></nav>
        <ul class="stories">
            {items}
        </ul>
        <a href="/news/2024/story-1">Headline number 1 about something that happened today</a>
        <a href="mailto:desk@example.com">Send us a tip about something happening today</a>
        <a href="/login">Log in to your account to comment on stories</a>
    </body>
    </html>
    """


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line('markers', 'integration: marks tests as integration tests')
    config.addinivalue_line('markers', 'unit: marks tests as unit tests')


def pytest_collection_modifyitems(config, items):
    """Apply directory-based marks to collected test items."""

    for item in items:
        if hasattr(item, 'fspath'):
            file_path = str(item.fspath)

            if '/tests/integration/' in file_path:
                item.add_marker(pytest.mark.integration)
            elif '/tests/unit/' in file_path:
                item.add_marker(pytest.mark.unit)
