import logging
from datetime import datetime, timezone

import requests

from world_briefing.fetcher import FeedFetcher, fetch_region, strip_markup
from world_briefing.models import RawArticle, Source

SOURCE = Source(name="BBC Europe", url="https://feeds.example.com/europe.xml", logo="BBC")

RSS = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:media="http://search.yahoo.com/mrss/">
<channel>
<title>Example</title>
<item>
  <title>Enclosure image story</title>
  <link>https://example.com/news/1</link>
  <pubDate>Sat, 01 Mar 2025 10:00:00 GMT</pubDate>
  <description><![CDATA[<p>Hello <b>world</b> &amp; more</p>]]></description>
  <enclosure url="https://img.example.com/1.jpg" type="image/jpeg" length="0"/>
</item>
<item>
  <title>Media content story</title>
  <link>https://example.com/news/2</link>
  <pubDate>Sat, 01 Mar 2025 09:00:00 GMT</pubDate>
  <description>Plain text</description>
  <media:content url="https://img.example.com/2.jpg" medium="image"/>
</item>
<item>
  <title>Thumbnail story</title>
  <link>https://example.com/news/3</link>
  <pubDate>Sat, 01 Mar 2025 08:00:00 GMT</pubDate>
  <description>Thumb</description>
  <media:thumbnail url="https://img.example.com/3.jpg"/>
</item>
<item>
  <title>Inline image story</title>
  <link>https://example.com/news/4</link>
  <pubDate>Sat, 01 Mar 2025 07:00:00 GMT</pubDate>
  <description><![CDATA[<img src="https://img.example.com/4.jpg" /> Caption text]]></description>
</item>
<item>
  <title>Video enclosure story</title>
  <link>https://example.com/news/5</link>
  <pubDate>Sat, 01 Mar 2025 06:00:00 GMT</pubDate>
  <description>Watch</description>
  <enclosure url="https://cdn.example.com/clip.mp4" type="video/mp4" length="0"/>
</item>
<item>
  <title>Video page story</title>
  <link>https://example.com/news/video/6</link>
  <pubDate>Sat, 01 Mar 2025 05:00:00 GMT</pubDate>
  <description>Clip</description>
</item>
<item>
  <description>No title, link or date</description>
</item>
</channel>
</rss>
"""


class FakeResponse:
    def __init__(self, content, status_code=200):
        self.content = content
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, timeout=None, headers=None):
        self.calls.append((url, timeout, headers))
        if self.error:
            raise self.error
        return self.response


def _fetch(content=RSS, **kwargs):
    session = FakeSession(FakeResponse(content.encode("utf-8")))
    fetcher = FeedFetcher(session=session, **kwargs)
    return fetcher.fetch(SOURCE), session


def test_fetch_extracts_fields_and_images():
    articles, session = _fetch()

    assert len(session.calls) == 1
    url, timeout, headers = session.calls[0]
    assert url == SOURCE.url
    assert headers == {"User-Agent": "WorldNews/1.0"}

    first = articles[0]
    assert first.title == "Enclosure image story"
    assert first.link == "https://example.com/news/1"
    assert first.published_at == datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc)
    assert first.snippet == "Hello world & more"
    assert first.source_name == "BBC Europe"
    assert first.source_logo == "BBC"
    assert first.image == "https://img.example.com/1.jpg"
    assert first.media_kind == "article"

    assert articles[1].image == "https://img.example.com/2.jpg"
    assert articles[2].image == "https://img.example.com/3.jpg"
    assert articles[3].image == "https://img.example.com/4.jpg"
    assert articles[3].snippet == "Caption text"


def test_fetch_detects_video():
    articles, _ = _fetch()

    enclosure_video = articles[4]
    assert enclosure_video.video == "https://cdn.example.com/clip.mp4"
    assert enclosure_video.media_kind == "video"
    assert enclosure_video.image is None

    page_video = articles[5]
    assert page_video.video == "https://example.com/news/video/6"
    assert page_video.media_kind == "video"


def test_fetch_applies_fallbacks_for_missing_fields():
    before = datetime.now(timezone.utc)
    articles, _ = _fetch()
    after = datetime.now(timezone.utc)

    bare = articles[6]
    assert bare.title == "No title"
    assert bare.link == "#"
    assert before <= bare.published_at <= after
    assert bare.video is None


def test_fetch_keeps_first_ten_items_in_feed_order():
    items = "".join(
        f"<item><title>Story {i}</title><link>https://example.com/{i}</link></item>"
        for i in range(12)
    )
    feed = f'<?xml version="1.0"?><rss version="2.0"><channel><title>T</title>{items}</channel></rss>'

    articles, _ = _fetch(feed)

    assert [a.title for a in articles] == [f"Story {i}" for i in range(10)]


def test_snippet_is_truncated_to_200_characters():
    feed = (
        '<?xml version="1.0"?><rss version="2.0"><channel><title>T</title>'
        f"<item><title>Long</title><description>{'word ' * 100}</description></item>"
        "</channel></rss>"
    )
    [article], _ = _fetch(feed)
    assert len(article.snippet) == 200


def test_network_failure_returns_empty_list_and_warns(caplog):
    fetcher = FeedFetcher(session=FakeSession(error=requests.ConnectionError("boom")))
    with caplog.at_level(logging.WARNING, logger="world_briefing.fetcher"):
        assert fetcher.fetch(SOURCE) == []
    assert "Failed to fetch BBC Europe" in caplog.text


def test_http_error_and_unparseable_body_return_empty_list():
    failing = FeedFetcher(session=FakeSession(FakeResponse(b"", status_code=503)))
    assert failing.fetch(SOURCE) == []

    garbage = FeedFetcher(session=FakeSession(FakeResponse(b"\x00 not a feed")))
    assert garbage.fetch(SOURCE) == []


def test_strip_markup_removes_tags_and_collapses_space():
    assert strip_markup("<p>One</p>\n<p>Two &lt;3</p>") == "One Two <3"


class FakeFetcher:
    def __init__(self, by_source):
        self.by_source = by_source

    def fetch(self, source):
        return self.by_source.get(source.name, [])


def _raw(title, source):
    return RawArticle(
        title=title,
        link="https://example.com",
        published_at=datetime(2025, 3, 1, tzinfo=timezone.utc),
        source_name=source.name,
        source_logo=source.logo,
    )


def test_fetch_region_concatenates_in_source_order_and_skips_failures():
    a = Source(name="A", url="https://a.example.com", logo="A")
    b = Source(name="B", url="https://b.example.com", logo="B")
    c = Source(name="C", url="https://c.example.com", logo="C")
    fetcher = FakeFetcher({"A": [_raw("a1", a), _raw("a2", a)], "C": [_raw("c1", c)]})

    articles = fetch_region([a, b, c], fetcher)

    assert [x.title for x in articles] == ["a1", "a2", "c1"]
    assert fetch_region([], fetcher) == []


LAYERED_IMAGES_RSS = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:media="http://search.yahoo.com/mrss/">
<channel>
<title>Example</title>
<item>
  <title>Every image kind</title>
  <link>https://example.com/news/a</link>
  <description><![CDATA[<img src="https://img.example.com/inline-a.jpg" /> Text]]></description>
  <enclosure url="https://img.example.com/enclosure-a.jpg" type="image/jpeg" length="0"/>
  <media:content url="https://img.example.com/media-a.jpg" medium="image"/>
  <media:thumbnail url="https://img.example.com/thumb-a.jpg"/>
</item>
<item>
  <title>No enclosure</title>
  <link>https://example.com/news/b</link>
  <description><![CDATA[<img src="https://img.example.com/inline-b.jpg" /> Text]]></description>
  <media:content url="https://img.example.com/media-b.jpg" medium="image"/>
  <media:thumbnail url="https://img.example.com/thumb-b.jpg"/>
</item>
<item>
  <title>Thumbnail and inline</title>
  <link>https://example.com/news/c</link>
  <description><![CDATA[<img src="https://img.example.com/inline-c.jpg" /> Text]]></description>
  <media:thumbnail url="https://img.example.com/thumb-c.jpg"/>
</item>
</channel>
</rss>
"""


def test_image_sources_follow_precedence():
    articles, _ = _fetch(LAYERED_IMAGES_RSS)

    assert [a.image for a in articles] == [
        "https://img.example.com/enclosure-a.jpg",
        "https://img.example.com/media-b.jpg",
        "https://img.example.com/thumb-c.jpg",
    ]


class PartlyBrokenFetcher(FakeFetcher):
    def fetch(self, source):
        if source.name == "B":
            raise RuntimeError("fetcher bug")
        return super().fetch(source)


def test_fetch_region_isolates_a_raising_fetcher(caplog):
    a = Source(name="A", url="https://a.example.com", logo="A")
    b = Source(name="B", url="https://b.example.com", logo="B")
    c = Source(name="C", url="https://c.example.com", logo="C")
    fetcher = PartlyBrokenFetcher({"A": [_raw("a1", a)], "C": [_raw("c1", c)]})

    with caplog.at_level(logging.WARNING, logger="world_briefing.fetcher"):
        articles = fetch_region([a, b, c], fetcher)

    assert [x.title for x in articles] == ["a1", "c1"]
    assert "Failed to fetch B" in caplog.text
