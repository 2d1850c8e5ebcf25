import pytest

from chat_previews.extractor import extract_links, is_absolute_url, strip_formatting


def _urls(text, **kwargs):
    return [c.url for c in extract_links(text, **kwargs)]


@pytest.mark.parametrize("text", ["", None, "no links here", "ftp://example.com/file"])
def test_extract_links_without_http_urls_is_empty(text):
    assert extract_links(text) == []


def test_extract_links_keeps_order_and_duplicates():
    links = extract_links("a http://one.example/x b https://two.example c http://one.example/x")

    assert [c.url for c in links] == [
        "http://one.example/x",
        "https://two.example",
        "http://one.example/x",
    ]
    assert [c.position for c in links] == [0, 1, 2]


def test_extract_links_trims_sentence_punctuation():
    assert _urls("Read http://example.com/post. Then http://example.com/a?b=1, ok!") == [
        "http://example.com/post",
        "http://example.com/a?b=1",
    ]


def test_extract_links_balances_parentheses():
    text = "(see https://en.wikipedia.org/wiki/Python_(programming_language))"
    assert _urls(text) == ["https://en.wikipedia.org/wiki/Python_(programming_language)"]


def test_extract_links_unwraps_angle_brackets():
    assert _urls("<http://example.com/wrapped>") == ["http://example.com/wrapped"]


def test_extract_links_ignores_formatting_codes():
    text = "\x02http://example.com/bold\x02 \x0304,12http://example.com/colour\x0f"
    assert _urls(text) == ["http://example.com/bold", "http://example.com/colour"]


def test_extract_links_skips_malformed_urls():
    assert _urls("http:// http://:80/x http://host:notaport/ http://ok.example") == [
        "http://ok.example"
    ]


def test_extract_links_max_links():
    text = " ".join(f"http://example.com/{i}" for i in range(5))
    assert _urls(text, max_links=2) == ["http://example.com/0", "http://example.com/1"]
    assert len(_urls(text, max_links=0)) == 5


def test_strip_formatting_removes_colour_arguments():
    assert strip_formatting("\x0312,01blue\x03 \x04ff0000red\x0f") == "blue red"


@pytest.mark.parametrize(
    "url,expected",
    [
        ("http://localhost:9002/real-test-image.png", True),
        ("HTTPS://Example.com", True),
        ("/real-test-image.png", False),
        ("//cdn.example/img.png", False),
        ("javascript:alert(1)", False),
        ("data:image/png;base64,AAAA", False),
        ("", False),
    ],
)
def test_is_absolute_url(url, expected):
    assert is_absolute_url(url) is expected
