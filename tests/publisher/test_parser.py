from services.publisher.app.domain.parser import parse_generated_files, render_generated_files
from services.publisher.app.domain.types import GeneratedFile


def test_parse_splits_files_in_order():
    text = (
        "Here is your app.\n"
        "=== index.html ===\n"
        "<html><body>hi</body></html>\n"
        "\n"
        "===== js/app.js =====\n"
        "console.log('hi');\n"
    )

    files = parse_generated_files(text)

    assert files == [
        GeneratedFile(path="index.html", content="<html><body>hi</body></html>"),
        GeneratedFile(path="js/app.js", content="console.log('hi');"),
    ]


def test_render_then_parse_returns_same_files():
    original = [
        GeneratedFile(path="index.html", content="<!doctype html>\n<html>\n  <body></body>\n</html>"),
        GeneratedFile(path="css/style.css", content="body { margin: 0; }"),
        GeneratedFile(path="data/sample.json", content='{"a": "== not a marker =="}'),
    ]

    assert parse_generated_files(render_generated_files(original)) == original


def test_leading_equals_run_is_stripped():
    text = "=== index.html ===\n== <html></html>\n=== app.js ===\n=alert(1)"

    files = parse_generated_files(text)

    assert [f.content for f in files] == ["<html></html>", "alert(1)"]


def test_text_without_markers_parses_to_nothing():
    assert parse_generated_files("just some prose, no files") == []
    assert parse_generated_files("") == []


def test_marker_must_be_alone_on_its_line():
    text = "see === index.html === below\n=== real.html ===\nok"

    files = parse_generated_files(text)

    assert files == [GeneratedFile(path="real.html", content="ok")]


def test_marker_tolerates_crlf_and_extra_spaces():
    text = "===   index.html   ===  \r\n<p>x</p>\r\n"

    assert parse_generated_files(text) == [GeneratedFile(path="index.html", content="<p>x</p>")]


def test_parse_is_deterministic():
    text = "=== a.txt ===\none\n=== b.txt ===\ntwo"

    assert parse_generated_files(text) == parse_generated_files(text)
