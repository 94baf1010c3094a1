"""Tests for deferred document tags and final page assembly."""

from __future__ import annotations

from wispy import DocumentTag, MetaTag, build_document, construct_meta_tags, sorted_document_tags

from .conftest import assert_contains


def _script(src: str, priority: int, location: str = "head") -> DocumentTag:
    return DocumentTag("script", "script", location, priority=priority, attributes={"src": src})


class TestDocumentTag:
    def test_void_element(self):
        tag = DocumentTag("link", "link", attributes={"rel": "stylesheet", "href": "/a.css"}, self_closing=True)
        assert tag.to_html() == '<link rel="stylesheet" href="/a.css">'

    def test_contents_are_verbatim(self):
        tag = DocumentTag("style", "style", contents="a > b { color: red }", attributes={"type": "text/css"})
        assert tag.to_html() == '<style type="text/css">a > b { color: red }</style>'

    def test_attribute_values_escaped(self):
        tag = DocumentTag("script", "script", attributes={"src": '/a.js?x="1"&y=2'})
        assert tag.to_html() == '<script src="/a.js?x=&quot;1&quot;&amp;y=2"></script>'


class TestMetaTag:
    def test_name_content(self):
        assert MetaTag(name="description", content="A & B").to_html() == '<meta name="description" content="A &amp; B">'

    def test_property_and_extras(self):
        tag = MetaTag(property="og:title", content="T", attributes={"data-x": "1"})
        assert tag.to_html() == '<meta property="og:title" content="T" data-x="1">'

    def test_http_equiv(self):
        assert MetaTag(http_equiv="refresh", content="30").to_html() == '<meta http-equiv="refresh" content="30">'

    def test_charset(self):
        assert MetaTag(charset="UTF-8").to_html() == '<meta charset="UTF-8">'


class TestOrdering:
    def test_priority_then_registration_order(self):
        tags = [_script("/c.js", 20), _script("/a.js", 15), _script("/d.js", 20), _script("/f.js", 25, "pre-footer")]
        head = sorted_document_tags(tags, "head")
        assert [t.attributes["src"] for t in head] == ["/a.js", "/c.js", "/d.js"]
        assert [t.attributes["src"] for t in sorted_document_tags(tags)] == ["/a.js", "/c.js", "/d.js", "/f.js"]


class TestMetaDefaults:
    def test_defaults_added(self):
        tags = construct_meta_tags()
        assert [tag.to_html() for tag in tags] == [
            '<meta name="viewport" content="width=device-width, initial-scale=1">',
            '<meta charset="UTF-8">',
            '<meta name="title" content="Untitled Document">',
        ]

    def test_existing_values_win(self):
        page = [MetaTag(name="viewport", content="width=500"), MetaTag(charset="latin-1")]
        tags = construct_meta_tags(page, [MetaTag(name="title", content="Mine")])
        assert [tag.to_html() for tag in tags] == [
            '<meta name="viewport" content="width=500">',
            '<meta charset="latin-1">',
            '<meta name="title" content="Mine">',
        ]


class TestBuildDocument:
    def test_full_page(self, env):
        ctx = env.new_context({"summary": "About <us>team</us>"})
        body, diagnostics = env.render(
            '{% meta name="description" content=summary %}'
            '{% asset "js" "assets/app.js" location=pre-footer %}'
            '{% asset "css" "assets/site.css" %}'
            "<p>hi</p>",
            ctx,
        )
        assert diagnostics == []
        page = build_document(body, ctx, title="Home")
        assert page.split("\n") == [
            "<!DOCTYPE html>",
            '<html lang="en">',
            "<head>",
            "<title>Home</title>",
            '<meta name="description" content="About team">',
            '<meta name="viewport" content="width=device-width, initial-scale=1">',
            '<meta charset="UTF-8">',
            '<meta name="title" content="Untitled Document">',
            '<link rel="stylesheet" href="/assets/site.css" type="text/css">',
            "</head>",
            "<body>",
            "<p>hi</p>",
            '<script src="/assets/app.js" type="text/javascript"></script>',
            "</body>",
            "</html>",
        ]

    def test_title_from_meta(self, env):
        ctx = env.new_context()
        env.render('{% meta name="title" content="From Template" %}', ctx)
        page = build_document("", ctx)
        assert_contains(page, "<title>From Template</title>")

    def test_default_title_and_lang(self, env):
        page = build_document("", env.new_context(), lang="fr")
        assert_contains(page, '<html lang="fr">', "<title>Untitled Document</title>")
