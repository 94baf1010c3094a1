"""Tests for the ``asset`` tag."""

from __future__ import annotations

import logging

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from wispy import Environment, RequestHint
from wispy.tags.assets import normalize_asset_path

from .conftest import kinds


class TestPathRules:
    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("assets/site.css", "assets/site.css"),
            ("/assets/site.css", "assets/site.css"),
            ("public/app.js", "public/app.js"),
            ("/public/app.js", "public/app.js"),
            ("https://cdn.example.com/x.js", "https://cdn.example.com/x.js"),
        ],
    )
    def test_accepted(self, path, expected):
        assert normalize_asset_path(path, inline=False) == expected

    @pytest.mark.parametrize(
        "path",
        [
            "styles/site.css",
            "http://cdn.example.com/x.css",
            "assets/../secrets.css",
            "assets\\site.css",
            "https://",
            "../assets/site.css",
        ],
    )
    def test_rejected(self, path):
        with pytest.raises(ValueError):
            normalize_asset_path(path, inline=False)

    def test_inline_rejects_remote(self):
        with pytest.raises(ValueError, match="cannot be inlined"):
            normalize_asset_path("https://cdn.example.com/x.css", inline=True)


class TestExternalAssets:
    def test_css_link(self, env):
        ctx = env.new_context()
        env.render('{% asset "css" "/assets/site.css" %}', ctx)
        (tag,) = ctx.document_tags
        assert (tag.kind, tag.name, tag.location, tag.priority, tag.self_closing) == ("link", "link", "head", 15, True)
        assert tag.attributes == {"rel": "stylesheet", "href": "/assets/site.css", "type": "text/css"}
        assert ctx.imported_assets == {"assets/site.css|css"}

    def test_leading_slash_dedups(self, env):
        ctx = env.new_context()
        env.render('{% asset "css" "/assets/site.css" %}{% asset "css" "assets/site.css" %}', ctx)
        assert len(ctx.document_tags) == 1

    def test_remote_css_keeps_url(self, env):
        ctx = env.new_context()
        env.render('{% asset "css" "https://cdn.example.com/a.css" %}', ctx)
        assert ctx.document_tags[0].attributes["href"] == "https://cdn.example.com/a.css"

    def test_js_head_and_footer_priorities(self, env):
        ctx = env.new_context()
        env.render('{% asset "js" "assets/a.js" %}{% asset "js" "assets/b.js" location=pre-footer %}', ctx)
        head, footer = ctx.document_tags
        assert (head.location, head.priority) == ("head", 20)
        assert (footer.location, footer.priority) == ("pre-footer", 25)
        assert footer.attributes == {"src": "/assets/b.js", "type": "text/javascript"}

    def test_js_flags(self, env):
        ctx = env.new_context()
        env.render('{% asset "js" "assets/a.js" defer async %}', ctx)
        assert ctx.document_tags[0].to_html() == '<script src="/assets/a.js" type="text/javascript" defer async></script>'

    def test_css_ignores_location(self, env):
        ctx = env.new_context()
        env.render('{% asset "css" "assets/a.css" location=pre-footer %}', ctx)
        assert ctx.document_tags[0].location == "head"

    def test_registration_inside_loop(self, env):
        ctx = env.new_context({"xs": [1, 2, 3]})
        env.render('{% for x in xs %}{% asset "js" "assets/a.js" %}{% endfor %}', ctx)
        assert len(ctx.document_tags) == 1


class TestAssetDiagnostics:
    def test_invalid_kind(self, env):
        ctx = env.new_context()
        assert kinds(env.render('{% asset "img" "assets/a.png" %}', ctx)[1]) == ["invalid-asset-kind"]
        assert ctx.document_tags == []

    def test_invalid_path(self, env):
        assert kinds(env.render('{% asset "css" "styles/a.css" %}')[1]) == ["asset-path-invalid"]

    def test_inline_remote(self, env):
        assert kinds(env.render('{% asset "css-inline" "https://cdn.example.com/a.css" %}')[1]) == [
            "asset-path-invalid"
        ]

    def test_kind_conflict(self, env):
        ctx = env.new_context()
        _, diagnostics = env.render('{% asset "css" "assets/a.css" %}{% asset "css-inline" "assets/a.css" %}', ctx)
        assert kinds(diagnostics) == ["asset-kind-conflict"]
        assert len(ctx.document_tags) == 1

    def test_missing_arguments(self, env):
        assert kinds(env.render('{% asset "css" %}')[1]) == ["invalid-tag-arguments"]

    def test_bad_location(self, env):
        assert kinds(env.render('{% asset "js" "assets/a.js" location=footer %}')[1]) == ["invalid-tag-arguments"]

    def test_unknown_option(self, env):
        assert kinds(env.render('{% asset "css" "assets/a.css" defer %}')[1]) == ["invalid-tag-arguments"]


class TestInlineAssets:
    def test_inline_css(self, site_env, site_request):
        ctx = site_env.new_context(request=site_request)
        _, diagnostics = site_env.render('{% asset "css-inline" "assets/critical.css" %}', ctx)
        assert diagnostics == []
        (tag,) = ctx.document_tags
        assert (tag.kind, tag.location, tag.priority) == ("style", "head", 20)
        assert tag.contents == "body { margin: 0; }"
        assert tag.to_html() == '<style type="text/css">body { margin: 0; }</style>'

    def test_inline_js_is_not_sanitized(self, site_env, site_request):
        ctx = site_env.new_context(request=site_request)
        site_env.render('{% asset "js-inline" "/public/boot.js" location=pre-footer %}', ctx)
        (tag,) = ctx.document_tags
        assert (tag.kind, tag.location, tag.priority) == ("script", "pre-footer", 30)
        assert tag.contents == "console.log('<boot>');"

    def test_inline_js_head_priority(self, site_env, site_request):
        ctx = site_env.new_context(request=site_request)
        site_env.render('{% asset "js-inline" "public/boot.js" %}', ctx)
        assert ctx.document_tags[0].priority == 25

    def test_explicit_site_root(self, site_tree):
        env = Environment(site_root=lambda ctx: site_tree / "example.com")
        ctx = env.new_context()
        assert env.render('{% asset "css-inline" "assets/critical.css" %}', ctx)[1] == []
        assert ctx.document_tags[0].contents == "body { margin: 0; }"

    def test_no_site_root(self, env):
        ctx = env.new_context()
        _, diagnostics = env.render('{% asset "css-inline" "assets/critical.css" %}', ctx)
        assert kinds(diagnostics) == ["asset-read-failed"]
        assert ctx.imported_assets == set()

    def test_unknown_host(self, site_env):
        ctx = site_env.new_context(request=RequestHint(host="other.example"))
        assert kinds(site_env.render('{% asset "css-inline" "assets/critical.css" %}', ctx)[1]) == [
            "asset-read-failed"
        ]

    def test_missing_file_logs_warning(self, site_env, site_request, caplog):
        ctx = site_env.new_context(request=site_request)
        with caplog.at_level(logging.WARNING, logger="wispy.tags.assets"):
            _, diagnostics = site_env.render('{% asset "js-inline" "public/missing.js" %}', ctx)
        assert kinds(diagnostics) == ["asset-read-failed"]
        assert "missing.js" in caplog.text
        assert ctx.document_tags == []


class TestDedupProperty:
    @given(
        kind=st.sampled_from(["css", "js"]),
        name=st.from_regex(r"[a-z]{1,8}", fullmatch=True),
        count=st.integers(min_value=1, max_value=8),
        slash=st.lists(st.booleans(), min_size=8, max_size=8),
    )
    @settings(max_examples=100)
    def test_exactly_one_entry(self, kind, name, count, slash):
        env = Environment()
        ctx = env.new_context()
        source = "".join(
            f'{{% asset "{kind}" "{"/" if slash[i] else ""}assets/{name}.{kind}" %}}' for i in range(count)
        )
        _, diagnostics = env.render(source, ctx)
        assert diagnostics == []
        assert len(ctx.document_tags) == 1
        assert ctx.imported_assets == {f"assets/{name}.{kind}|{kind}"}
