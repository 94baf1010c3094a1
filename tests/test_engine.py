"""End-to-end tests for the render loop."""

from __future__ import annotations

from wispy import Delimiters, Environment

from .conftest import kinds


class TestScenarios:
    """The canonical render scenarios."""

    def test_variable_interpolation(self, env):
        out, diagnostics = env.render("Hello {{ name }}!", env.new_context({"name": "Alice"}))
        assert out == "Hello Alice!"
        assert diagnostics == []

    def test_if_true_and_false(self, env):
        source = "{% if show %}Visible{% endif %}"
        assert env.render(source, env.new_context({"show": True}))[0] == "Visible"
        assert env.render(source, env.new_context({"show": False}))[0] == ""

    def test_for_over_list(self, env):
        out, diagnostics = env.render(
            "{% for x in xs %}[{{ x }}]{% endfor %}", env.new_context({"xs": ["a", "b", "c"]})
        )
        assert out == "[a][b][c]"
        assert diagnostics == []

    def test_split_join_chain(self, env):
        out, diagnostics = env.render('{{ "John, Paul, George" | split: ", " | join: "-" }}')
        assert out == "John-Paul-George"
        assert diagnostics == []

    def test_define_then_block(self, env):
        source = '{% define "body" %}<p>{{ msg }}</p>{% enddefine %}{% block "body" %}default{% endblock %}'
        out, diagnostics = env.render(source, env.new_context({"msg": "hi"}))
        assert out == "<p>hi</p>"
        assert diagnostics == []

    def test_script_is_sanitized(self, env):
        out, _ = env.render("{{ bio }}", env.new_context({"bio": "<script>x</script>safe"}))
        assert "safe" in out
        assert "<script>" not in out

    def test_duplicate_asset_registers_once(self, env):
        ctx = env.new_context()
        out, diagnostics = env.render(
            '{% asset "css" "assets/main.css" %}{% asset "css" "assets/main.css" %}', ctx
        )
        assert out == ""
        assert diagnostics == []
        assert len(ctx.document_tags) == 1
        tag = ctx.document_tags[0]
        assert tag.name == "link"
        assert tag.attributes["rel"] == "stylesheet"
        assert tag.attributes["href"] == "/assets/main.css"


class TestValueOutput:
    """Formatting of non-string values."""

    def test_none_renders_empty(self, env):
        assert env.render("[{{ nothing }}]", env.new_context({"nothing": None})) == ("[]", [])

    def test_unresolved_is_not_a_diagnostic(self, env):
        out, diagnostics = env.render("[{{ missing.deeply.nested }}]")
        assert out == "[]"
        assert diagnostics == []

    def test_scalars(self, env):
        ctx = env.new_context({"n": 3, "yes": True, "no": False, "f": 2.5, "whole": 3.0})
        out, _ = env.render("{{ n }} {{ yes }} {{ no }} {{ f }} {{ whole }}", ctx)
        assert out == "3 true false 2.5 3"

    def test_sequence_and_mapping(self, env):
        ctx = env.new_context({"xs": [1, "a", None], "m": {"k": 1, "j": "v"}})
        out, _ = env.render("{{ xs }} {{ m }}", ctx)
        assert out == "[1, a, ] {k: 1, j: v}"

    def test_dot_notation(self, env):
        ctx = env.new_context({"user": {"profile": {"name": "Ada"}}})
        assert env.render("{{ user.profile.name }}", ctx)[0] == "Ada"

    def test_dot_through_non_mapping_is_empty(self, env):
        ctx = env.new_context({"user": {"name": "Ada"}})
        assert env.render("[{{ user.name.first }}]", ctx) == ("[]", [])

    def test_sequence_items_are_sanitized(self, env):
        ctx = env.new_context({"xs": ["<script>alert(1)</script>"]})
        assert env.render("{{ xs }}", ctx)[0] == "[]"

    def test_empty_variable(self, env):
        assert env.render("a{{ }}b") == ("ab", [])

    def test_literal_string(self, env):
        assert env.render("{{ 'single' }} {{ \"double\" }}")[0] == "single double"


class TestMalformedInput:
    """Faults become diagnostics and rendering continues."""

    def test_unclosed_variable(self, env):
        out, diagnostics = env.render("a {{ b")
        assert out == "a  b"
        assert kinds(diagnostics) == ["unclosed-variable"]
        assert diagnostics[0].position == 2

    def test_unclosed_tag(self, env):
        out, diagnostics = env.render("x {% if y")
        assert out == "x  if y"
        assert kinds(diagnostics) == ["unclosed-tag"]

    def test_comment_skipped(self, env):
        assert env.render("a{# hidden {{ x }} #}b") == ("ab", [])

    def test_unclosed_comment(self, env):
        out, diagnostics = env.render("a{# c")
        assert out == "a c"
        assert kinds(diagnostics) == ["unclosed-comment"]

    def test_unknown_tag(self, env):
        out, diagnostics = env.render("{% frobnicate %}x")
        assert out == "x"
        assert kinds(diagnostics) == ["unknown-tag"]

    def test_empty_tag(self, env):
        out, diagnostics = env.render("{% %}x")
        assert out == "x"
        assert kinds(diagnostics) == ["unknown-tag"]

    def test_stray_end_tag(self, env):
        out, diagnostics = env.render("a{% endif %}b")
        assert out == "ab"
        assert kinds(diagnostics) == ["unknown-tag"]

    def test_unterminated_if_keeps_body_as_text(self, env):
        out, diagnostics = env.render("{% if x %}yes")
        assert out == "yes"
        assert kinds(diagnostics) == ["unterminated-if"]

    def test_diagnostics_recorded_on_context(self, env):
        ctx = env.new_context()
        _, first = env.render("{{ x | nope }}", ctx)
        _, second = env.render("{% nope %}", ctx)
        assert ctx.errors == [*first, *second]

    def test_nested_diagnostics_recorded_once(self, env):
        ctx = env.new_context({"xs": [1, 2]})
        _, diagnostics = env.render("{% for x in xs %}{{ x | nope }}{% endfor %}", ctx)
        assert kinds(diagnostics) == ["unknown-filter", "unknown-filter"]
        assert len(ctx.errors) == 2


class TestScoping:
    def test_inner_loop_shadows_outer(self, env):
        source = "{% for x in outer %}{% for x in inner %}{{ x }}{% endfor %}[{{ x }}]{% endfor %}"
        ctx = env.new_context({"outer": ["A", "B"], "inner": ["1", "2"]})
        assert env.render(source, ctx)[0] == "12[A]12[B]"

    def test_loop_variable_does_not_leak(self, env):
        ctx = env.new_context({"xs": ["a"]})
        out, _ = env.render("{% for x in xs %}{{ x }}{% endfor %}[{{ x }}]", ctx)
        assert out == "a[]"
        assert "x" not in ctx.data

    def test_blocks_defined_in_loop_propagate(self, env):
        ctx = env.new_context({"xs": [1, 2]})
        env.render('{% for x in xs %}{% define "seen" %}yes{% enddefine %}{% endfor %}', ctx)
        assert ctx.blocks == {"seen": "yes"}


class TestDelimiters:
    def test_custom_pair(self):
        env = Environment(delimiters=Delimiters.from_pair("<", ">"))
        ctx = env.new_context({"name": "Ada", "show": True})
        out, diagnostics = env.render("<{ name }> {{ name }} <% if show %>on<% endif %><# gone #>", ctx)
        assert out == "Ada {{ name }} on"
        assert diagnostics == []

    def test_verbatim_with_custom_pair(self):
        env = Environment(delimiters=Delimiters.from_pair("[", "]"))
        out, _ = env.render("[% verbatim %][{ x }][% endverbatim %]")
        assert out == "[{ x }]"
