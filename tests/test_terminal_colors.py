"""Tests for terminal color utilities used by diagnostic formatting."""

from wispy.environment import terminal


class TestColorDetection:
    """Test terminal color detection logic."""

    def test_supports_color_respects_no_color(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        # Patch cached value (re-eval would need import before setenv; patch is reliable)
        monkeypatch.setattr(terminal, "_USE_COLORS", False)
        assert not terminal.supports_color()

    def test_detect_force_color_wins(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        monkeypatch.setenv("FORCE_COLOR", "1")
        assert terminal._detect_colors()

    def test_detect_no_color(self, monkeypatch):
        monkeypatch.delenv("FORCE_COLOR", raising=False)
        monkeypatch.setenv("NO_COLOR", "1")
        assert not terminal._detect_colors()

    def test_colorize_returns_plain_when_disabled(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", False)
        result = terminal.colorize("Error", "bright_red", "bold")
        assert result == "Error"
        assert "\033[" not in result

    def test_colorize_adds_codes_when_enabled(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", True)
        result = terminal.colorize("Error", "bright_red", "bold")
        assert result == "\033[91m\033[1mError\033[0m"

    def test_colorize_without_styles(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", True)
        assert terminal.colorize("plain") == "plain"

    def test_strip_colors_removes_ansi_codes(self):
        colored = "\033[91m\033[1mError\033[0m"
        assert terminal.strip_colors(colored) == "Error"


class TestSemanticHelpers:
    """Test semantic color helper functions."""

    def test_kind_formatting(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", True)
        result = terminal.kind("unknown-filter")
        assert "unknown-filter" in result
        assert "\033[91m" in result

    def test_location_formatting(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", True)
        assert terminal.location("page.html:3:4") == "\033[36mpage.html:3:4\033[0m"

    def test_dim_text(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", True)
        assert terminal.dim_text("|").startswith("\033[2m")


class TestSourceLineFormatting:
    def test_error_line_is_marked(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", False)
        assert terminal.format_source_line(3, "{{ x | nope }}", is_error=True) == ">  3 | {{ x | nope }}"

    def test_context_line(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", False)
        assert terminal.format_source_line(12, "<p>") == "  12 | <p>"

    def test_error_line_colored(self, monkeypatch):
        monkeypatch.setattr(terminal, "_USE_COLORS", True)
        result = terminal.format_source_line(1, "bad", is_error=True)
        assert "\033[91mbad\033[0m" in result
        assert terminal.strip_colors(result) == ">  1 | bad"
