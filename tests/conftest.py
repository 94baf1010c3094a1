"""Pytest configuration and fixtures for Wispy tests."""

from pathlib import Path

import pytest

from wispy import DictLoader, Environment, RequestHint


@pytest.fixture
def env():
    """Create a basic Wispy Environment."""
    return Environment()


@pytest.fixture
def env_with_loader():
    """Create a Wispy Environment with DictLoader and test templates."""
    loader = DictLoader(
        {
            "app/nav.html": "<nav>{{ site }}</nav>",
            "app/list.html": "{% for item in items %}<li>{{ item }}</li>{% endfor %}",
            "app/self.html": '{% render "@app/self" %}',
            "marketing/hero.html": '<h1>{{ headline | default: "Welcome" }}</h1>',
            "partials/footer.html": "<footer>{{ year }}</footer>",
            "partials/assets.html": '{% asset "css" "assets/site.css" %}',
        }
    )
    return Environment(loader=loader)


@pytest.fixture
def site_tree(tmp_path: Path) -> Path:
    """A sites root with one tenant, ``example.com``.

    Layout::

        sites/example.com/templates/app/dashboard.html
        sites/example.com/assets/critical.css
        sites/example.com/public/boot.js
    """
    root = tmp_path / "sites"
    site = root / "example.com"
    (site / "templates" / "app").mkdir(parents=True)
    (site / "assets").mkdir()
    (site / "public").mkdir()
    (site / "templates" / "app" / "dashboard.html").write_text("<main>Hi {{ user }}</main>", "utf-8")
    (site / "assets" / "critical.css").write_text("body { margin: 0; }", "utf-8")
    (site / "public" / "boot.js").write_text("console.log('<boot>');", "utf-8")
    return root


@pytest.fixture
def site_env(site_tree: Path):
    """Environment whose loader and inline assets come from ``site_tree``."""
    return Environment(sites_root=site_tree)


@pytest.fixture
def site_request():
    return RequestHint(host="example.com")


def assert_contains(template_result: str, *expected_parts: str) -> None:
    """Assert template result contains all expected parts.

    Args:
        template_result: The actual template rendering result.
        expected_parts: Strings that should all be present in the result.
    """
    for part in expected_parts:
        assert part in template_result, (
            f"Template output missing expected content:\n"
            f"  Missing: {part!r}\n"
            f"  Actual: {template_result!r}"
        )


def kinds(diagnostics) -> list[str]:
    """Diagnostic kinds, in order, for compact assertions."""
    return [diagnostic.kind for diagnostic in diagnostics]
