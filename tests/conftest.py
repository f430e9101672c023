"""Shared test fixtures."""

import pytest

from vitrine.core.descriptors import ShapeTableBuilder
from vitrine.core.display import HtmlDisplay
from vitrine.core.table_manager import ShapeTableManager
from vitrine.core.themes import ThemeManager


class StaticProvider:
    """Shape table provider returning fixed builders."""

    def __init__(self, *builders):
        self.builders = list(builders)

    def discover(self):
        return self.builders


@pytest.fixture
def builder():
    """Module-level (theme-independent) table builder."""
    return ShapeTableBuilder()


@pytest.fixture
def make_display(builder):
    """Factory for an HtmlDisplay over ``builder`` plus any extra builders."""

    def _make(*extra_builders, events=(), resolvers=(), themes=(), current=None, fail_fast_hooks=True):
        theme_manager = ThemeManager(lambda: list(themes), current=current)
        manager = ShapeTableManager([StaticProvider(builder, *extra_builders)], theme_manager)
        return HtmlDisplay(
            manager,
            theme_manager,
            events=events,
            resolvers=resolvers,
            fail_fast_hooks=fail_fast_hooks,
        )

    return _make


@pytest.fixture
def definitions_dir(tmp_path):
    """Definition tree with one module and a two-level theme chain."""
    root = tmp_path / "definitions"
    (root / "modules").mkdir(parents=True)
    (root / "themes").mkdir()

    (root / "modules" / "contents.yaml").write_text(
        "templates:\n"
        "  Content: '<article>{{ Model.title }}</article>'\n"
        "  Content__Summary: '<section>{{ Model.title }}</section>'\n"
        "  Frame: '<div class=\"frame\">{{ ChildContent }}</div>'\n"
        "shapes:\n"
        "  Content:\n"
        "    alternates: ['Content__{display_type}']\n"
    )
    (root / "themes" / "Base.yaml").write_text(
        "name: Base Theme\n"
        "templates:\n"
        "  Content__Summary: '<section class=\"base\">{{ Model.title }}</section>'\n"
    )
    (root / "themes" / "Agency.yaml").write_text(
        "name: The Agency\n"
        "base_theme: Base\n"
        "templates:\n"
        "  Content: '<article class=\"agency\">{{ Model.title }}</article>'\n"
    )
    return root
