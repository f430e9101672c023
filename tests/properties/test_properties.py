"""Property-based tests using Hypothesis."""

import asyncio

from hypothesis import given, strategies as st, settings, assume
from markupsafe import Markup, escape

from vitrine.core.descriptors import ShapeTableBuilder
from vitrine.core.display import HtmlDisplay
from vitrine.core.naming import base_shape_type, parent_shape_type, shape_type_chain
from vitrine.core.shape import create_shape
from vitrine.core.table_manager import ShapeTableManager
from vitrine.core.themes import ThemeInfo, ThemeManager

segments = st.text(alphabet="abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789", min_size=1, max_size=8)


class Provider:
    def __init__(self, *builders):
        self.builders = list(builders)

    def discover(self):
        return self.builders


def make_display(*builders, themes=(), current=None):
    theme_manager = ThemeManager(lambda: list(themes), current=current)
    return HtmlDisplay(ShapeTableManager([Provider(*builders)], theme_manager), theme_manager)


def named(name):
    return lambda context: Markup(name)


class TestNamingProperties:
    """Property tests for the double-underscore fallback chain."""

    @given(parts=st.lists(segments, min_size=1, max_size=6))
    def test_chain_drops_one_segment_at_a_time(self, parts):
        name = "__".join(parts)
        expected = ["__".join(parts[:i]) for i in range(len(parts), 0, -1)]
        assert list(shape_type_chain(name)) == expected

    @given(parts=st.lists(segments, min_size=1, max_size=6))
    def test_chain_ends_at_base_type(self, parts):
        name = "__".join(parts)
        chain = list(shape_type_chain(name))
        assert chain[-1] == base_shape_type(name)
        assert parent_shape_type(chain[-1]) is None

    @given(name=st.text(max_size=30))
    def test_chain_terminates_with_shrinking_names(self, name):
        chain = list(shape_type_chain(name))
        assert chain[0] == name
        for longer, shorter in zip(chain, chain[1:]):
            assert longer.startswith(shorter)
            assert len(shorter) < len(longer)


class TestCoercionProperties:

    @given(value=st.one_of(st.text(), st.integers(), st.floats(allow_nan=False), st.booleans()))
    @settings(max_examples=50)
    def test_non_shape_values_render_escaped(self, value):
        result = asyncio.run(make_display().display(value))
        assert result == escape(str(value))

    @given(html=st.text())
    @settings(max_examples=50)
    def test_content_is_never_reescaped(self, html):
        content = Markup(html)
        assert asyncio.run(make_display().display(content)) is content


class TestResolutionProperties:

    @given(
        alternates=st.lists(segments, min_size=1, max_size=6, unique=True),
        data=st.data(),
    )
    @settings(max_examples=50)
    def test_last_bound_alternate_wins(self, alternates, data):
        bound = data.draw(st.lists(st.sampled_from(alternates), unique=True))
        builder = ShapeTableBuilder()
        builder.describe("Base").bound_as("test", named("Base"))
        for name in bound:
            builder.describe(f"Base__{name}").bound_as("test", named(f"Base__{name}"))

        shape = create_shape("Base")
        for name in alternates:
            shape.metadata.add_alternate(f"Base__{name}")

        result = asyncio.run(make_display(builder).display(shape))

        winners = [f"Base__{name}" for name in alternates if name in bound]
        assert result == (winners[-1] if winners else "Base")

    @given(parts=st.lists(segments, min_size=1, max_size=5), data=st.data())
    @settings(max_examples=50)
    def test_longest_bound_prefix_wins(self, parts, data):
        prefixes = ["__".join(parts[:i]) for i in range(1, len(parts) + 1)]
        bound = data.draw(st.lists(st.sampled_from(prefixes), min_size=1, unique=True))
        builder = ShapeTableBuilder()
        for name in bound:
            builder.describe(name).bound_as("test", named(name))

        result = asyncio.run(make_display(builder).display(create_shape(prefixes[-1])))

        assert result == max(bound, key=len)


class TestWrapperProperties:

    @given(wrappers=st.lists(segments, max_size=6, unique=True), data=st.data())
    @settings(max_examples=50)
    def test_wrappers_nest_in_order_and_drain(self, wrappers, data):
        assume("Content" not in wrappers)
        bound = set(data.draw(st.lists(st.sampled_from(wrappers), unique=True))) if wrappers else set()
        builder = ShapeTableBuilder()
        builder.describe("Content").bound_as("test", named("C"))
        for name in bound:
            builder.describe(name).bound_as(
                "test", lambda context, name=name: Markup(f"<{name}>{context.value.metadata.child_content}</{name}>"))

        shape = create_shape("Content")
        for name in wrappers:
            shape.metadata.add_wrapper(name)
        result = asyncio.run(make_display(builder).display(shape))

        expected = "C"
        for name in wrappers:
            if name in bound:
                expected = f"<{name}>{expected}</{name}>"
        assert result == expected
        assert shape.metadata.wrappers == []


class TestThemeProperties:

    @given(depth=st.integers(min_value=1, max_value=6), data=st.data())
    @settings(max_examples=50)
    def test_nearest_theme_in_chain_wins(self, depth, data):
        # T0 is the most distant base theme, T<depth-1> the current one
        ids = [f"T{i}" for i in range(depth)]
        themes = [ThemeInfo(ids[0])] + [ThemeInfo(ids[i], base_theme=ids[i - 1]) for i in range(1, depth)]
        defining = data.draw(st.lists(st.sampled_from(ids), unique=True))

        module = ShapeTableBuilder()
        module.describe("Content").bound_as("module", named("module"))
        builders = [module]
        for theme_id in defining:
            builder = ShapeTableBuilder(feature=theme_id)
            builder.describe("Content").bound_as(theme_id, named(theme_id))
            builders.append(builder)

        display = make_display(*builders, themes=themes, current=ids[-1])
        result = asyncio.run(display.display(create_shape("Content")))

        nearest = [theme_id for theme_id in reversed(ids) if theme_id in defining]
        assert result == (nearest[0] if nearest else "module")
