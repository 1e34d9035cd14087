"""Tests for context provision and lookup."""

import pytest

from finegrain import (
    create_context,
    create_effect,
    create_root,
    create_signal,
    get_runtime,
    provide_context,
    use_context,
)


class TestContext:
    def test_default_without_runtime(self):
        theme = create_context("light")
        assert use_context(theme) == "light"

    def test_unique_ids(self):
        assert create_context(None).id != create_context(None).id

    def test_provide_and_use(self):
        theme = create_context("light")

        def setup(dispose):
            assert use_context(theme) == "light"
            assert provide_context(theme, "dark", lambda: use_context(theme)) == "dark"
            assert use_context(theme) == "light"

        create_root(setup)

    def test_nearest_provider_wins(self):
        theme = create_context("light")
        seen = []

        def setup(dispose):
            def inner_scope(d):
                seen.append(use_context(theme))
                provide_context(theme, "blue", lambda: seen.append(use_context(theme)))

            provide_context(theme, "dark", lambda: create_root(inner_scope))

        create_root(setup)
        assert seen == ["dark", "blue"]

    def test_sibling_after_provide_sees_default(self):
        theme = create_context("light")
        seen = []

        def setup(dispose):
            provide_context(
                theme, "dark", lambda: create_root(lambda d: seen.append(use_context(theme)))
            )
            create_root(lambda d: seen.append(use_context(theme)))

        create_root(setup)
        assert seen == ["dark", "light"]

    def test_effect_keeps_provided_value(self):
        user = create_context(None)
        seen = []

        def setup(dispose):
            s = create_signal(0)
            provide_context(
                user, "ada", lambda: create_effect(lambda: seen.append((s.get(), use_context(user))))
            )
            return s

        s = create_root(setup)
        s.set(1)
        assert seen == [(0, "ada"), (1, "ada")]

    def test_restored_on_exception(self):
        theme = create_context("light")

        def setup(dispose):
            def explode():
                raise KeyError("nope")

            with pytest.raises(KeyError):
                provide_context(theme, "dark", explode)
            assert use_context(theme) == "light"

        create_root(setup)

    def test_provide_without_runtime(self):
        theme = create_context("light")
        assert provide_context(theme, "dark", lambda: use_context(theme)) == "dark"
        assert get_runtime() is None

    def test_provide_without_owner(self):
        theme = create_context("light")
        create_root(lambda dispose: None)
        assert provide_context(theme, "dark", lambda: use_context(theme)) == "dark"
        assert use_context(theme) == "light"
