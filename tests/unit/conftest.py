import os

import pytest

from dynvar_resolver.provider_manager import ProviderManager
from dynvar_resolver.resolver import VariableOrderResolver

FIXTURES_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "fixtures", "dynvars"
)


@pytest.fixture
def fixture_path():
    """Returns the path of a YAML definition file under tests/fixtures/dynvars."""

    def _path(name: str) -> str:
        return os.path.join(FIXTURES_DIR, name)

    return _path


@pytest.fixture
def provider_manager():
    """A provider manager with only the built-in providers, no entry point discovery."""
    return ProviderManager(discover=False)


@pytest.fixture
def ordered_names(fixture_path, provider_manager):
    """Resolves a fixture file and returns the ordered variable names."""

    def _resolve(name: str):
        resolver = VariableOrderResolver.from_file(
            fixture_path(name), provider_manager=provider_manager
        )
        return resolver.resolve().names

    return _resolve


@pytest.fixture
def assert_order():
    """
    Asserts that every name is contained in `names` and that they appear in
    the given relative order.
    """

    def _assert(names, *expected):
        for name in expected:
            assert name in names, f"variable '{name}' must be contained in variables-list"
        for first, second in zip(expected, expected[1:]):
            assert names.index(first) < names.index(second), (
                f"'{first}' must come before '{second}' in variables-list"
            )

    return _assert
