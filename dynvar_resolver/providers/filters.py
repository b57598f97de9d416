"""
Value filters post-process a provider's result at install time. They wrap
the filtered value as their `input` parameter; their own parameters are
expressions as well, so they can add dependencies.
"""

from dynvar_resolver.interfaces.provider import BaseProvider


class RegexFilter(BaseProvider):
    """Selects or replaces parts of the value with a regular expression."""

    required_params = ("input", "regexp")
    optional_params = ("select", "replace", "default", "casesensitive", "global")

    def get_type_name(self) -> str:
        return "filter.regex"


class LocationFilter(BaseProvider):
    """Resolves the value as a path relative to `basedir`."""

    required_params = ("input",)
    optional_params = ("basedir",)

    def get_type_name(self) -> str:
        return "filter.location"
