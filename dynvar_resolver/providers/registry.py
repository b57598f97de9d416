from typing import Tuple

from dynvar_resolver.interfaces.provider import BaseProvider


class RegistryProvider(BaseProvider):
    """A Windows registry key, or one of its values when `value` is given."""

    required_params = ("key",)
    optional_params = ("value", "root")

    def get_type_name(self) -> str:
        return "regkey"

    def get_aliases(self) -> Tuple[str, ...]:
        return ("registry",)


class RegistryValueProvider(RegistryProvider):
    """A value of a Windows registry key."""

    required_params = ("key", "value")
    optional_params = ("root",)

    def get_type_name(self) -> str:
        return "regvalue"

    def get_aliases(self) -> Tuple[str, ...]:
        return ()
