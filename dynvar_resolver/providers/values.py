from typing import Tuple

from dynvar_resolver.interfaces.provider import BaseProvider


class ValueProvider(BaseProvider):
    """A plain expression, e.g. `${INSTALL_PATH}/conf`."""

    required_params = ("value",)

    def get_type_name(self) -> str:
        return "value"


class EnvironmentProvider(BaseProvider):
    """Reads an environment variable whose name is itself an expression."""

    required_params = ("name",)

    def get_type_name(self) -> str:
        return "environment"

    def get_aliases(self) -> Tuple[str, ...]:
        return ("env",)
