"""Shared helper functions and constants."""

from dynvar_resolver.errors import DefinitionError

# Name of the resource the installer runtime reads the ordered variables from.
RESOURCE_NAME = "dynvariables"

# Variables the installer runtime always provides. References to them are
# expected to be undefined at compile time and do not warrant a warning.
BUILTIN_VARIABLES = frozenset(
    {
        "APPLICATIONS_DEFAULT_ROOT",
        "APP_NAME",
        "APP_URL",
        "APP_VER",
        "FILE_SEPARATOR",
        "INSTALL_PATH",
        "INSTALL_DRIVE",
        "ISO3_LANG",
        "JAVA_HOME",
        "SYSTEM_os_name",
        "USER_HOME",
        "USER_NAME",
    }
)


class ValidationErrorCollector:
    """A simple class to collect and report validation errors."""

    def __init__(self):
        self.errors = []

    def add_error(self, message: str):
        self.errors.append(message)

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def raise_for_errors(self):
        """Raises a single `DefinitionError` carrying every collected error."""
        if self.has_errors:
            raise DefinitionError(self.errors)

