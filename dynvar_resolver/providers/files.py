from typing import Tuple

from dynvar_resolver.interfaces.provider import BaseProvider

CONFIG_FILE_TYPES = ("options", "ini", "xml")


class FileProvider(BaseProvider):
    """The whole content of a text file."""

    required_params = ("file",)
    optional_params = ("encoding",)

    def get_type_name(self) -> str:
        return "file"


class ConfigFileProvider(BaseProvider):
    """
    A single value looked up in a configuration file: a key of a properties
    ("options") file, a key within a section of an ini file, or an XPath-like
    key of an XML document.
    """

    required_params = ("file", "key")
    optional_params = ("type", "section", "escape")
    choices = {"type": CONFIG_FILE_TYPES}

    def get_type_name(self) -> str:
        return "configfile"


class ZipEntryProvider(BaseProvider):
    """
    A configuration value read from an entry inside a zip archive. Both the
    archive path and the entry name are expressions, so lookups chain as
    file -> entry -> section/key.
    """

    required_params = ("file", "entry", "key")
    optional_params = ("type", "section", "escape")
    choices = {"type": CONFIG_FILE_TYPES}

    def get_type_name(self) -> str:
        return "zipfile"


class JarEntryProvider(ZipEntryProvider):
    """Same as `ZipEntryProvider`, for jar archives."""

    def get_type_name(self) -> str:
        return "jarfile"

    def get_aliases(self) -> Tuple[str, ...]:
        return ("jar",)
