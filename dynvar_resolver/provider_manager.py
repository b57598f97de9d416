import importlib.metadata
import logging
from typing import Dict, List, Optional, cast

from .interfaces.provider import BaseProvider
from .providers.executable import ExecutableProvider
from .providers.files import (
    ConfigFileProvider,
    FileProvider,
    JarEntryProvider,
    ZipEntryProvider,
)
from .providers.filters import LocationFilter, RegexFilter
from .providers.registry import RegistryProvider, RegistryValueProvider
from .providers.values import EnvironmentProvider, ValueProvider

# The unique name of our provider entry point group.
ENTRY_POINT_GROUP = "dynvar_resolver.providers"

BUILTIN_PROVIDERS = (
    ValueProvider,
    EnvironmentProvider,
    FileProvider,
    ConfigFileProvider,
    ZipEntryProvider,
    JarEntryProvider,
    RegistryProvider,
    RegistryValueProvider,
    ExecutableProvider,
    RegexFilter,
    LocationFilter,
)

logger = logging.getLogger(__name__)


class ProviderManager:
    """Registers the built-in value providers and discovers extra ones via entry points."""

    def __init__(self, discover: bool = True):
        self.providers: Dict[str, BaseProvider] = {}
        for provider_class in BUILTIN_PROVIDERS:
            self.register(provider_class())
        if discover:
            self._load_providers()

    def register(self, provider: BaseProvider):
        """Registers a provider under its type name and all of its aliases."""
        for name in (provider.get_type_name(), *provider.get_aliases()):
            self.providers[name] = provider
        logger.debug("Registered provider type: '%s'", provider.get_type_name())

    def _load_providers(self):
        """
        Discovers and loads providers using importlib.metadata.
        """
        entry_points = importlib.metadata.entry_points(group=ENTRY_POINT_GROUP)

        for entry_point in entry_points:
            try:
                provider_class = entry_point.load()
                provider_instance = cast(BaseProvider, provider_class())
                self.register(provider_instance)
                logger.info(
                    "Registered provider plugin '%s' for type: '%s'",
                    entry_point.name,
                    provider_instance.get_type_name(),
                )

            except Exception as e:
                logger.warning("Could not load provider '%s': %s", entry_point.name, e)

    def get_provider(self, kind: str) -> Optional[BaseProvider]:
        """Returns the registered provider for a given kind."""
        return self.providers.get(kind)

    @property
    def type_names(self) -> List[str]:
        return sorted(self.providers)
