"""Core DI providers (non-mockable)."""

from dishka import Scope, provide
from pydantic import ValidationError

from threadline.config import Settings, TreeSettings
from threadline.util.di.base import ProviderBase
from threadline.util.error import ConfigurationError


class ProdConfigProvider(ProviderBase):
    """Production config provider - concrete, no mocks needed.

    Settings are loaded from environment variables and .env file automatically.
    """

    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        """Provide application settings from environment."""
        try:
            return Settings()
        except ValidationError as e:
            raise ConfigurationError(f"Invalid settings: {e}") from e

    @provide(scope=Scope.APP)
    def provide_tree_settings(self, settings: Settings) -> TreeSettings:
        """Provide comment tree settings."""
        return settings.tree
