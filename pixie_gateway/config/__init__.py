from .provider import (
    EnvPixieConfigProvider,
    FilePixieConfigProvider,
    PixieConfig,
    PixieConfigProvider,
    build_config_provider,
)

__all__ = [
    "EnvPixieConfigProvider",
    "FilePixieConfigProvider",
    "PixieConfig",
    "PixieConfigProvider",
    "build_config_provider",
]
