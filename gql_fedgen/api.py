"""Entry points for running a generation from Python code."""

import logging

from .core.config import Config
from .core.ir import Data
from .core.plugin import PluginPipeline
from .core.templates import Renderer
from .plugins.federation import FederationPlugin
from .plugins.modelgen import ModelGenPlugin

logger = logging.getLogger(__name__)


def default_plugins(config: Config) -> list:
    """Plugins used when the caller does not supply any."""
    plugins = []
    if config.federated:
        plugins.append(FederationPlugin())
    plugins.append(ModelGenPlugin())
    return plugins


def generate(config: Config, plugins=None, renderer: Renderer | None = None) -> Data:
    """Run a full generation for ``config`` and return the built IR.

    Example:
        config = load_config("gqlgen.yml")
        data = generate(config)
        print(data.sdl)
    """
    if plugins is None:
        plugins = default_plugins(config)
    logger.debug("Generating with plugins: %s", [type(p).__name__ for p in plugins])
    return PluginPipeline(plugins).run(config, renderer)


def build(config: Config, plugins=None) -> Data:
    """Build the IR for ``config`` without generating any code."""
    if plugins is None:
        plugins = default_plugins(config)
    return PluginPipeline(plugins).run(config, emit=False)
