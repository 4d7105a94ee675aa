"""streamnet: network resilience and caching layer for the Streamyyy API."""

from streamnet.config.defaults import APP_VERSION as __version__

__all__ = ["__version__"]
