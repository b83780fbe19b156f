"""Exceptions raised by galaxyplace."""


class GalaxyPlaceError(Exception):
    """Base class for galaxyplace errors."""


class SitemapValidationError(GalaxyPlaceError, ValueError):
    """Raised when a sitemap document cannot be turned into entities."""


class ConfigError(GalaxyPlaceError, ValueError):
    """Raised for malformed layout or entity-type configuration."""
