"""Loading and generation of .netloy configuration files."""

from .loader import ConfigurationLoader, default_configuration, parse_entries

__all__ = ["ConfigurationLoader", "default_configuration", "parse_entries"]
