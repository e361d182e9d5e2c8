"""
netloy: package compiled .NET applications into native distributables.

Builds Windows installers, macOS app bundles and disk images, Linux package
formats and portable archives from a declarative ``.netloy`` configuration.
"""

__version__ = "1.0.0"
__author__ = "Netloy Team"
