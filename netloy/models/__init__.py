"""Data models for netloy."""

from .configuration import AppConfiguration
from .request import BuildRequest, SigningCredentials

__all__ = ["AppConfiguration", "BuildRequest", "SigningCredentials"]
