"""AppStream rendering and starter templates."""

from .appstream import changelog_xml, description_xml

__all__ = ["changelog_xml", "description_xml"]
