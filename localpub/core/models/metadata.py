"""
Publication metadata groups — descriptive strings for the POM.

Every field defaults to the empty string. An empty string means
"unset"; no validation is performed here.
"""

from __future__ import annotations

from pydantic import BaseModel


class PublicationMetadata(BaseModel):
    """Top-level POM fields."""

    name: str = ""
    group_id: str = ""
    description: str = ""
    url: str = ""


class PublicationLicense(BaseModel):
    """The single license written to every publication."""

    name: str = ""
    url: str = ""
    distribution: str = ""


class PublicationDeveloper(BaseModel):
    """The single developer written to every publication."""

    id: str = ""
    name: str = ""
    organization: str = ""
    organization_url: str = ""


class PublicationSourceControlManagement(BaseModel):
    """Source control block (``<scm>``)."""

    connection: str = ""
    developer_connection: str = ""
    url: str = ""
