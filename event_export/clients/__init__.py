"""
Event Export Client Modules

Provides the async HTTP clients used to read from the DHIS2 Web API.
"""

from .connection import Dhis2Connection
from .dhis2_client import (
    ResourceClient,
    Dhis2ResourceClient,
    ResourceClients,
    create_resource_clients,
    clean_response,
)

__all__ = [
    "Dhis2Connection",
    "ResourceClient",
    "Dhis2ResourceClient",
    "ResourceClients",
    "create_resource_clients",
    "clean_response",
]
