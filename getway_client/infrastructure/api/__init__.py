"""HTTP transport for the GetWay REST API."""

from getway_client.infrastructure.api.api_client import ApiClient

__all__ = ["ApiClient"]
