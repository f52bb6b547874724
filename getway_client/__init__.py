"""GetWay API client: REST transport, local session store and auth/domain services."""

__version__ = "1.0.0"
