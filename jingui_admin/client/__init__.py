"""HTTP transport for the Jingui admin API — client, factory and typed operations."""

from jingui_admin.client.api import JinguiClient
from jingui_admin.client.factory import ClientFactory
from jingui_admin.client.resources import ResourceTransport

__all__ = ["ClientFactory", "JinguiClient", "ResourceTransport"]
