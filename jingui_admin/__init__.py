"""
Jingui Admin — administrative client for the Jingui secrets service.

Manages vaults, vault items, registered instances and debug policies through
an authenticated HTTP API, with a session-scoped view cache and transient
outcome notifications.
"""

__version__ = "0.1.0"
