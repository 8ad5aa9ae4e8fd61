"""Session view cache and the query key registry that addresses it."""

from jingui_admin.cache import keys
from jingui_admin.cache.keys import ANY, MutationKind, QueryKey, invalidation_for
from jingui_admin.cache.store import ViewCache

__all__ = ["ANY", "MutationKind", "QueryKey", "ViewCache", "invalidation_for", "keys"]
