from .cache import RelationshipListCache
from .service_client import RelationshipServiceClient


__all__ = [
    # cache.py
    "RelationshipListCache",
    # service_client.py
    "RelationshipServiceClient",
]
