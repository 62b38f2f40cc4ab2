"""API clients for external services."""

from competitions.clients.ratings import RatingsClient, get_ratings_client

__all__ = ["RatingsClient", "get_ratings_client"]
