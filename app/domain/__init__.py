"""
Domain layer containing core business logic and domain services.

Submodules:
- live: Live streaming domain logic (users, streams, presence, social graph, comments, rooms).
- utils: Domain-specific utilities (e.g., ID generation).
"""
