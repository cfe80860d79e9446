"""
Live streaming domain logic.

Includes:
- user: Account lookups, listing and updates.
- stream: Streams and viewer presence tracking.
- social: Subscription graph.
- comment: Per-stream comments.
- room: Chat-room membership.
"""
