"""Domain models and entities.

Plain, strict data structures (Pydantic v2) plus the pure rules for
addressing them. The domain does not know about HTTP, the CLI or httpx.
"""
