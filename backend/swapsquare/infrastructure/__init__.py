"""Infrastructure Layer: Persistent Store, Identity Provider and cross-cutting concerns.

Invariants:
    - Infrastructure never imports domain logic beyond core types and errors
    - All store calls wrapped with retry and error mapping

Design Decisions:
    - Resilient wrappers over raw clients: retry policy lives in one place
"""
