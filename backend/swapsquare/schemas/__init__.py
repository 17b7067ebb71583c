"""Pydantic Schemas: request/response validation for API endpoints.

Invariants:
    - Schemas validate shape at the system boundary; business rules stay in core/
    - Responses are built from core entities via from_entity()

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
