"""Request Schemas: Pydantic models validating input at the API boundary.

Invariants:
    - Strings are stripped before length checks
    - Responses are plain dicts built by core.projections, not schema objects
"""
