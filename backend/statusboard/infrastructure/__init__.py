"""Infrastructure Layer: database session management and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from core/ domain logic other than core/errors.py
"""
