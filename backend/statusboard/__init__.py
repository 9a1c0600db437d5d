"""Statusboard Application Package: team status updates with referential integrity.

Invariants:
    - Package root contains no executable code (no import side-effects)
"""

__version__ = "1.0.0"
