"""Services Layer: async shell around the pure core.

Invariants:
    - Services reach persistence only through the store protocols in StoreSet
    - Permission checks live here, not in routes
"""
