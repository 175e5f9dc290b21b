"""Domain layer: store schema types, seed content and operation errors.

Domain modules should not depend on UI or on the storage backend.
"""
