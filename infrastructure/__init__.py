"""
Infrastructure Package
======================

Provides abstraction layers for external dependencies following the Dependency Inversion Principle.

Modules:
    - storage: Object storage abstraction (S3/MinIO, in-memory)
    - container: Service locator wiring storage and the catalog services

This package enables:
    - Testing against the in-memory storage adapter
    - Switching between providers without code changes
"""
