"""
Shared utilities for the Crosswire policy provider.

This package aggregates common building blocks consumed by the service:

- config: Provider and service configuration via pydantic-settings
- logging: Structured logging with trace correlation and token masking
- errors: Canonical error types and responses
- base_service: FastAPI application scaffolding
- test_helpers: Wire-format factories and an in-memory Crosswire API

Do not import from service_* packages into shared/.
"""
