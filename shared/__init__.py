"""
Shared utilities for the Lisk access layer.

This package aggregates common building blocks consumed by the service:

- config: Configuration via pydantic-settings
- logging: Structured logging
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses

Do not import from service_* packages into shared/.
"""
