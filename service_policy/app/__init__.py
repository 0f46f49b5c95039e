"""
Policy provider package for the Crosswire authorization service.

This package lets a declarative configuration tool manage Crosswire
policies (access-control rules). It provides:

- app.policy: Policy data model, wire codec and validation rules.
- app.adapters: HTTP client for the Crosswire integrations API.
- app.schema: Declarative resource models for ``crosswire_policy``.
- app.resource: Lifecycle operations (validate/create/read/import) with
  update and delete reported as unsupported.
- app.provider: Host/token resolution and client construction.
- app.main: HTTP front-end exposing the lifecycle operations.

Guidelines:
- Every remote operation is a single blocking request; nothing is retried.
- Decode failures and remote errors propagate with their diagnostic context.
"""
