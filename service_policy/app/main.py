"""
Policy service: HTTP front-end for the ``crosswire_policy`` lifecycle.
"""

from typing import Optional

from fastapi import HTTPException
from fastapi.responses import JSONResponse

from shared.base_service import BaseService

from .adapters.crosswire_client import CrosswireClient
from .provider import configure_provider, resources
from .resource import LifecycleResult, PolicyResource
from .schema import RESOURCE_TYPE, PolicyResourceModel


def _render(result: LifecycleResult, status_code: int = 200) -> JSONResponse:
    """Serialize a lifecycle result.

    Error diagnostics raise ValidationError, which the shared handler turns
    into a 400 carrying every finding.
    """
    result.diagnostics.raise_for_errors()
    return JSONResponse(
        status_code=status_code,
        content={
            "state": result.state.model_dump(mode="json") if result.state else None,
            "diagnostics": result.diagnostics.to_list(),
        }
    )


class PolicyService(BaseService):
    """Policy service implementation."""

    def __init__(self, client: Optional[CrosswireClient] = None):
        super().__init__("policy", 8020)

        self.client = client or configure_provider()
        self.policy_resource: PolicyResource = resources(self.client)[RESOURCE_TYPE]

        self._setup_policy_routes()

    def _setup_policy_routes(self):
        """Set up policy-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "policy",
                "message": "Crosswire provider - Policy Service",
                "version": "0.1.0",
                "resources": [RESOURCE_TYPE],
                "crosswire_host": self.client.host_url,
            }

        @self.app.post("/policies/validate")
        def validate_policy(config: PolicyResourceModel):
            """Run validation rules without contacting Crosswire."""
            diagnostics = self.policy_resource.validate_config(config)
            return {
                "valid": not diagnostics.has_error(),
                "diagnostics": diagnostics.to_list(),
            }

        @self.app.post("/policies")
        def create_policy(plan: PolicyResourceModel):
            """Create a policy."""
            return _render(self.policy_resource.create(plan), status_code=201)

        @self.app.get("/policies/{policy_id}")
        def get_policy(policy_id: str):
            """Fetch a policy's current state by id."""
            result = self.policy_resource.import_state(policy_id)
            if result.state is None and not result.diagnostics:
                raise HTTPException(status_code=404, detail=f"Policy {policy_id} not found")
            return _render(result)

        @self.app.put("/policies/{policy_id}")
        def update_policy(policy_id: str, plan: PolicyResourceModel):
            """Updates are not supported; always answers with an error diagnostic."""
            state = plan.model_copy(update={"id": policy_id})
            return _render(self.policy_resource.update(plan, state))

        @self.app.delete("/policies/{policy_id}")
        def delete_policy(policy_id: str):
            """Deletes are not supported; the policy stays on the server."""
            return _render(self.policy_resource.delete())

    def _check_dependencies(self):
        return {"crosswire": self.client.host_url}


def create_app(client: Optional[CrosswireClient] = None):
    """Create policy service application."""
    service = PolicyService(client=client)
    return service.app


def main():
    service = PolicyService()
    service.run()


if __name__ == "__main__":
    main()
