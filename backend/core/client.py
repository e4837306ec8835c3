"""HTTP collaborator: runs a TableController against the opportunities API."""

from collections.abc import Sequence
from typing import Any

import httpx

from core.errors import LoadError, SaveError, TableError
from core.sources import OpportunityQuery


def query_params(query: OpportunityQuery) -> dict[str, Any]:
    params: dict[str, Any] = {"context": query.relation_context.value, "all": "true"}
    for name in ("pipeline_type", "new_renewal_type", "stage_name", "sort_field", "sort_direction"):
        value = getattr(query, name)
        if value:
            params[name] = value
    if query.require_expiry_date:
        params["require_expiry_date"] = "true"
    if query.require_inception_date:
        params["require_inception_date"] = "true"
    return params


def error_from_response(response: httpx.Response, error_type: type[TableError]) -> TableError:
    """Build a table error whose body mirrors the API error payload."""
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if not isinstance(payload, dict):
        message = response.text or f"HTTP {response.status_code}"
        return error_type(message, body={"message": message})

    detail = payload.get("detail")
    extra = payload.get("extra")
    if isinstance(extra, list) and extra:
        return error_type(str(detail or ""), body=extra)
    message = str(detail) if detail else f"HTTP {response.status_code}"
    return error_type(message, body={"message": message})


class ApiOpportunitySource:
    """Opportunity collaborator talking to the HTTP API.

    Args:
        base_url: API root, e.g. ``http://localhost:8000``
        client: Optional preconfigured client (its base_url is used as-is)
    """

    def __init__(self, base_url: str = "", client: httpx.AsyncClient | None = None):
        self.client = client if client is not None else httpx.AsyncClient(base_url=base_url, timeout=30.0)

    async def fetch(self, query: OpportunityQuery) -> list[dict[str, Any]]:
        try:
            response = await self.client.get(
                f"/api/accounts/{query.source_id}/opportunities",
                params=query_params(query),
            )
        except httpx.HTTPError as e:
            raise LoadError(str(e)) from e
        if response.is_error:
            raise error_from_response(response, LoadError)
        return response.json()["data"]

    async def update(self, drafts: Sequence[Any]) -> None:
        body = {
            "drafts": [
                {"record_id": d.record_id, "field_name": d.field_name, "new_value": d.new_value}
                for d in drafts
            ]
        }
        try:
            response = await self.client.put("/api/opportunities", json=body)
        except httpx.HTTPError as e:
            raise SaveError(str(e)) from e
        if response.is_error:
            raise error_from_response(response, SaveError)

    async def aclose(self) -> None:
        await self.client.aclose()
