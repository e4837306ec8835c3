from dataclasses import dataclass
from typing import Any

from litestar import Controller, get, put
from litestar.exceptions import HTTPException
from litestar.params import Dependency, Parameter

from core.columns import parse_columns, required_relations
from core.config import TableSettings
from core.drafts import DraftEdit
from core.enrich import enrich_records
from core.errors import LoadError, SaveError, reduce_error
from core.pagination import PaginationState
from core.relations import RelationContext
from core.responses import PageResponse
from core.sources import OpportunityQuery, OpportunitySource


@dataclass
class DraftInput:
    record_id: str
    field_name: str
    new_value: Any = None


@dataclass
class DraftBatch:
    drafts: list[DraftInput]


@dataclass
class UpdateResponse:
    updated: int


def error_extra(error: LoadError | SaveError) -> list[dict[str, str]] | None:
    """Sub-error list for the response, when the error carries one."""
    if isinstance(error.body, list):
        return [{"message": reduce_error(entry)} for entry in error.body]
    return None


class OpportunitiesController(Controller):
    path = "/api"
    tags = ["opportunities"]

    @get("/accounts/{account_id:str}/opportunities")
    async def list_hierarchy_opportunities(
        self,
        account_id: str,
        source: OpportunitySource = Dependency(skip_validation=True),
        table_settings: TableSettings = Dependency(skip_validation=True),
        context: str | None = Parameter(default=None),
        pipeline_type: str | None = Parameter(default=None),
        new_renewal_type: str | None = Parameter(default=None),
        stage_name: str | None = Parameter(default=None),
        require_expiry_date: bool = Parameter(default=False),
        require_inception_date: bool = Parameter(default=False),
        sort_field: str | None = Parameter(default=None),
        sort_direction: str | None = Parameter(default=None),
        columns: str | None = Parameter(default=None),
        page: int = Parameter(default=1),
        page_size: int | None = Parameter(default=None, ge=1, le=500),
        all_records: bool = Parameter(default=False, query="all"),
    ) -> PageResponse:
        """Opportunities across the account hierarchy, one page at a time."""
        relation_context = RelationContext.coerce(context)
        query = OpportunityQuery(
            source_id=account_id,
            relation_context=relation_context,
            pipeline_type=pipeline_type,
            new_renewal_type=new_renewal_type,
            stage_name=stage_name,
            require_expiry_date=require_expiry_date,
            require_inception_date=require_inception_date,
            sort_field=sort_field,
            sort_direction=sort_direction,
        )
        try:
            raw = await source.fetch(query)
        except LoadError as e:
            raise HTTPException(status_code=502, detail=reduce_error(e), extra=error_extra(e)) from e

        column_meta = parse_columns(columns, relation_context, default=table_settings.default_columns)
        records = enrich_records(raw, relation_context, required_relations(column_meta))

        size = page_size or table_settings.page_size
        if all_records:
            size = max(len(records), 1)
        pagination = PaginationState(size)
        pagination.reset(records)
        pagination.go_to(1 if all_records else page)

        return PageResponse(
            columns=column_meta,
            data=pagination.visible,
            page_number=pagination.page_number,
            page_size=pagination.page_size,
            total_pages=pagination.total_pages,
            total_records=pagination.total_records,
            is_first_page=pagination.is_first_page,
            is_last_page=pagination.is_last_page,
        )

    @put("/opportunities")
    async def update_opportunities(
        self,
        data: DraftBatch,
        source: OpportunitySource = Dependency(skip_validation=True),
    ) -> UpdateResponse:
        """Save a batch of inline edits."""
        drafts = [DraftEdit(d.record_id, d.field_name, d.new_value) for d in data.drafts]
        try:
            await source.update(drafts)
        except SaveError as e:
            raise HTTPException(status_code=400, detail=reduce_error(e), extra=error_extra(e)) from e
        return UpdateResponse(updated=len({d.record_id for d in drafts}))
