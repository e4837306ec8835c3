"""Table controller: wires host configuration to the table state.

The controller owns one table's state (columns, loaded records, page window,
draft edits) and keeps it consistent across asynchronous loads and saves.
Configuration changes are pushed with ``update``; watchers registered with
``watch`` rerun whenever one of their fields changes.
"""

import dataclasses
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any

from core.columns import DEFAULT_COLUMNS, parse_columns, required_relations
from core.config import TableSettings
from core.drafts import DraftEdit, EditReconciler, Notification, Notify, SavePolicy
from core.enrich import enrich_records
from core.errors import reduce_error
from core.log import get_logger
from core.pagination import PaginationState, check_page_size
from core.relations import RelationContext
from core.responses import ColumnMeta
from core.sources import OpportunityQuery, OpportunitySource


logger = get_logger(__name__)

COLUMN_FIELDS = frozenset({"columns", "account_context"})
QUERY_FIELDS = frozenset({
    "record_id",
    "account_context",
    "pipeline_type",
    "new_renewal_type",
    "stage_name",
    "require_expiry_date",
    "require_inception_date",
    "sort_field",
    "sort_direction",
})


@dataclass
class TableConfig:
    """Host-provided settings for one table instance."""

    record_id: str | None = None
    table_title: str | None = None
    account_context: str | None = None  # "Broker" or "Insured"
    pipeline_type: str | None = None  # "Pipeline", "Renewal" or "Both"
    new_renewal_type: str | None = None  # "New", "Renewal" or "Any"
    stage_name: str | None = None
    require_expiry_date: bool = False
    require_inception_date: bool = False
    sort_field: str | None = None
    sort_direction: str | None = None  # "ASC" or "DESC"
    columns: str | None = None
    page_size: int = 10

    @property
    def relation_context(self) -> RelationContext:
        return RelationContext.coerce(self.account_context)

    def query(self) -> OpportunityQuery:
        return OpportunityQuery(
            source_id=self.record_id or "",
            relation_context=self.relation_context,
            pipeline_type=self.pipeline_type,
            new_renewal_type=self.new_renewal_type,
            stage_name=self.stage_name,
            require_expiry_date=bool(self.require_expiry_date),
            require_inception_date=bool(self.require_inception_date),
            sort_field=self.sort_field,
            sort_direction=self.sort_direction,
        )


Watcher = Callable[[], Awaitable[None]]


class TableController:
    def __init__(
        self,
        source: OpportunitySource,
        config: TableConfig | None = None,
        notify: Notify | None = None,
        *,
        save_policy: SavePolicy | str = SavePolicy.REFETCH,
        discard_stale_loads: bool = False,
        default_columns: str = DEFAULT_COLUMNS,
    ):
        self.source = source
        self.config = config or TableConfig()
        self.default_columns = default_columns
        self.discard_stale_loads = discard_stale_loads
        self.notifications: list[Notification] = []
        self._notify = notify

        self.columns: list[ColumnMeta] = []
        self.pagination = PaginationState(self.config.page_size)
        self.reconciler = EditReconciler(
            writer=source.update,
            reload=self.load,
            reset=self.reset,
            notify=self.notify,
            policy=SavePolicy.coerce(save_policy),
        )
        self._raw: list[dict[str, Any]] = []
        self._in_flight = 0
        self._load_seq = 0
        self._applied_seq = 0
        self._watchers: list[tuple[frozenset[str], Watcher]] = []

        self.watch(COLUMN_FIELDS, self._rebuild_columns)
        self.watch(QUERY_FIELDS, self.load)
        self.watch({"page_size"}, self._repage)

    @classmethod
    def from_settings(
        cls,
        source: OpportunitySource,
        settings: TableSettings,
        config: TableConfig | None = None,
        notify: Notify | None = None,
    ) -> "TableController":
        """Controller using the deployment's table settings."""
        return cls(
            source,
            config or TableConfig(page_size=settings.page_size),
            notify,
            save_policy=settings.save_policy,
            discard_stale_loads=settings.discard_stale_loads,
            default_columns=settings.default_columns,
        )

    # -- observer ---------------------------------------------------------

    def watch(self, fields: Iterable[str], callback: Watcher) -> None:
        """Run ``callback`` whenever one of ``fields`` changes."""
        unknown = set(fields) - {f.name for f in dataclasses.fields(TableConfig)}
        if unknown:
            raise ValueError(f"Unknown config fields: {', '.join(sorted(unknown))}")
        self._watchers.append((frozenset(fields), callback))

    async def update(self, **changes: Any) -> set[str]:
        """Apply configuration changes and rerun the affected watchers.

        Returns:
            Names of the fields whose value actually changed
        """
        names = {f.name for f in dataclasses.fields(TableConfig)}
        for name in changes:
            if name not in names:
                raise ValueError(f"Unknown config field: {name}")
        if "page_size" in changes:
            check_page_size(changes["page_size"])

        changed = set()
        for name, value in changes.items():
            if getattr(self.config, name) != value:
                setattr(self.config, name, value)
                changed.add(name)
        if changed:
            logger.debug("Config changed: %s", ", ".join(sorted(changed)))
            for fields, callback in list(self._watchers):
                if fields & changed:
                    await callback()
        return changed

    # -- lifecycle --------------------------------------------------------

    async def start(self) -> None:
        """Build the columns and run the first load."""
        await self._rebuild_columns()
        await self.load()

    async def _rebuild_columns(self) -> None:
        relations = required_relations(self.columns)
        self.columns = parse_columns(
            self.config.columns, self.config.relation_context, default=self.default_columns
        )
        if self._raw and required_relations(self.columns) != relations:
            # New alias columns need their links derived on the loaded records
            page_number = self.pagination.page_number
            self.pagination.reset(self._enrich(self._raw))
            self.pagination.go_to(page_number)

    def _enrich(self, raw: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return enrich_records(raw, self.config.relation_context, required_relations(self.columns))

    async def _repage(self) -> None:
        self.pagination.reset(self.pagination.records, self.config.page_size)

    async def load(self) -> None:
        """Fetch and enrich the records, then show page 1."""
        if not (self.config.record_id or "").strip():
            # Supersedes any load still in flight
            self._load_seq += 1
            self._applied_seq = self._load_seq
            self._raw = []
            self.pagination.reset([])
            return

        self._load_seq += 1
        seq = self._load_seq
        self._in_flight += 1
        context = self.config.relation_context
        try:
            raw = await self.source.fetch(self.config.query())
        except Exception as error:
            if self._is_stale(seq):
                logger.debug("Discarding stale load failure %d", seq)
                return
            self._applied_seq = seq
            message = reduce_error(error)
            logger.warning("Load failed for %s: %s", self.config.record_id, message)
            self.notify(Notification("Error loading opportunities", message, "error"))
            self._raw = []
            self.pagination.reset([])
            return
        finally:
            self._in_flight -= 1

        if self._is_stale(seq):
            logger.debug("Discarding stale load %d", seq)
            return
        self._applied_seq = seq
        self._raw = list(raw)
        records = enrich_records(self._raw, context, required_relations(self.columns))
        self.pagination.reset(records, self.config.page_size)
        logger.info("Loaded %d opportunities for %s", len(records), self.config.record_id)

    def _is_stale(self, seq: int) -> bool:
        # Without sequencing, whichever load resolves last wins
        return self.discard_stale_loads and seq < self._applied_seq

    async def reset(self) -> None:
        """Discard all client state and rebuild the table from scratch."""
        self.reconciler.clear()
        self._raw = []
        self.columns = []
        self.pagination = PaginationState(self.config.page_size)
        await self.start()

    # -- host / rendering surface -----------------------------------------

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)
        if self._notify:
            self._notify(notification)

    @property
    def title(self) -> str | None:
        return self.config.table_title

    @property
    def loading(self) -> bool:
        return self._in_flight > 0 or self.reconciler.loading

    @property
    def visible_records(self) -> list[dict[str, Any]]:
        return self.pagination.visible

    @property
    def drafts(self) -> list[DraftEdit]:
        return self.reconciler.drafts

    @property
    def page_number(self) -> int:
        return self.pagination.page_number

    @property
    def total_pages(self) -> int:
        return self.pagination.total_pages

    @property
    def is_first_page(self) -> bool:
        return self.pagination.is_first_page

    @property
    def is_last_page(self) -> bool:
        return self.pagination.is_last_page

    @property
    def has_data(self) -> bool:
        return self.pagination.has_data

    def next_page(self) -> None:
        if not self.is_last_page:
            self.pagination.next()

    def prev_page(self) -> None:
        if not self.is_first_page:
            self.pagination.prev()

    def record_draft(self, record_id: str, field_name: str, value: Any) -> None:
        self.reconciler.record_draft(record_id, field_name, value)

    async def save(self) -> bool:
        return await self.reconciler.save()
