"""Pytest configuration and shared fixtures."""

import asyncio

import pytest

from core.errors import LoadError, SaveError


def make_opportunity(n: int, broker: bool = True, insured: bool = True) -> dict:
    """A raw record as the read collaborator returns it."""
    record = {
        "Id": f"006{n:05d}",
        "Name": f"Opportunity {n}",
        "StageName": "Quoted",
        "Amount": 1000 * n,
        "CloseDate": "2026-03-01",
        "GrossPremium": 100 * n,
        "OwnerId": "005OWNER",
        "Owner": {"Id": "005OWNER", "Name": "Mary Jones"},
    }
    if broker:
        record["BrokerId"] = "001BROKER"
        record["Broker"] = {"Id": "001BROKER", "Name": "Harbor Brokers"}
    if insured:
        record["InsuredId"] = "001INSURED"
        record["Insured"] = {"Id": "001INSURED", "Name": "Northwind Logistics"}
    return record


class FakeSource:
    """In-memory read/write collaborator recording every call."""

    def __init__(self, records: list[dict] | None = None):
        self.records = records if records is not None else []
        self.fetch_calls = []
        self.update_calls = []
        self.fetch_error: Exception | None = None
        self.update_error: Exception | None = None

    async def fetch(self, query):
        self.fetch_calls.append(query)
        if self.fetch_error:
            raise self.fetch_error
        return [dict(r) for r in self.records]

    async def update(self, drafts):
        self.update_calls.append(list(drafts))
        if self.update_error:
            raise self.update_error
        by_id = {r["Id"]: r for r in self.records}
        for draft in drafts:
            by_id[draft.record_id][draft.field_name] = draft.new_value


class GatedSource(FakeSource):
    """Source whose fetches block until the test releases them, in any order."""

    def __init__(self):
        super().__init__()
        self.gates: list[tuple[asyncio.Event, list[dict]]] = []

    async def fetch(self, query):
        self.fetch_calls.append(query)
        gate = asyncio.Event()
        slot = (gate, [])
        self.gates.append(slot)
        await gate.wait()
        return slot[1]

    def release(self, index: int, records: list[dict]) -> None:
        gate, result = self.gates[index]
        result.extend(records)
        gate.set()


@pytest.fixture
def records() -> list[dict]:
    return [make_opportunity(n) for n in range(1, 26)]


@pytest.fixture
def source(records) -> FakeSource:
    return FakeSource(records)


@pytest.fixture
def failing_save() -> SaveError:
    return SaveError(body=[{"message": "A"}, {"message": "B"}])


@pytest.fixture
def failing_load() -> LoadError:
    return LoadError(body={"message": "Query timed out"})
