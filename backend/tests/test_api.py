import pytest
from litestar import Litestar
from litestar.di import Provide
from litestar.testing import AsyncTestClient, TestClient

from conftest import FakeSource, make_opportunity
from api.opportunities import OpportunitiesController
from core.client import ApiOpportunitySource
from core.config import TableSettings
from core.controller import TableConfig, TableController
from core.errors import LoadError, SaveError
from core.relations import RelationContext


def build_app(source, settings=None) -> Litestar:
    async def provide_source():
        return source

    async def provide_table_settings():
        return settings or TableSettings()

    return Litestar(
        route_handlers=[OpportunitiesController],
        dependencies={
            "source": Provide(provide_source),
            "table_settings": Provide(provide_table_settings),
        },
    )


@pytest.fixture
def client(source):
    with TestClient(app=build_app(source)) as client:
        yield client


def test_list_returns_columns_and_first_page(client, source):
    response = client.get("/api/accounts/001ROOT/opportunities")
    assert response.status_code == 200
    body = response.json()

    assert [c["key"] for c in body["columns"]] == [
        "oppLink", "StageName", "relatedAccountLink", "Amount", "CloseDate",
    ]
    assert body["columns"][2]["label"] == "Broker Account"
    assert len(body["data"]) == 10
    assert body["data"][0]["oppLink"] == "/00600001"
    assert body["total_pages"] == 3
    assert body["total_records"] == 25
    assert body["is_first_page"] is True
    assert source.fetch_calls[0].source_id == "001ROOT"


def test_list_passes_filters_to_source(client, source):
    response = client.get(
        "/api/accounts/001ROOT/opportunities",
        params={
            "context": "Insured",
            "pipeline_type": "Renewal",
            "new_renewal_type": "New",
            "stage_name": "Bound",
            "require_expiry_date": "true",
            "sort_field": "Amount",
            "sort_direction": "DESC",
            "columns": "Name,RelatedAccount,Broker",
        },
    )
    assert response.status_code == 200
    query = source.fetch_calls[0]
    assert query.relation_context is RelationContext.INSURED
    assert query.pipeline_type == "Renewal"
    assert query.new_renewal_type == "New"
    assert query.stage_name == "Bound"
    assert query.require_expiry_date is True
    assert query.require_inception_date is False
    assert query.sort_field == "Amount"

    body = response.json()
    assert [c["label"] for c in body["columns"]] == ["Opportunity Name", "Insured Account", "Broker"]
    assert body["data"][0]["RelatedAccountName"] == "Northwind Logistics"
    assert body["data"][0]["BrokerName"] == "Harbor Brokers"


def test_list_pages(client):
    response = client.get("/api/accounts/001ROOT/opportunities", params={"page": 3})
    body = response.json()
    assert len(body["data"]) == 5
    assert body["is_last_page"] is True

    response = client.get("/api/accounts/001ROOT/opportunities", params={"page": 4})
    assert response.json()["data"] == []


def test_list_all_records_on_one_page(client):
    body = client.get("/api/accounts/001ROOT/opportunities", params={"all": "true"}).json()
    assert len(body["data"]) == 25
    assert body["total_pages"] == 1


def test_page_size_defaults_to_settings():
    source = FakeSource([make_opportunity(n) for n in range(1, 8)])
    with TestClient(app=build_app(source, TableSettings(page_size=5))) as client:
        body = client.get("/api/accounts/001ROOT/opportunities").json()
    assert body["page_size"] == 5
    assert body["total_pages"] == 2


def test_load_error_is_bad_gateway(client, source):
    source.fetch_error = LoadError(body={"message": "Query timed out"})
    response = client.get("/api/accounts/001ROOT/opportunities")
    assert response.status_code == 502
    assert response.json()["detail"] == "Query timed out"


def test_update_saves_drafts(client, source):
    response = client.put(
        "/api/opportunities",
        json={"drafts": [
            {"record_id": "00600001", "field_name": "StageName", "new_value": "Bound"},
            {"record_id": "00600001", "field_name": "Amount", "new_value": 5},
        ]},
    )
    assert response.status_code == 200
    assert response.json() == {"updated": 1}
    assert source.records[0]["StageName"] == "Bound"
    assert source.records[0]["Amount"] == 5


def test_update_error_carries_messages(client, source):
    source.update_error = SaveError(body=[{"message": "A"}, {"message": "B"}])
    response = client.put(
        "/api/opportunities",
        json={"drafts": [{"record_id": "00600001", "field_name": "Amount", "new_value": 5}]},
    )
    assert response.status_code == 400
    body = response.json()
    assert body["detail"] == "A, B"
    assert body["extra"] == [{"message": "A"}, {"message": "B"}]


@pytest.mark.asyncio
async def test_controller_against_api(source):
    async with AsyncTestClient(app=build_app(source)) as client:
        api = ApiOpportunitySource(client=client)
        controller = TableController(
            api, TableConfig(record_id="001ROOT", columns="Name,Owner,Amount")
        )
        await controller.start()
        assert controller.total_pages == 3
        assert controller.visible_records[0]["OwnerName"] == "Mary Jones"

        controller.record_draft("00600001", "Amount", 42)
        assert await controller.save() is True
        assert controller.visible_records[0]["Amount"] == 42

        source.update_error = SaveError(body=[{"message": "A"}, {"message": "B"}])
        controller.record_draft("00600002", "Amount", 1)
        assert await controller.save() is False
        assert controller.notifications[-1].message == "A, B"
        assert len(controller.drafts) == 1
