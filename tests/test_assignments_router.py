from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Any

import pytest
from fastapi.routing import APIRoute

from clientdesk.api.contracts import AssignmentFieldUpdateRequest, ParseClientTextRequest
from clientdesk.api.errors import ApiError
from clientdesk.assignments.router import create_assignments_router
from clientdesk.assignments.service import AssignmentsService
from clientdesk.assignments.store import LocalAssignmentStore, RemoteAssignmentStore
from clientdesk.core.local_store import LocalKeyValueStore
from tests.fakes import ADMIN, AGENT, FakeCollection

TODAY = date(2026, 10, 19)


def _service(tmp_path: Path, collection: FakeCollection | None = None) -> AssignmentsService:
    remote = (
        RemoteAssignmentStore(collection, clock=lambda: TODAY)
        if collection is not None
        else None
    )
    return AssignmentsService(
        local=LocalAssignmentStore(LocalKeyValueStore(tmp_path), clock=lambda: TODAY),
        remote=remote,
        clock=lambda: TODAY,
    )


def _endpoints(service: AssignmentsService) -> dict[str, Any]:
    router = create_assignments_router(service, lambda: AGENT)
    return {
        route.name: route.endpoint for route in router.routes if isinstance(route, APIRoute)
    }


def _list(endpoints: dict[str, Any], **params: Any):
    query = {
        "search": "",
        "location": "all-locations",
        "application": "all-applications",
        "agent": "all-agents",
        "month": "all-months",
        "rows_per_page": 10,
        "session": AGENT,
    }
    query.update(params)
    return endpoints["list_assignments"](**query)


def test_parse_endpoint_creates_assignment_for_caller(tmp_path: Path) -> None:
    collection = FakeCollection()
    endpoints = _endpoints(_service(tmp_path, collection))

    created = endpoints["create_from_text"](
        ParseClientTextRequest(text="John Doe\n35\nLA\nEngineer\nTanTan"), session=AGENT
    )

    assert created["name"] == "John Doe"
    assert created["assignedAgent"] == "Ken"
    assert created["date"] == "2026-10-19"
    assert "createdAt" in created
    assert collection.docs[0]["application"] == "TanTan"


def test_parse_endpoint_rejects_incomplete_text(tmp_path: Path) -> None:
    endpoints = _endpoints(_service(tmp_path, FakeCollection()))

    with pytest.raises(ApiError) as exc:
        endpoints["create_from_text"](ParseClientTextRequest(text="Solo"), session=AGENT)

    assert exc.value.status_code == 422
    assert exc.value.detail["error_code"] == "MISSING_REQUIRED_FIELD"


def test_list_endpoint_filters_and_counts(tmp_path: Path) -> None:
    collection = FakeCollection(
        [
            {"id": "a1", "name": "Ana", "age": "30", "assignedAgent": "Ken", "date": "2026-10-02"},
            {"id": "a2", "name": "Ben", "age": "41", "assignedAgent": "Mar", "date": "2026-09-02"},
            {"id": "a3", "name": "Cy", "age": "22", "assignedAgent": "Ken", "date": "2026-09-20"},
        ]
    )
    endpoints = _endpoints(_service(tmp_path, collection))

    response = _list(endpoints, agent="Ken", month="previous")

    assert [item.id for item in response.items] == ["a3"]
    assert response.total == 3
    assert response.matched == 1


def test_list_endpoint_rejects_unknown_month_and_page_size(tmp_path: Path) -> None:
    endpoints = _endpoints(_service(tmp_path, FakeCollection()))

    with pytest.raises(ApiError) as month_exc:
        _list(endpoints, month="someday")
    with pytest.raises(ApiError) as size_exc:
        _list(endpoints, rows_per_page=3)

    assert month_exc.value.status_code == 422
    assert size_exc.value.status_code == 422


def test_stats_endpoint(tmp_path: Path) -> None:
    collection = FakeCollection(
        [
            {"id": "a1", "name": "Ana", "age": "30", "assignedAgent": "Lovely", "location": "Cebu"},
            {"id": "a2", "name": "Ben", "age": "41", "assignedAgent": "Lovely", "location": "cebu"},
        ]
    )
    endpoints = _endpoints(_service(tmp_path, collection))

    stats = endpoints["assignment_stats"](session=AGENT)

    assert stats.total_clients == 2
    assert stats.top_agent == "Lovely"
    assert stats.locations == ["cebu"]


def test_patch_endpoint_updates_and_maps_errors(tmp_path: Path) -> None:
    collection = FakeCollection([{"id": "a1", "name": "Ana", "age": "30"}])
    endpoints = _endpoints(_service(tmp_path, collection))
    update = endpoints["update_assignment_field"]

    result = update("a1", AssignmentFieldUpdateRequest(field="work", value="Chef"), session=AGENT)

    assert result == {"client_id": "a1", "field": "work", "updated": True}
    assert collection.docs[0]["work"] == "Chef"
    with pytest.raises(ApiError) as missing:
        update("zz", AssignmentFieldUpdateRequest(field="work", value="Chef"), session=AGENT)
    with pytest.raises(ApiError) as invalid:
        update("a1", AssignmentFieldUpdateRequest(field="id", value="x"), session=AGENT)
    assert missing.value.status_code == 404
    assert invalid.value.status_code == 422


def test_patch_endpoint_rejects_edits_made_on_stale_values(tmp_path: Path) -> None:
    collection = FakeCollection([{"id": "a1", "name": "Ana", "age": "30", "work": "Chef"}])
    endpoints = _endpoints(_service(tmp_path, collection))
    update = endpoints["update_assignment_field"]

    with pytest.raises(ApiError) as changed:
        update(
            "a1",
            AssignmentFieldUpdateRequest(field="work", value="Baker", expected="Nurse"),
            session=AGENT,
        )
    with pytest.raises(ApiError) as vanished:
        update(
            "gone",
            AssignmentFieldUpdateRequest(field="work", value="Baker", expected="Chef"),
            session=AGENT,
        )

    assert changed.value.status_code == 409
    assert changed.value.detail["error_code"] == "STALE_EDIT"
    assert vanished.value.status_code == 409
    assert collection.docs[0]["work"] == "Chef"

    result = update(
        "a1",
        AssignmentFieldUpdateRequest(field="work", value="Baker", expected="Chef"),
        session=AGENT,
    )
    assert result["updated"] is True
    assert collection.docs[0]["work"] == "Baker"


def test_patch_endpoint_reports_store_outage(tmp_path: Path) -> None:
    endpoints = _endpoints(_service(tmp_path, FakeCollection(fail=True)))

    with pytest.raises(ApiError) as exc:
        endpoints["update_assignment_field"](
            "a1", AssignmentFieldUpdateRequest(field="work", value="Chef"), session=AGENT
        )

    assert exc.value.status_code == 503


def test_delete_endpoint_is_admin_only(tmp_path: Path) -> None:
    collection = FakeCollection([{"id": "a1", "name": "Ana", "age": "30"}])
    endpoints = _endpoints(_service(tmp_path, collection))

    with pytest.raises(ApiError) as exc:
        endpoints["delete_assignment"]("a1", session=AGENT)
    assert exc.value.status_code == 403
    assert len(collection.docs) == 1

    response = endpoints["delete_assignment"]("a1", session=ADMIN)
    assert response.deleted is True
    assert collection.docs == []


def test_service_uses_local_store_when_remote_is_unavailable(tmp_path: Path) -> None:
    service = _service(tmp_path)

    created = service.create_from_text(AGENT, "Name: Ana\nAge: 30")

    assert service.store_for(AGENT) is service.store_for(None)
    assert [record.id for record in service.store_for(None).list_all()] == [created.id]
