from __future__ import annotations

import io
import threading
import time
from collections.abc import Iterator
from pathlib import Path

import pytest
from conftest import Office, assign, at, seed_office
from fastapi import FastAPI
from PIL import Image
from sqlalchemy.orm import Session
from starlette.testclient import TestClient

from hotdesk.core.repositories.data_store import DataStore
from hotdesk.infrastructure.image_sink import LocalImageSink
from hotdesk.main import app
from hotdesk.presentation import bookings as booking_routes
from hotdesk.presentation.dependencies import get_db, get_image_sink, get_store
from hotdesk.presentation.errors import register_error_handlers
from hotdesk.presentation.middleware import TimeoutMiddleware


@pytest.fixture()
def sink(tmp_path: Path) -> LocalImageSink:
    return LocalImageSink(tmp_path / "plans", "https://files.example.com/{id}")


@pytest.fixture()
def office(any_store: DataStore) -> Office:
    return seed_office(any_store)


def _wire(target: FastAPI, store: DataStore, sink: LocalImageSink | None = None) -> None:
    if isinstance(store.closable, Session):
        # Keep the real get_store, feeding it the test database's session
        def _session() -> Iterator[Session]:
            yield store.closable

        target.dependency_overrides[get_db] = _session
    else:
        target.dependency_overrides[get_store] = lambda: store
    if sink is not None:
        target.dependency_overrides[get_image_sink] = lambda: sink


@pytest.fixture()
def client(any_store: DataStore, sink: LocalImageSink) -> Iterator[TestClient]:
    """
    The real application, once per storage binding. Startup hooks (and so
    the reaper) only run inside a `with TestClient(...)` block, which these
    tests never open.
    """
    _wire(app, any_store, sink)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _image(fmt: str) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (8, 8), color=(200, 30, 30)).save(buf, format=fmt)
    return buf.getvalue()


def _window(start: float, end: float) -> dict[str, str]:
    return {"start_time": at(start).isoformat(), "end_time": at(end).isoformat()}


def test_health(client: TestClient) -> None:
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"
    assert r.headers["X-Request-ID"]


def test_post_floor_stores_image_and_returns_201(client: TestClient, sink: LocalImageSink) -> None:
    r = client.post(
        "/floors",
        data={"name": "Level 3", "address": "3 Main St"},
        files={"image": ("plan.png", _image("PNG"), "application/octet-stream")},
    )

    assert r.status_code == 201
    body = r.json()
    assert body["name"] == "Level 3"
    assert body["download_url"].startswith("https://files.example.com/")
    stored = list(sink.directory.iterdir())
    assert len(stored) == 1
    assert body["download_url"].endswith(stored[0].name)

    assert client.get(f"/floors/{body['id']}").json() == body
    assert [f["id"] for f in client.get("/floors").json()] == [body["id"]]


def test_post_floor_accepts_jpeg(client: TestClient) -> None:
    r = client.post(
        "/floors",
        data={"name": "Level 4", "address": "4 Main St"},
        files={"image": ("plan.jpg", _image("JPEG"), "image/jpeg")},
    )
    assert r.status_code == 201


@pytest.mark.parametrize(
    "data, files",
    [
        ({"name": "L", "address": "A"}, {"image": ("plan.gif", _image("GIF"), "image/png")}),
        ({"name": "L", "address": "A"}, {"image": ("plan.png", b"not an image", "image/png")}),
        ({"name": "L", "address": "A"}, None),
        ({"name": "", "address": "A"}, {"image": ("plan.png", _image("PNG"), "image/png")}),
    ],
)
def test_post_floor_rejects_bad_input_with_400(client: TestClient, data, files) -> None:
    r = client.post("/floors", data=data, files=files)
    assert r.status_code == 400
    assert "detail" in r.json()


def test_post_floor_rejects_oversized_image(client: TestClient) -> None:
    oversized = _image("PNG") + b"\0" * (6 << 20)
    r = client.post(
        "/floors",
        data={"name": "L", "address": "A"},
        files={"image": ("plan.png", oversized, "image/png")},
    )
    assert r.status_code == 400


def test_get_missing_floor_returns_404(client: TestClient) -> None:
    r = client.get("/floors/missing")
    assert r.status_code == 404
    assert r.json()["detail"] == "Floor 'missing' not found"


def test_force_delete_floor(client: TestClient, any_store: DataStore, office: Office) -> None:
    r = client.request("DELETE", f"/floors/{office.floor_id}", json={"force_delete": False})
    assert r.status_code == 403
    assert "invalid operation" in r.json()["detail"]

    r = client.request("DELETE", f"/floors/{office.floor_id}")
    assert r.status_code == 403

    r = client.request("DELETE", f"/floors/{office.floor_id}", json={"force_delete": True})
    assert r.status_code == 200
    assert {w.id for w in any_store.workspaces.deleted()} == {office.desk, office.other_desk}

    assert client.get(f"/floors/{office.floor_id}").status_code == 404
    assert client.request("DELETE", f"/floors/{office.floor_id}", json={"force_delete": True}).status_code == 404


def test_patch_floor(client: TestClient, office: Office) -> None:
    r = client.patch(f"/floors/{office.floor_id}", json={"address": "10 New Rd"})
    assert r.status_code == 200
    assert r.json()["address"] == "10 New Rd"
    assert r.json()["name"] == "Level 1"


def test_workspace_lifecycle(client: TestClient, office: Office) -> None:
    r = client.post(
        "/workspaces",
        json={"name": "Desk C", "floor_id": office.floor_id, "details": "by the window", "properties": {"monitors": 2}},
    )
    assert r.status_code == 201
    workspace = r.json()
    assert workspace["properties"] == {"monitors": 2}

    r = client.patch(f"/workspaces/{workspace['id']}", json={"details": "near the kitchen"})
    assert r.status_code == 200
    assert r.json()["details"] == "near the kitchen"
    assert r.json()["name"] == "Desk C"

    r = client.patch(f"/workspaces/{workspace['id']}/properties", json={"standing": True})
    assert r.status_code == 200
    assert r.json()["properties"] == {"standing": True}

    floor_workspaces = client.get(f"/floors/{office.floor_id}/workspaces").json()
    assert [w["name"] for w in floor_workspaces] == ["Desk A", "Desk B", "Desk C"]

    assert client.delete(f"/workspaces/{workspace['id']}").status_code == 200
    assert client.get(f"/workspaces/{workspace['id']}").status_code == 404
    assert client.delete(f"/workspaces/{workspace['id']}").status_code == 404
    assert len(client.get("/workspaces").json()) == 2


def test_post_workspace_validation(client: TestClient, office: Office) -> None:
    assert client.post("/workspaces", json={"floor_id": office.floor_id}).status_code == 400
    assert client.post("/workspaces", json={"name": " ", "floor_id": office.floor_id}).status_code == 400
    assert client.post("/workspaces", json={"name": "Desk", "floor_id": "missing"}).status_code == 404


def test_booking_scenarios(client: TestClient, any_store: DataStore, office: Office) -> None:
    # Bare booking, then an overlapping one
    r = client.post("/bookings", json={"workspace_id": office.desk, "user_id": office.visitor, **_window(9, 10)})
    assert r.status_code == 201
    first = r.json()
    assert first["cancelled"] is False

    r = client.post(
        "/bookings", json={"workspace_id": office.desk, "user_id": office.colleague, **_window(9.5, 10.5)}
    )
    assert r.status_code == 409

    # Assignment blocks the pool, an offering unlocks it
    assign(any_store, office.other_desk, office.owner, at(0), at(24 * 300))
    booking = {"workspace_id": office.other_desk, "user_id": office.colleague, **_window(9, 10)}
    assert client.post("/bookings", json=booking).status_code == 409

    r = client.post("/offerings", json={"workspace_id": office.other_desk, "user_id": office.owner, **_window(9, 10)})
    assert r.status_code == 201
    assert client.post("/bookings", json=booking).status_code == 201

    # Offering without assignment
    r = client.post("/offerings", json={"workspace_id": office.desk, "user_id": office.visitor, **_window(9, 10)})
    assert r.status_code == 409


def test_booking_validation_maps_to_400(client: TestClient, office: Office) -> None:
    r = client.post("/bookings", json={"workspace_id": office.desk, "user_id": office.visitor, **_window(10, 9)})
    assert r.status_code == 400
    r = client.post("/bookings", json={"workspace_id": office.desk, "user_id": office.visitor})
    assert r.status_code == 400
    r = client.post("/bookings", json={"workspace_id": "missing", "user_id": office.visitor, **_window(9, 10)})
    assert r.status_code == 404


def test_booking_update_and_cancel(client: TestClient, office: Office) -> None:
    booking = client.post(
        "/bookings", json={"workspace_id": office.desk, "user_id": office.visitor, **_window(9, 10)}
    ).json()

    r = client.patch(f"/bookings/{booking['id']}", json=_window(13, 14))
    assert r.status_code == 200
    assert r.json()["start_time"] == client.get(f"/bookings/{booking['id']}").json()["start_time"]

    r = client.delete(f"/bookings/{booking['id']}")
    assert r.status_code == 200
    assert r.json()["cancelled"] is True
    assert client.delete(f"/bookings/{booking['id']}").json()["cancelled"] is True

    r = client.patch(f"/bookings/{booking['id']}", json={"cancelled": False})
    assert r.status_code == 403
    assert client.get("/bookings/missing").status_code == 404


def test_booking_listing_filters_and_expanded(client: TestClient, office: Office) -> None:
    for workspace_id, user_id, window in (
        (office.desk, office.visitor, _window(9, 10)),
        (office.desk, office.colleague, _window(11, 12)),
        (office.other_desk, office.visitor, _window(9, 10)),
    ):
        client.post("/bookings", json={"workspace_id": workspace_id, "user_id": user_id, **window})

    assert len(client.get("/bookings").json()) == 3
    assert len(client.get("/bookings", params={"workspace_id": office.desk}).json()) == 2
    assert len(client.get("/bookings", params={"user_id": office.visitor}).json()) == 2
    assert len(
        client.get("/bookings", params={"workspace_id": office.desk, "user_id": office.visitor}).json()
    ) == 1
    in_range = client.get("/bookings", params={"start": at(10).isoformat(), "end": at(12).isoformat()}).json()
    assert [b["user_id"] for b in in_range] == [office.colleague]

    expanded = client.get("/bookings", params={"expanded": True, "user_id": office.colleague}).json()
    assert expanded[0]["workspace_name"] == "Desk A"
    assert expanded[0]["user_name"] == "Colin"
    assert expanded[0]["floor_name"] == "Level 1"

    one = client.get(f"/bookings/{expanded[0]['id']}", params={"expanded": True}).json()
    assert one == expanded[0]
    assert "workspace_name" not in client.get(f"/bookings/{one['id']}").json()

    assert client.get("/bookings", params={"start": at(10).isoformat()}).status_code == 400


def test_offering_cancel_keeps_booking(client: TestClient, any_store: DataStore, office: Office) -> None:
    assign(any_store, office.desk, office.owner, at(0), at(24))
    offering = client.post(
        "/offerings", json={"workspace_id": office.desk, "user_id": office.owner, **_window(9, 12)}
    ).json()
    booking = client.post(
        "/bookings", json={"workspace_id": office.desk, "user_id": office.visitor, **_window(9, 10)}
    ).json()

    r = client.delete(f"/offerings/{offering['id']}")
    assert r.status_code == 200
    assert r.json()["cancelled"] is True
    assert client.get(f"/bookings/{booking['id']}").json()["cancelled"] is False

    expanded = client.get("/offerings", params={"expanded": True}).json()
    assert expanded[0]["user_name"] == "Olive"


def test_floor_availability(client: TestClient, any_store: DataStore, office: Office) -> None:
    assign(any_store, office.desk, office.owner, at(0), at(24))
    params = {"start": at(9).isoformat(), "end": at(10).isoformat()}

    r = client.get(f"/floors/{office.floor_id}/availability", params=params)
    assert r.status_code == 200
    assert r.json()["workspace_ids"] == [office.other_desk]

    bad = {"start": at(10).isoformat(), "end": at(9).isoformat()}
    assert client.get(f"/floors/{office.floor_id}/availability", params=bad).status_code == 400
    assert client.get("/floors/missing/availability", params=params).status_code == 404


def test_directory_routes(client: TestClient, any_store: DataStore, office: Office) -> None:
    assignment = assign(any_store, office.desk, office.owner, at(0), at(10))

    users = client.get("/users").json()
    assert [u["name"] for u in users] == ["Colin", "Olive", "Vera"]
    assert client.get(f"/users/{office.owner}").json()["email"] == f"{office.owner}@example.com"
    assert client.get("/users/missing").status_code == 404

    assigned = client.get("/users/assigned", params={"at": at(5).isoformat()}).json()
    assert [(a["user_id"], a["assignment_id"]) for a in assigned] == [(office.owner, assignment.id)]
    assert client.get("/users/assigned").status_code == 400

    assignments = client.get("/assignments", params={"user_id": office.owner}).json()
    assert [a["id"] for a in assignments] == [assignment.id]
    assert client.get("/assignments", params={"workspace_id": office.other_desk}).json() == []


def test_post_workspace_with_taken_id_conflicts(client: TestClient, office: Office) -> None:
    assert client.delete(f"/workspaces/{office.other_desk}").status_code == 200

    for taken in (office.desk, office.other_desk):
        r = client.post("/workspaces", json={"id": taken, "name": "Dup", "floor_id": office.floor_id})
        assert r.status_code == 409
        assert taken in r.json()["detail"]

    assert client.get(f"/workspaces/{office.desk}").json()["name"] == "Desk A"
    assert client.get(f"/workspaces/{office.other_desk}").status_code == 404

    r = client.post("/workspaces", json={"id": "ws-3", "name": "Desk C", "floor_id": office.floor_id})
    assert r.status_code == 201
    assert r.json()["id"] == "ws-3"


def test_booking_that_misses_its_deadline_leaves_no_trace(
    any_store: DataStore, office: Office, monkeypatch: pytest.MonkeyPatch
) -> None:
    timed = FastAPI()
    timed.add_middleware(TimeoutMiddleware, timeout_seconds=0.2)
    register_error_handlers(timed)
    timed.include_router(booking_routes.router)
    _wire(timed, any_store)
    # Serve the patched store itself, the real get_store would build a fresh one on SQL
    timed.dependency_overrides[get_store] = lambda: any_store

    original_create = any_store.bookings.create
    write_finished = threading.Event()

    def slow_create(record):
        try:
            time.sleep(0.6)
            return original_create(record)
        finally:
            write_finished.set()

    monkeypatch.setattr(any_store.bookings, "create", slow_create)

    r = TestClient(timed).post(
        "/bookings", json={"workspace_id": office.desk, "user_id": office.visitor, **_window(9, 10)}
    )

    assert r.status_code == 504
    assert r.json() == {"detail": "Request timed out"}
    # The handler thread outlives the response, let it finish its attempt
    write_finished.wait(timeout=5)
    assert any_store.bookings.get_all() == []
