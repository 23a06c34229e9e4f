from fastapi.testclient import TestClient

from pulley_lab.main import app


client = TestClient(app)


def _create_rig() -> str:
    r = client.post("/rigs")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "applied"
    assert data["snapshot"]["entities"] == []
    return data["rig_id"]


def _place(rig_id: str, kind: str, position, mass=None) -> dict:
    body = {"kind": kind, "position": list(position)}
    if mass is not None:
        body["mass_kg"] = mass
    r = client.post(f"/rigs/{rig_id}/entities", json=body)
    assert r.status_code == 200
    return r.json()


def _build_atwood(rig_id: str) -> tuple[int, int, int]:
    pulley = _place(rig_id, "fixed_pulley", (300, 150))["entity_id"]
    load_a = _place(rig_id, "load", (270, 300), mass=1)["entity_id"]
    load_b = _place(rig_id, "load", (330, 300), mass="2")["entity_id"]
    for side, load in (("a", load_a), ("b", load_b)):
        r = client.post(f"/rigs/{rig_id}/connections", json={
            "from_port": {"entity_id": pulley, "port": side},
            "to_port": {"entity_id": load, "port": "c"},
        })
        assert r.json()["status"] == "applied"
    return pulley, load_a, load_b


def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_unknown_rig_is_404():
    r = client.get("/rigs/does-not-exist")
    assert r.status_code == 404


def test_invalid_mass_is_ignored():
    rig_id = _create_rig()
    data = _place(rig_id, "load", (270, 300), mass="heavy")
    assert data["status"] == "ignored"
    assert data["entity_id"] is None
    assert data["snapshot"]["entities"] == []


def test_unknown_kind_is_rejected_by_validation():
    rig_id = _create_rig()
    r = client.post(f"/rigs/{rig_id}/entities", json={"kind": "spring", "position": [300, 150]})
    assert r.status_code == 422


def test_used_port_connection_is_ignored():
    rig_id = _create_rig()
    pulley, load_a, load_b = _build_atwood(rig_id)
    r = client.post(f"/rigs/{rig_id}/connections", json={
        "from_port": {"entity_id": pulley, "port": "a"},
        "to_port": {"entity_id": load_b, "port": "c"},
    })
    assert r.json()["status"] == "ignored"
    assert len(r.json()["snapshot"]["connections"]) == 2


def test_simulation_lifecycle():
    rig_id = _create_rig()
    pulley, _, load_b = _build_atwood(rig_id)

    r = client.post(f"/rigs/{rig_id}/simulation/start")
    assert r.json()["status"] == "applied"
    assert r.json()["snapshot"]["state"] == "running"
    assert client.post(f"/rigs/{rig_id}/simulation/start").json()["status"] == "ignored"

    # editing is locked while running
    r = client.delete(f"/rigs/{rig_id}/entities/{pulley}")
    assert r.json()["status"] == "ignored"

    r = client.post(f"/rigs/{rig_id}/simulation/tick", json={"dt_s": 0.1})
    snap = r.json()["snapshot"]
    readout = snap["readout"]
    assert readout["pulley_id"] == pulley
    assert abs(readout["acceleration_m_s2"] - 3.2667) < 1e-3
    assert abs(readout["tension_n"] - 13.0667) < 1e-3
    b_view = next(e for e in snap["entities"] if e["id"] == load_b)
    assert b_view["velocity"] > 0
    assert b_view["position"][1] > 280

    r = client.post(f"/rigs/{rig_id}/simulation/stop")
    assert r.json()["status"] == "applied"
    assert r.json()["snapshot"]["state"] == "idle"

    r = client.delete(f"/rigs/{rig_id}/entities/{pulley}")
    assert r.json()["status"] == "applied"
    assert r.json()["snapshot"]["connections"] == []


def test_start_without_pairs_stays_idle():
    rig_id = _create_rig()
    _place(rig_id, "fixed_pulley", (300, 150))
    r = client.post(f"/rigs/{rig_id}/simulation/start")
    assert r.json()["status"] == "ignored"
    assert r.json()["snapshot"]["state"] == "idle"


def test_move_rotate_disconnect():
    rig_id = _create_rig()
    pulley, load_a, _ = _build_atwood(rig_id)

    r = client.post(f"/rigs/{rig_id}/entities/{load_a}/move", json={"position": [1000, 1000]})
    view = next(e for e in r.json()["snapshot"]["entities"] if e["id"] == load_a)
    assert view["position"] == [660.0, 480.0]

    r = client.post(f"/rigs/{rig_id}/entities/{pulley}/rotate", json={})
    view = next(e for e in r.json()["snapshot"]["entities"] if e["id"] == pulley)
    assert view["rotation"] == 90.0

    r = client.post(f"/rigs/{rig_id}/connections/disconnect", json={"entity_id": load_a, "port": "c"})
    assert r.json()["status"] == "applied"
    assert len(r.json()["snapshot"]["connections"]) == 1


def test_preview_endpoint():
    rig_id = _create_rig()
    _, _, load_b = _build_atwood(rig_id)
    r = client.post(f"/rigs/{rig_id}/preview", json={"dt_s": 0.02, "duration_s": 0.2})
    assert r.status_code == 200
    data = r.json()
    assert len(data["frames"]) == 11
    assert str(load_b) in data["frames"][-1]["positions"]
    assert client.get(f"/rigs/{rig_id}").json()["state"] == "idle"


def test_delete_rig():
    rig_id = _create_rig()
    assert client.delete(f"/rigs/{rig_id}").json()["status"] == "deleted"
    assert client.get(f"/rigs/{rig_id}").status_code == 404


def test_list_rigs_includes_created_rig():
    rig_id = _create_rig()
    _place(rig_id, "fixed_pulley", (300, 150))
    r = client.get("/rigs")
    assert r.status_code == 200
    summary = next(s for s in r.json() if s["rig_id"] == rig_id)
    assert summary["state"] == "idle"
    assert summary["entity_count"] == 1


def test_move_to_non_finite_position_leaves_entity_in_place():
    rig_id = _create_rig()
    pulley = _place(rig_id, "fixed_pulley", (300, 150))["entity_id"]
    r = client.post(f"/rigs/{rig_id}/entities/{pulley}/move", json={"position": ["NaN", 300]})
    assert r.status_code == 200
    assert r.json()["status"] == "ignored"
    view = next(e for e in client.get(f"/rigs/{rig_id}").json()["entities"] if e["id"] == pulley)
    assert view["position"] == [300.0, 150.0]
