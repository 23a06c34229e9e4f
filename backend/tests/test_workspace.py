from pulley_lab.rig.schema import EntityKind, PortRef, SimulationState
from pulley_lab.rig.workspace import Rig


def make_running_rig():
  rig = Rig()
  pulley = rig.place(EntityKind.FIXED_PULLEY, (300, 150))
  load_a = rig.place(EntityKind.LOAD, (270, 300), mass=1)
  load_b = rig.place(EntityKind.LOAD, (330, 300), mass=2)
  rig.connect(PortRef(entity_id=pulley.id, port="a"), PortRef(entity_id=load_a.id, port="c"))
  rig.connect(PortRef(entity_id=pulley.id, port="b"), PortRef(entity_id=load_b.id, port="c"))
  assert rig.start_simulation()
  return rig, pulley, load_a, load_b


def test_connect_rejects_unknown_ports():
  rig = Rig()
  pulley = rig.place(EntityKind.FIXED_PULLEY, (300, 150))
  load = rig.place(EntityKind.LOAD, (270, 300), mass=1)
  assert rig.connect(PortRef(entity_id=pulley.id, port="c"), PortRef(entity_id=load.id, port="c")) is False
  assert rig.connect(PortRef(entity_id=pulley.id, port="a"), PortRef(entity_id=99, port="c")) is False
  assert len(rig.graph) == 0


def test_start_with_empty_rig_stays_idle():
  rig = Rig()
  assert rig.start_simulation() is False
  assert rig.state is SimulationState.IDLE


def test_editing_is_ignored_while_running():
  rig, pulley, load_a, _ = make_running_rig()
  assert rig.place(EntityKind.FIXED_PULLEY, (500, 150)) is None
  assert rig.move_to(pulley.id, (400, 200)) is None
  assert rig.rotate(pulley.id) is False
  assert rig.delete(load_a.id) is False
  assert rig.disconnect(PortRef(entity_id=pulley.id, port="a")) is False
  assert len(rig.store) == 3
  assert len(rig.graph) == 2
  assert pulley.position == (300.0, 150.0)


def test_editing_resumes_after_stop():
  rig, pulley, _, _ = make_running_rig()
  rig.stop_simulation()
  assert rig.rotate(pulley.id)
  assert pulley.rotation == 90
  assert rig.delete(pulley.id)
  assert len(rig.graph) == 0


def test_cascade_delete_frees_remote_ports():
  rig, pulley, load_a, load_b = make_running_rig()
  rig.stop_simulation()
  rig.delete(load_a.id)
  assert not rig.ports.is_used(pulley.id, "a")
  assert rig.ports.is_used(pulley.id, "b")
  assert all(not c.involves(load_a.id) for c in rig.graph.connections())
  rig.graph.validate_references(rig.store.ids())


def test_snapshot_contents():
  rig, pulley, load_a, _ = make_running_rig()
  rig.tick(0.1)
  snap = rig.snapshot()
  assert snap.state is SimulationState.RUNNING
  assert [e.id for e in snap.entities] == [1, 2, 3]
  pulley_view = snap.entities[0]
  assert pulley_view.kind is EntityKind.FIXED_PULLEY
  assert pulley_view.radius == 25.0
  assert [(p.name, p.used) for p in pulley_view.ports] == [("a", True), ("b", True)]
  load_view = snap.entities[1]
  assert load_view.mass_kg == 1.0
  assert load_view.velocity == load_a.velocity
  assert load_view.ports[0].position == (load_a.position[0] + 20, load_a.position[1] - 6)
  assert len(snap.connections) == 2
  assert snap.readout.pulley_id == pulley.id
  dumped = snap.model_dump(mode="json")
  assert dumped["state"] == "running"
  assert dumped["entities"][0]["kind"] == "fixed_pulley"
