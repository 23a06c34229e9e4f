from __future__ import annotations

import pytest

from pulley_lab.rig.entities import EntityStore
from pulley_lab.rig.graph import ConnectionGraph
from pulley_lab.rig.resolver import atwood, build_pairs
from pulley_lab.rig.schema import EntityKind, PortRef, RigConfig


def hang(store, graph, x: float, mass_a: float, mass_b: float, kind=EntityKind.FIXED_PULLEY):
    pulley = store.place(kind, (x, 150))
    load_a = store.place(EntityKind.LOAD, (x - 30, 300), mass=mass_a)
    load_b = store.place(EntityKind.LOAD, (x + 30, 300), mass=mass_b)
    graph.connect(PortRef(entity_id=pulley.id, port="a"), PortRef(entity_id=load_a.id, port="c"))
    graph.connect(PortRef(entity_id=pulley.id, port="b"), PortRef(entity_id=load_b.id, port="c"))
    return pulley, load_a, load_b


def test_atwood_unequal_masses():
    a, tension, direction = atwood(1.0, 2.0, 9.8)
    assert a == pytest.approx(3.2667, abs=1e-4)
    assert tension == pytest.approx(13.0667, abs=1e-4)
    assert direction == 1


def test_atwood_equal_masses():
    a, tension, _ = atwood(5.0, 5.0, 9.8)
    assert a == 0.0
    assert tension == pytest.approx(49.0)


def test_build_pairs_single_pulley():
    store, graph = EntityStore(), ConnectionGraph()
    pulley, load_a, load_b = hang(store, graph, 300, 1.0, 2.0)
    (pair,) = build_pairs(store, graph)
    assert pair.pulley_id == pulley.id
    assert pair.load_a is load_a and pair.load_b is load_b
    assert pair.acceleration == pytest.approx(3.2667, abs=1e-4)
    assert pair.tension == pytest.approx(13.0667, abs=1e-4)
    assert pair.direction == 1


def test_heavier_a_side_flips_direction():
    store, graph = EntityStore(), ConnectionGraph()
    hang(store, graph, 300, 2.0, 1.0)
    (pair,) = build_pairs(store, graph)
    assert pair.direction == -1
    assert pair.acceleration == pytest.approx(3.2667, abs=1e-4)


def test_gravity_comes_from_config():
    store, graph = EntityStore(RigConfig(gravity_m_s2=1.62)), ConnectionGraph()
    hang(store, graph, 300, 1.0, 3.0)
    (pair,) = build_pairs(store, graph)
    assert pair.acceleration == pytest.approx(1.62 * 2 / 4)
    (pair,) = build_pairs(store, graph, gravity=9.8)
    assert pair.acceleration == pytest.approx(4.9)


def test_pulley_with_one_load_is_skipped():
    store, graph = EntityStore(), ConnectionGraph()
    pulley = store.place(EntityKind.FIXED_PULLEY, (300, 150))
    load = store.place(EntityKind.LOAD, (270, 300), mass=1)
    graph.connect(PortRef(entity_id=pulley.id, port="a"), PortRef(entity_id=load.id, port="c"))
    assert build_pairs(store, graph) == []


def test_movable_pulleys_never_form_pairs():
    store, graph = EntityStore(), ConnectionGraph()
    hang(store, graph, 300, 1.0, 2.0, kind=EntityKind.MOVABLE_PULLEY)
    assert build_pairs(store, graph) == []


def test_pairs_follow_pulley_creation_order():
    store, graph = EntityStore(), ConnectionGraph()
    first, _, _ = hang(store, graph, 200, 1.0, 2.0)
    second, _, _ = hang(store, graph, 500, 3.0, 1.0)
    assert [p.pulley_id for p in build_pairs(store, graph)] == [first.id, second.id]
