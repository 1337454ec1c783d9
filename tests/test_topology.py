from itertools import product

import pytest

from consolidation.cluster_state import Host
from consolidation.errors import InvalidInputError
from consolidation.topology import Topology, distance


def _host(host_id, rack, pod):
    return Host(host_id, rack, pod, 10, 10)


def test_same_host_is_zero_for_every_topology():
    host = _host(0, 0, 0)
    for topology in Topology:
        assert distance(host, host, topology) == 0.0


def test_same_rack_is_one_for_every_topology():
    a, b = _host(0, 3, 1), _host(1, 3, 1)
    for topology in Topology:
        assert distance(a, b, topology) == 1.0


def test_tree_cross_rack_goes_through_core():
    assert distance(_host(0, 0, 0), _host(1, 1, 0), Topology.TREE) == 20.0
    assert distance(_host(0, 0, 0), _host(1, 1, 1), Topology.TREE) == 20.0


def test_fat_tree_uses_pod():
    assert distance(_host(0, 0, 0), _host(1, 1, 0), Topology.FAT_TREE) == 5.0
    assert distance(_host(0, 0, 0), _host(1, 2, 1), Topology.FAT_TREE) == 20.0


def test_vl2_ignores_pod():
    assert distance(_host(0, 0, 0), _host(1, 1, 0), Topology.VL2) == 5.0
    assert distance(_host(0, 0, 0), _host(1, 2, 1), Topology.VL2) == 5.0


def test_distance_is_symmetric():
    hosts = [_host(0, 0, 0), _host(1, 0, 0), _host(2, 1, 0), _host(3, 2, 1)]
    for a, b, topology in product(hosts, hosts, Topology):
        assert distance(a, b, topology) == distance(b, a, topology)


@pytest.mark.parametrize('name, expected', [
    ('TREE', Topology.TREE),
    ('fat-tree', Topology.FAT_TREE),
    ('Fat_Tree', Topology.FAT_TREE),
    ('vl2', Topology.VL2),
    (Topology.VL2, Topology.VL2),
])
def test_from_name(name, expected):
    assert Topology.from_name(name) is expected


def test_from_name_rejects_unknown_topology():
    with pytest.raises(InvalidInputError):
        Topology.from_name('mesh')
