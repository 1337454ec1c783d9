import numpy as np
import pytest

from consolidation.cluster_state import VM, Host
from consolidation.errors import InvalidInputError
from consolidation.partitioning import (can_migrate_all, cluster_vms, merge_smallest, partition_demand,
                                        partition_vms, supernode_threshold)


def _ids(partitions):
    return {frozenset(vm.id for vm in p) for p in partitions}


def test_threshold_is_taken_at_percentile_index():
    values = [float(v) for v in range(10, 0, -1)]
    assert supernode_threshold(values, 0.9) == 10.0
    assert supernode_threshold(values, 0.5) == 6.0
    assert supernode_threshold(values, 0.0) == 1.0


def test_threshold_clamps_at_full_percentile():
    assert supernode_threshold([3.0, 1.0, 2.0], 1.0) == 3.0


def test_threshold_without_values():
    assert supernode_threshold([], 0.9) == 0.0


@pytest.mark.parametrize('percentile', [-0.1, 1.5])
def test_percentile_out_of_range_is_rejected(percentile):
    with pytest.raises(InvalidInputError):
        supernode_threshold([1.0], percentile)


def test_high_traffic_trio_stays_together(traffic_matrix):
    vms = [VM(i, 1, 1) for i in range(6)]
    pairs = {(a, b): 0.5 for a in range(6) for b in range(a + 1, 6)}
    pairs.update({(0, 2): 100.0, (0, 4): 90.0, (2, 4): 80.0})
    traffic = traffic_matrix(6, pairs)

    partitions = partition_vms(vms, traffic, 2, 0.9)

    assert len(partitions) == 2
    assert _ids(partitions) == {frozenset({0, 2, 4}), frozenset({1, 3, 5})}


def test_components_before_merge(traffic_matrix):
    vms = [VM(i, 1, 1) for i in range(4)]
    traffic = traffic_matrix(4, {(0, 1): 50.0, (2, 3): 1.0, (0, 2): 1.0})

    clusters = cluster_vms(vms, traffic, 0.9)

    assert [[vm.id for vm in c] for c in clusters] == [[0, 1], [2], [3]]


def test_uniform_traffic_forms_one_partition():
    vms = [VM(i, 1, 1) for i in range(5)]
    partitions = partition_vms(vms, np.zeros((5, 5)), 2, 0.9)
    assert _ids(partitions) == {frozenset(range(5))}


def test_single_vm_is_its_own_partition():
    vm = VM(3, 2, 2)
    assert partition_vms([vm], np.zeros((4, 4)), 2, 0.9) == [[vm]]


def test_no_vms_no_partitions():
    assert partition_vms([], np.zeros((1, 1)), 2, 0.9) == []


def test_merge_joins_the_two_smallest_each_round():
    clusters = [['a'], ['b', 'c', 'd'], ['e'], ['f', 'g']]
    merged = merge_smallest(clusters, 2)
    assert sorted(sorted(c) for c in merged) == [['a', 'e', 'f', 'g'], ['b', 'c', 'd']]
    assert merge_smallest(clusters, 5) == clusters


def test_partition_demand():
    assert partition_demand([VM(0, 2, 3), VM(1, 4, 5)]) == (6, 8)


def test_can_migrate_all_excludes_candidate():
    hosts = [Host(0, 0, 0, 10, 10), Host(1, 0, 0, 10, 10)]
    hosts[1].remaining_ram = 3
    hosts[1].remaining_mips = 3
    small = [VM(0, 2, 2)]
    large = [VM(1, 4, 4)]

    assert can_migrate_all([small], hosts, exclude_host_id=0)
    assert not can_migrate_all([small, large], hosts, exclude_host_id=0)
    assert can_migrate_all([small, large], hosts, exclude_host_id=1)
