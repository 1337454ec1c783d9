import numpy as np
import pytest

from consolidation.errors import InvalidInputError
from consolidation.workload import (create_clustered_traffic_matrix, create_host_list, create_traffic_matrix,
                                    create_vm_list)


def test_hosts_are_dealt_over_racks_and_pods():
    hosts = create_host_list(16)

    assert [h.id for h in hosts] == list(range(16))
    assert [h.rack_id for h in hosts] == [i % 4 for i in range(16)]
    assert [h.pod_id for h in hosts] == [(i % 4) // 2 for i in range(16)]
    assert all(h.remaining_ram == 64000 and h.remaining_mips == 40000 for h in hosts)


def test_small_host_lists_share_one_rack():
    hosts = create_host_list(3)
    assert {h.rack_id for h in hosts} == {0}
    assert {h.pod_id for h in hosts} == {0}


def test_vm_demands_stay_in_range_and_are_seeded():
    vms = create_vm_list(50, seed=7, ram_range=(100, 200), mips_range=(10, 20))

    assert [vm.id for vm in vms] == list(range(50))
    assert all(100 <= vm.ram < 200 for vm in vms)
    assert all(10 <= vm.mips < 20 for vm in vms)
    assert vms == create_vm_list(50, seed=7, ram_range=(100, 200), mips_range=(10, 20))
    assert vms != create_vm_list(50, seed=8, ram_range=(100, 200), mips_range=(10, 20))


def test_negative_counts_are_rejected():
    with pytest.raises(InvalidInputError):
        create_host_list(-1)
    with pytest.raises(InvalidInputError):
        create_vm_list(-1)


def test_uniform_traffic_is_light_with_a_heavy_tail():
    matrix = create_traffic_matrix(30, seed=3)

    assert matrix.shape == (30, 30)
    assert np.array_equal(matrix, matrix.T)
    assert np.all(np.diagonal(matrix) == 0)
    upper = matrix[np.triu_indices(30, k=1)]
    assert np.all(((upper >= 0) & (upper < 5)) | ((upper >= 85) & (upper < 100)))
    assert np.array_equal(matrix, create_traffic_matrix(30, seed=3))


def test_clustered_traffic_separates_groups():
    matrix = create_clustered_traffic_matrix(12, groups=3, seed=4)

    assert np.array_equal(matrix, matrix.T)
    for i in range(12):
        for j in range(12):
            if i == j:
                assert matrix[i, j] == 0
            elif i % 3 == j % 3:
                assert 100 <= matrix[i, j] < 200
            else:
                assert 0 <= matrix[i, j] < 5


def test_clustered_traffic_needs_a_group():
    with pytest.raises(InvalidInputError):
        create_clustered_traffic_matrix(4, groups=0)
