import numpy as np
import pytest

from consolidation.cluster_state import ClusterState, Host


@pytest.fixture
def make_state():
    """Build a ClusterState from (rack_id, pod_id, ram, mips) tuples; host ids follow list order."""
    def _make(specs):
        return ClusterState([Host(i, rack, pod, ram, mips) for i, (rack, pod, ram, mips) in enumerate(specs)])
    return _make


@pytest.fixture
def traffic_matrix():
    """Symmetric n x n matrix from a {(i, j): volume} dict."""
    def _make(n, pairs=None):
        matrix = np.zeros((n, n))
        for (i, j), volume in (pairs or {}).items():
            matrix[i, j] = matrix[j, i] = volume
        return matrix
    return _make


@pytest.fixture
def check_capacity():
    """Assert every host's counters match the VMs placed on it and never exceed its totals."""
    def _check(cluster_state):
        placement = cluster_state.placement
        for host in cluster_state.hosts:
            resident = [vm for vm, h in placement.items() if h.id == host.id]
            used_ram = sum(vm.ram for vm in resident)
            used_mips = sum(vm.mips for vm in resident)
            assert used_ram <= host.total_ram
            assert used_mips <= host.total_mips
            assert host.remaining_ram == host.total_ram - used_ram
            assert host.remaining_mips == host.total_mips - used_mips
    return _check
