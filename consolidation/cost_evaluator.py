import logging
from itertools import combinations

import numpy as np

from consolidation.errors import InvalidInputError
from consolidation.topology import Topology, distance

logger = logging.getLogger('tacs')


def validate_traffic_matrix(traffic):
    """
    Check the traffic matrix is square, symmetric, non-negative with a zero diagonal.
    Returns it as a float ndarray.
    """
    matrix = np.asarray(traffic, dtype=float)
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise InvalidInputError(f"Traffic matrix must be square, got shape {matrix.shape}")
    if not np.all(np.isfinite(matrix)):
        raise InvalidInputError("Traffic matrix contains non-finite values")
    if np.any(matrix < 0):
        raise InvalidInputError("Traffic matrix contains negative values")
    if np.any(np.diagonal(matrix) != 0):
        raise InvalidInputError("Traffic matrix diagonal must be zero")
    if not np.allclose(matrix, matrix.T):
        raise InvalidInputError("Traffic matrix must be symmetric")
    return matrix


def active_host_count(placement):
    """Number of distinct hosts referenced by the placement."""
    return len({host.id for host in placement.values()})


class CostEvaluator:
    """Traffic-weighted distance cost of placements under one topology."""

    def __init__(self, traffic, topology=Topology.TREE):
        self.traffic = validate_traffic_matrix(traffic)
        self.topology = Topology.from_name(topology)

    @property
    def vm_capacity(self):
        return self.traffic.shape[0]

    def check_vms(self, vms):
        seen = set()
        for vm in vms:
            if vm.id in seen:
                raise InvalidInputError(f"VM id {vm.id} appears more than once")
            seen.add(vm.id)
            if not 0 <= vm.id < self.vm_capacity:
                raise InvalidInputError(
                    f"VM id {vm.id} is outside the traffic matrix (dimension {self.vm_capacity})"
                )

    def total_cost(self, placement):
        """Sum over unordered VM pairs of traffic(a, b) * distance(host(a), host(b))."""
        total = 0.0
        for (vm_a, host_a), (vm_b, host_b) in combinations(placement.items(), 2):
            volume = self.traffic[vm_a.id, vm_b.id]
            if volume:
                total += volume * distance(host_a, host_b, self.topology)
        return float(total)

    def active_host_count(self, placement):
        return active_host_count(placement)

    def partition_cost(self, partition, destination, placement):
        """
        Cost of landing every VM of the partition on destination, against all VMs
        outside the partition at their current hosts. VMs inside the partition end
        up together and contribute nothing.
        """
        members = {vm.id for vm in partition}
        cost = 0.0
        for vm in partition:
            for other, other_host in placement.items():
                if other.id in members:
                    continue
                volume = self.traffic[vm.id, other.id]
                if volume:
                    cost += volume * distance(destination, other_host, self.topology)
        return float(cost)
