"""
Synthetic workloads: host lists laid out in racks and pods, VMs with random
demands, and pairwise traffic matrices. All randomness is seeded so the same
parameters always rebuild the same workload.
"""
import logging

import numpy as np

from consolidation.cluster_state import VM, Host
from consolidation.errors import InvalidInputError

logger = logging.getLogger('tacs')

DEFAULT_HOST_RAM = 64_000
DEFAULT_HOST_MIPS = 40_000

LOW_TRAFFIC_PROBABILITY = 0.7


def create_host_list(count, total_ram=DEFAULT_HOST_RAM, total_mips=DEFAULT_HOST_MIPS,
                     hosts_per_rack=4, racks_per_pod=2):
    """
    Hosts are dealt round-robin over the racks (host i sits in rack i % racks),
    and consecutive racks are grouped into pods.
    """
    if count < 0:
        raise InvalidInputError(f"Host count must be non-negative, got {count}")
    racks = max(1, count // hosts_per_rack)
    pods = max(1, racks // racks_per_pod)
    racks_in_pod = max(1, racks // pods)

    hosts = []
    for i in range(count):
        rack_id = i % racks
        hosts.append(Host(i, rack_id, rack_id // racks_in_pod, total_ram, total_mips))
    logger.debug(f"[Workload] Created {count} hosts in {racks} racks and {pods} pods.")
    return hosts


def create_vm_list(count, seed=1, ram_range=(1_000, 8_000), mips_range=(1_000, 6_000)):
    """VMs with integer demands drawn uniformly from [low, high)."""
    if count < 0:
        raise InvalidInputError(f"VM count must be non-negative, got {count}")
    rng = np.random.default_rng(seed)
    vms = []
    for i in range(count):
        ram = int(rng.integers(ram_range[0], ram_range[1]))
        mips = int(rng.integers(mips_range[0], mips_range[1]))
        vms.append(VM(i, ram, mips))
    return vms


def create_traffic_matrix(n, seed=2):
    """
    Mostly light traffic with a heavy tail: each pair draws p ~ U[0, 1) and gets
    p * 5 when p < 0.7, otherwise 50 + p * 50.
    """
    rng = np.random.default_rng(seed)
    matrix = np.zeros((n, n))
    for i in range(n):
        for j in range(i + 1, n):
            p = rng.random()
            value = p * 5 if p < LOW_TRAFFIC_PROBABILITY else 50 + p * 50
            matrix[i, j] = matrix[j, i] = value
    return matrix


def create_clustered_traffic_matrix(n, groups, seed=2):
    """VM i belongs to group i % groups. Same-group pairs talk heavily (100-200), others barely (0-5)."""
    if groups < 1:
        raise InvalidInputError(f"Group count must be at least 1, got {groups}")
    rng = np.random.default_rng(seed)
    group_of = np.arange(n) % groups
    matrix = np.zeros((n, n))
    for i in range(n):
        for j in range(i + 1, n):
            if group_of[i] == group_of[j]:
                value = 100 + rng.random() * 100
            else:
                value = rng.random() * 5
            matrix[i, j] = matrix[j, i] = value
    return matrix
