import logging
from itertools import combinations

import networkx as nx

from consolidation.errors import InvalidInputError

logger = logging.getLogger('tacs')


def check_percentile(percentile):
    if not 0.0 <= percentile <= 1.0:
        raise InvalidInputError(f"Supernode percentile must be within [0, 1], got {percentile}")
    return percentile


def supernode_threshold(values, percentile):
    """
    Traffic value at the given percentile of the ascending-sorted values,
    taken at index int(count * percentile) and clamped to the last element.
    """
    check_percentile(percentile)
    if not values:
        return 0.0
    ordered = sorted(values)
    index = min(int(len(ordered) * percentile), len(ordered) - 1)
    return ordered[index]


def build_traffic_graph(vms, traffic, percentile):
    """
    Threshold graph over the VMs: one node per VM (keyed by position) and an
    edge wherever pairwise traffic is at or above the supernode threshold.
    """
    graph = nx.Graph()
    graph.add_nodes_from(range(len(vms)))

    pairs = list(combinations(range(len(vms)), 2))
    if not pairs:
        return graph, None

    volumes = [traffic[vms[i].id, vms[j].id] for i, j in pairs]
    threshold = supernode_threshold(volumes, percentile)
    graph.add_edges_from(pair for pair, volume in zip(pairs, volumes) if volume >= threshold)
    return graph, threshold


def cluster_vms(vms, traffic, percentile):
    """Connected components of the threshold graph, each in original VM order."""
    vms = list(vms)
    graph, threshold = build_traffic_graph(vms, traffic, percentile)
    clusters = [[vms[i] for i in sorted(component)] for component in nx.connected_components(graph)]
    logger.debug(f"[Partitioning] {len(vms)} VMs, threshold {threshold}, {len(clusters)} clusters: "
                 f"{[[vm.id for vm in c] for c in clusters]}")
    return clusters


def merge_smallest(clusters, k):
    """Merge the two smallest clusters until no more than k remain."""
    clusters = [list(c) for c in clusters]
    while len(clusters) > k:
        clusters.sort(key=len)
        first = clusters.pop(0)
        second = clusters.pop(0)
        clusters.append(first + second)
    return clusters


def partition_vms(vms, traffic, k, percentile):
    """
    Split VMs into at most k partitions of strongly communicating VMs.
    Fewer than k partitions come back when the threshold graph has fewer components.
    """
    if k < 1:
        raise InvalidInputError(f"Partition count k must be at least 1, got {k}")
    if not vms:
        return []
    return merge_smallest(cluster_vms(vms, traffic, percentile), k)


def partition_demand(partition):
    return sum(vm.ram for vm in partition), sum(vm.mips for vm in partition)


def can_migrate_all(partitions, hosts, exclude_host_id):
    """
    True when every partition, taken on its own, fits whole on at least one
    host other than the excluded one.
    """
    for partition in partitions:
        ram, mips = partition_demand(partition)
        if not any(h.id != exclude_host_id and h.fits(ram, mips) for h in hosts):
            logger.debug(f"[Partitioning] Partition {[vm.id for vm in partition]} (ram={ram}, mips={mips}) "
                         f"fits on no host other than {exclude_host_id}.")
            return False
    return True
