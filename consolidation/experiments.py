import logging
from collections import namedtuple

from consolidation.cluster_state import ClusterState, copy_hosts
from consolidation.cost_evaluator import CostEvaluator
from consolidation.migration_planner import TrafficAwareConsolidator
from consolidation.placement import FirstFitDecreasingPlacer
from consolidation.sercon import SerconConsolidator
from consolidation.topology import Topology
from consolidation.workload import (create_clustered_traffic_matrix, create_host_list, create_traffic_matrix,
                                    create_vm_list)

logger = logging.getLogger('tacs')

Workload = namedtuple('Workload', ['hosts', 'vms', 'traffic'])

DEFAULT_SCALES = ((20, 60), (40, 120), (60, 180))
DEFAULT_PERCENTILES = (0.70, 0.85, 0.95)
ALGORITHMS = ('FFD', 'Sercon', 'Proposed')


def percent_change(base, value):
    """Relative change of value against base, in percent. 0.0 when base is 0."""
    if base == 0:
        return 0.0
    return (value - base) / base * 100.0


def reduction_percent(base, value):
    """How much lower value is than base, in percent. 0.0 when base is 0."""
    if base == 0:
        return 0.0
    return (base - value) / base * 100.0


def build_workload(config, host_count=None, vm_count=None):
    host_count = config.get_host_count() if host_count is None else host_count
    vm_count = config.get_vm_count() if vm_count is None else vm_count
    host_ram, host_mips = config.get_host_capacity()
    hosts_per_rack, racks_per_pod = config.get_rack_layout()

    hosts = create_host_list(host_count, host_ram, host_mips, hosts_per_rack, racks_per_pod)
    vms = create_vm_list(vm_count, config.get_vm_seed(), config.get_vm_ram_range(), config.get_vm_mips_range())
    groups = config.get_traffic_groups()
    if groups > 0:
        traffic = create_clustered_traffic_matrix(vm_count, groups, config.get_traffic_seed())
    else:
        traffic = create_traffic_matrix(vm_count, config.get_traffic_seed())
    return Workload(hosts, vms, traffic)


def run_placer(algorithm, workload, topology, supernode_percentile, max_release_attempts):
    """Run one algorithm on its own copy of the workload's hosts and score the result."""
    cluster_state = ClusterState(copy_hosts(workload.hosts))
    if algorithm == 'FFD':
        placer = FirstFitDecreasingPlacer(cluster_state)
    elif algorithm == 'Sercon':
        placer = SerconConsolidator(cluster_state)
    elif algorithm == 'Proposed':
        placer = TrafficAwareConsolidator(cluster_state, workload.traffic, topology,
                                          supernode_percentile, max_release_attempts)
    else:
        raise ValueError(f"Unknown algorithm '{algorithm}'. Expected one of: {', '.join(ALGORITHMS)}")

    placement = placer.place(workload.vms)
    evaluator = CostEvaluator(workload.traffic, topology)
    return {
        'algorithm': algorithm,
        'traffic': evaluator.total_cost(placement),
        'active_hosts': evaluator.active_host_count(placement),
        'unplaced': len(placer.unplaced),
    }


def run_algorithm_comparison(config):
    topology = Topology.from_name(config.get_topology())
    workload = build_workload(config)
    logger.info(f"[Experiments] === Algorithm comparison (Host {len(workload.hosts)} / VM {len(workload.vms)}, "
                f"{topology.name}) ===")

    results = [run_placer(algorithm, workload, topology, config.get_supernode_percentile(),
                          config.get_max_release_attempts())
               for algorithm in ALGORITHMS]

    proposed = results[-1]['traffic']
    for row in results:
        row['proposed_reduction'] = reduction_percent(row['traffic'], proposed)

    header = f"{'Algorithm':<10} | {'Traffic Cost':>14} | {'Active Hosts':>12} | {'Proposed Reduction':>18}"
    logger.info(header)
    logger.info("-" * len(header))
    for row in results:
        logger.info(f"{row['algorithm']:<10} | {row['traffic']:>14.2f} | {row['active_hosts']:>12d} | "
                    f"{row['proposed_reduction']:>17.2f}%")
    return results


def run_vm_scaling(config, scales=DEFAULT_SCALES):
    topology = Topology.from_name(config.get_topology())
    percentile = config.get_supernode_percentile()
    logger.info(f"[Experiments] === VM scaling (Proposed, {topology.name}, percentile {percentile:.2f}) ===")

    results = []
    for host_count, vm_count in scales:
        workload = build_workload(config, host_count, vm_count)
        row = run_placer('Proposed', workload, topology, percentile, config.get_max_release_attempts())
        row.update({'hosts': host_count, 'vms': vm_count})
        results.append(row)

    base = results[0]['traffic'] if results else 0.0
    header = f"{'Host/VM':<11} | {'Traffic Cost':>14} | {'Active Hosts':>12} | {'Change vs First':>15}"
    logger.info(header)
    logger.info("-" * len(header))
    for row in results:
        row['change'] = percent_change(base, row['traffic'])
        logger.info(f"{row['hosts']:>3} / {row['vms']:<5} | {row['traffic']:>14.2f} | {row['active_hosts']:>12d} | "
                    f"{row['change']:>14.2f}%")
    return results


def run_supernode_percentile(config, percentiles=DEFAULT_PERCENTILES):
    topology = Topology.from_name(config.get_topology())
    workload = build_workload(config)
    logger.info(f"[Experiments] === Supernode percentile (Proposed, Host {len(workload.hosts)} / "
                f"VM {len(workload.vms)}, {topology.name}) ===")

    results = []
    for percentile in percentiles:
        row = run_placer('Proposed', workload, topology, percentile, config.get_max_release_attempts())
        row['percentile'] = percentile
        results.append(row)

    base = results[0]['traffic'] if results else 0.0
    header = f"{'Percentile':<10} | {'Traffic Cost':>14} | {'Reduction vs First':>18}"
    logger.info(header)
    logger.info("-" * len(header))
    for row in results:
        row['reduction'] = reduction_percent(base, row['traffic'])
        logger.info(f"{row['percentile']:<10.2f} | {row['traffic']:>14.2f} | {row['reduction']:>17.2f}%")
    return results


def run_topology_comparison(config, topologies=tuple(Topology)):
    workload = build_workload(config)
    percentile = config.get_supernode_percentile()
    logger.info(f"[Experiments] === Topology comparison (Proposed, percentile {percentile:.2f}) ===")

    results = []
    for topology in topologies:
        row = run_placer('Proposed', workload, topology, percentile, config.get_max_release_attempts())
        row['topology'] = topology.name
        results.append(row)

    base = results[0]['traffic'] if results else 0.0
    header = f"{'Topology':<8} | {'Traffic Cost':>14} | {'Reduction vs First':>18}"
    logger.info(header)
    logger.info("-" * len(header))
    for row in results:
        row['reduction'] = reduction_percent(base, row['traffic'])
        logger.info(f"{row['topology']:<8} | {row['traffic']:>14.2f} | {row['reduction']:>17.2f}%")
    return results


EXPERIMENTS = {
    'algorithms': run_algorithm_comparison,
    'scaling': run_vm_scaling,
    'percentile': run_supernode_percentile,
    'topology': run_topology_comparison,
}


def run_experiments(config, names=None):
    """Run the named experiments in order (all of them by default). Returns {name: results}."""
    names = list(EXPERIMENTS) if names is None else names
    outcome = {}
    for name in names:
        outcome[name] = EXPERIMENTS[name](config)
    return outcome
