import logging

from consolidation.cost_evaluator import CostEvaluator
from consolidation.errors import InvalidInputError
from consolidation.load_evaluator import LoadEvaluator
from consolidation.partitioning import can_migrate_all, check_percentile, partition_demand, partition_vms
from consolidation.placement import FirstFitDecreasingPlacer
from consolidation.topology import Topology

logger = logging.getLogger('tacs')

DEFAULT_SUPERNODE_PERCENTILE = 0.85
DEFAULT_MAX_RELEASE_ATTEMPTS = 3
INITIAL_PARTITION_COUNT = 2


class TrafficAwareConsolidator:
    """
    Traffic-aware consolidation ("Proposed").

    Starts from an FFD placement and then, for a bounded number of attempts,
    picks the untried host with the best release score, splits its VMs into
    traffic clusters, and moves each cluster as a unit to the destination that
    minimises traffic cost. Each attempt runs on a cloned ledger and is
    committed only if it strictly lowers the total traffic cost.
    """

    name = 'Proposed'

    def __init__(self, cluster_state, traffic, topology=Topology.TREE,
                 supernode_percentile=DEFAULT_SUPERNODE_PERCENTILE,
                 max_release_attempts=DEFAULT_MAX_RELEASE_ATTEMPTS):
        if max_release_attempts < 0:
            raise InvalidInputError(f"max_release_attempts must be non-negative, got {max_release_attempts}")
        self.cluster_state = cluster_state
        self.cost_evaluator = CostEvaluator(traffic, topology)
        self.supernode_percentile = check_percentile(supernode_percentile)
        self.max_release_attempts = int(max_release_attempts)
        self.unplaced = []
        self.release_log = []
        self.cost_history = []

    @property
    def traffic(self):
        return self.cost_evaluator.traffic

    def _select_release_candidate(self, tried_host_ids):
        best_score = -1.0
        best_host = None
        for host in self.cluster_state.hosts:
            if host.id in tried_host_ids:
                continue
            score = LoadEvaluator.release_score(host)
            logger.debug(f"[Proposed] Host {host.id} release score {score:.4f}")
            if score > best_score:
                best_score = score
                best_host = host
        return best_host

    def _plan_partitions(self, resident_vms, candidate_id):
        """
        Grow k from 2 until every partition fits on some other host.
        Returns None once k passes the number of resident VMs.
        """
        k = INITIAL_PARTITION_COUNT
        while True:
            partitions = partition_vms(resident_vms, self.traffic, k, self.supernode_percentile)
            if can_migrate_all(partitions, self.cluster_state.hosts, candidate_id):
                logger.debug(f"[Proposed] Host {candidate_id}: feasible split into {len(partitions)} partitions (k={k}).")
                return partitions
            k += 1
            if k > len(resident_vms):
                return None

    def _find_cheapest_destination(self, snapshot, partition, exclude_host_id):
        ram, mips = partition_demand(partition)
        placement = snapshot.placement
        best_host = None
        best_cost = float('inf')
        for host in snapshot.hosts:
            if host.id == exclude_host_id or not host.fits(ram, mips):
                continue
            cost = self.cost_evaluator.partition_cost(partition, host, placement)
            if cost < best_cost:
                best_cost = cost
                best_host = host
        return best_host, best_cost

    def _migrate_partitions(self, snapshot, partitions, candidate_id):
        """
        Move each partition as one unit inside the snapshot.
        Returns False if some partition no longer fits anywhere.
        """
        for partition in partitions:
            destination, cost = self._find_cheapest_destination(snapshot, partition, candidate_id)
            if destination is None:
                logger.warning(f"[Proposed] Partition {[vm.id for vm in partition]} of host {candidate_id} "
                               f"has no destination left in simulation.")
                return False
            logger.debug(f"[Proposed] Partition {[vm.id for vm in partition]} -> host {destination.id} (cost {cost:.2f}).")
            for vm in partition:
                snapshot.migrate(vm, destination)
        return True

    def _record(self, host_id, outcome, partitions=None, cost_before=None, cost_after=None):
        self.release_log.append({
            'host': host_id,
            'outcome': outcome,
            'partitions': [[vm.id for vm in p] for p in partitions] if partitions else [],
            'cost_before': cost_before,
            'cost_after': cost_after,
        })

    def place(self, vms):
        self.cost_evaluator.check_vms(vms)
        self.release_log = []

        seeder = FirstFitDecreasingPlacer(self.cluster_state)
        seeder.place(vms)
        self.unplaced = list(seeder.unplaced)

        current_cost = self.cost_evaluator.total_cost(self.cluster_state.placement)
        self.cost_history = [current_cost]
        logger.info(f"[Proposed] Initial traffic cost {current_cost:.2f} on "
                    f"{self.cost_evaluator.active_host_count(self.cluster_state.placement)} active hosts.")

        tried_host_ids = set()
        for attempt in range(1, self.max_release_attempts + 1):
            candidate = self._select_release_candidate(tried_host_ids)
            if candidate is None:
                logger.info("[Proposed] No untried host left. Stopping.")
                break
            tried_host_ids.add(candidate.id)

            resident_vms = self.cluster_state.get_vms_on_host(candidate.id)
            if not resident_vms:
                logger.debug(f"[Proposed] Attempt {attempt}: host {candidate.id} is already empty.")
                self._record(candidate.id, 'empty', cost_before=current_cost, cost_after=current_cost)
                self.cost_history.append(current_cost)
                continue

            partitions = self._plan_partitions(resident_vms, candidate.id)
            if partitions is None:
                logger.warning(f"[Proposed] Host {candidate.id} cannot be fully released (capacity constraint).")
                self._record(candidate.id, 'abandoned', cost_before=current_cost, cost_after=current_cost)
                self.cost_history.append(current_cost)
                continue

            snapshot = self.cluster_state.clone()
            if not self._migrate_partitions(snapshot, partitions, candidate.id):
                logger.warning(f"[Proposed] Host {candidate.id} release abandoned during simulation.")
                self._record(candidate.id, 'abandoned', partitions, current_cost, current_cost)
                self.cost_history.append(current_cost)
                continue

            new_cost = self.cost_evaluator.total_cost(snapshot.placement)
            if new_cost < current_cost:
                self.cluster_state.commit(snapshot)
                logger.info(f"[Proposed] Host {candidate.id} successfully released "
                            f"(accepted, cost {current_cost:.2f} -> {new_cost:.2f}).")
                self._record(candidate.id, 'accepted', partitions, current_cost, new_cost)
                current_cost = new_cost
            else:
                logger.info(f"[Proposed] Host {candidate.id} release rejected "
                            f"(cost {current_cost:.2f} -> {new_cost:.2f}).")
                self._record(candidate.id, 'rejected', partitions, current_cost, new_cost)
            self.cost_history.append(current_cost)

        placement = self.cluster_state.placement
        logger.info(f"[Proposed] Final traffic cost {current_cost:.2f} on "
                    f"{self.cost_evaluator.active_host_count(placement)} active hosts.")
        return placement
