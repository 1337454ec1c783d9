import logging

from consolidation.load_evaluator import LoadEvaluator
from consolidation.placement import FirstFitDecreasingPlacer

logger = logging.getLogger('tacs')


class SerconConsolidator:
    """
    Load-balance driven consolidation baseline.

    After an FFD seed, hosts are visited from least to most loaded (load blends
    CPU and memory utilization with a cluster-wide weight lambda). Each visited
    host tries to push its VMs, one at a time, onto the most loaded other host
    with room. A host whose VMs cannot all move keeps whatever is left: the
    migrations already made for it are not rolled back.
    """

    name = 'Sercon'

    def __init__(self, cluster_state):
        self.cluster_state = cluster_state
        self.unplaced = []
        self.emptied_hosts = []
        self.partially_emptied_hosts = []

    def place(self, vms):
        seeder = FirstFitDecreasingPlacer(self.cluster_state)
        seeder.place(vms)
        self.unplaced = list(seeder.unplaced)
        self.emptied_hosts = []
        self.partially_emptied_hosts = []

        evaluator = LoadEvaluator(self.cluster_state.hosts)
        blend = evaluator.get_blend_weight()

        def load_of(host):
            return evaluator.host_load(host, blend)

        logger.debug(f"[Sercon] Initial host loads: {evaluator.get_host_load_map(blend)}")

        for target in sorted(self.cluster_state.hosts, key=load_of):
            resident_vms = self.cluster_state.get_vms_on_host(target.id)
            if not resident_vms:
                continue

            candidates = sorted((h for h in self.cluster_state.hosts if h.id != target.id),
                                key=load_of, reverse=True)

            moved = 0
            for vm in resident_vms:
                destination = next((h for h in candidates if h.fits(vm.ram, vm.mips)), None)
                if destination is None:
                    logger.debug(f"[Sercon] No destination with room for VM {vm.id} from host {target.id}.")
                    break
                self.cluster_state.migrate(vm, destination)
                moved += 1

            if moved == len(resident_vms):
                self.emptied_hosts.append(target.id)
                logger.info(f"[Sercon] Host {target.id} emptied ({moved} VMs migrated).")
            elif moved:
                self.partially_emptied_hosts.append(target.id)
                logger.warning(f"[Sercon] Host {target.id} only partially emptied: "
                               f"{moved}/{len(resident_vms)} VMs migrated, no rollback.")
            else:
                logger.debug(f"[Sercon] Host {target.id} could not shed any VM.")

        placement = self.cluster_state.placement
        logger.info(f"[Sercon] Emptied {len(self.emptied_hosts)} hosts. Placed {len(placement)} VMs.")
        return placement
