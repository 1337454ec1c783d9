import logging

logger = logging.getLogger('tacs')


def sort_vms_decreasing(vms):
    """VMs by descending compute demand. sorted() is stable, so ties keep input order."""
    return sorted(vms, key=lambda vm: vm.mips, reverse=True)


class FirstFitDecreasingPlacer:
    """
    Greedy baseline: largest compute demand first, each VM on the first host
    (in host-list order) with room in both dimensions. VMs that fit nowhere
    stay unplaced.
    """

    name = 'FFD'

    def __init__(self, cluster_state):
        self.cluster_state = cluster_state
        self.unplaced = []

    def _first_fit(self, vm):
        for host in self.cluster_state.hosts:
            if host.fits(vm.ram, vm.mips):
                return host
        return None

    def place(self, vms):
        logger.info(f"[FFD] Placing {len(vms)} VMs on {len(self.cluster_state.hosts)} hosts.")
        self.unplaced = []

        for vm in sort_vms_decreasing(vms):
            if self.cluster_state.is_placed(vm):
                continue
            host = self._first_fit(vm)
            if host is None:
                self.unplaced.append(vm)
                logger.warning(f"[FFD] VM {vm.id} (ram={vm.ram}, mips={vm.mips}) fits on no host. Left unplaced.")
                continue
            self.cluster_state.allocate(vm, host)

        placement = self.cluster_state.placement
        logger.info(f"[FFD] Placed {len(placement)} VMs, {len(self.unplaced)} unplaced.")
        return placement
