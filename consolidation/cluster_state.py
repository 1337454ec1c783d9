import copy
import logging
from collections import namedtuple

from consolidation.errors import CapacityExceeded, InvalidInputError, PlacementError

logger = logging.getLogger('tacs')

# ram is the memory demand, mips the compute demand.
VM = namedtuple('VM', ['id', 'ram', 'mips'])


class Host:
    def __init__(self, id, rack_id, pod_id, total_ram, total_mips):
        if total_ram <= 0 or total_mips <= 0:
            raise InvalidInputError(f"Host {id} must have positive capacities (ram={total_ram}, mips={total_mips})")
        self.id = id
        self.rack_id = rack_id
        self.pod_id = pod_id
        self.total_ram = total_ram
        self.total_mips = total_mips
        self.remaining_ram = total_ram
        self.remaining_mips = total_mips

    def used_ram(self):
        return self.total_ram - self.remaining_ram

    def used_mips(self):
        return self.total_mips - self.remaining_mips

    def cpu_utilization(self):
        return self.used_mips() / self.total_mips

    def mem_utilization(self):
        return self.used_ram() / self.total_ram

    def fits(self, ram, mips):
        return self.remaining_ram >= ram and self.remaining_mips >= mips

    def __repr__(self):
        return (f"Host(id={self.id}, rack={self.rack_id}, pod={self.pod_id}, "
                f"ram={self.remaining_ram}/{self.total_ram}, mips={self.remaining_mips}/{self.total_mips})")


def copy_hosts(hosts):
    """Independent copies of the given hosts, remaining counters included."""
    copies = []
    for host in hosts:
        clone = Host(host.id, host.rack_id, host.pod_id, host.total_ram, host.total_mips)
        clone.remaining_ram = host.remaining_ram
        clone.remaining_mips = host.remaining_mips
        copies.append(clone)
    return copies


class ClusterState:
    """
    Capacity ledger for one placement run.

    Owns the ordered host list and the VM -> Host placement. Every change to a
    host's remaining capacity goes through allocate/release so the counters
    always agree with the placement. A VM appears in the placement at most once.
    """

    def __init__(self, hosts):
        self.hosts = list(hosts)
        self._hosts_by_id = {}
        for host in self.hosts:
            if host.id in self._hosts_by_id:
                raise InvalidInputError(f"Duplicate host id {host.id} in host list")
            self._hosts_by_id[host.id] = host
        self._placement = {}

    @property
    def placement(self):
        """Read-only view of the VM -> Host mapping, in allocation order."""
        return dict(self._placement)

    def get_host_by_id(self, host_id):
        host = self._hosts_by_id.get(host_id)
        if host is None:
            raise PlacementError(f"Host {host_id} is not part of this cluster state")
        return host

    def get_host_of_vm(self, vm):
        """Return the host the VM is placed on, or None if it is unplaced."""
        return self._placement.get(vm)

    def get_vms_on_host(self, host_id):
        return [vm for vm, host in self._placement.items() if host.id == host_id]

    def is_placed(self, vm):
        return vm in self._placement

    def _resolve(self, host):
        # Hosts are always addressed by id so that clones never reach the live objects.
        return self.get_host_by_id(host.id)

    def allocate(self, vm, host):
        host = self._resolve(host)
        if vm in self._placement:
            raise PlacementError(f"VM {vm.id} is already placed on host {self._placement[vm].id}")
        if host.remaining_ram < vm.ram:
            raise CapacityExceeded(host.id, vm.id, 'ram', vm.ram, host.remaining_ram)
        if host.remaining_mips < vm.mips:
            raise CapacityExceeded(host.id, vm.id, 'mips', vm.mips, host.remaining_mips)

        host.remaining_ram -= vm.ram
        host.remaining_mips -= vm.mips
        self._placement[vm] = host
        logger.debug(f"[ClusterState] Allocated VM {vm.id} (ram={vm.ram}, mips={vm.mips}) on host {host.id}.")

    def release(self, vm):
        """Return the VM's demand to its host and drop it from the placement. Returns the host."""
        host = self._placement.get(vm)
        if host is None:
            raise PlacementError(f"VM {vm.id} is not placed and cannot be released")
        if host.remaining_ram + vm.ram > host.total_ram:
            raise CapacityExceeded(host.id, vm.id, 'ram', -vm.ram, host.total_ram - host.remaining_ram)
        if host.remaining_mips + vm.mips > host.total_mips:
            raise CapacityExceeded(host.id, vm.id, 'mips', -vm.mips, host.total_mips - host.remaining_mips)

        host.remaining_ram += vm.ram
        host.remaining_mips += vm.mips
        del self._placement[vm]
        logger.debug(f"[ClusterState] Released VM {vm.id} from host {host.id}.")
        return host

    def migrate(self, vm, target_host):
        """Move a placed VM to target_host: allocate on the destination, release on the source."""
        target = self._resolve(target_host)
        source = self._placement.get(vm)
        if source is None:
            raise PlacementError(f"VM {vm.id} is not placed and cannot be migrated")
        if source.id == target.id:
            return source
        if not target.fits(vm.ram, vm.mips):
            raise CapacityExceeded(target.id, vm.id, 'ram/mips', (vm.ram, vm.mips),
                                   (target.remaining_ram, target.remaining_mips))
        self.release(vm)
        self.allocate(vm, target)
        logger.debug(f"[ClusterState] Migrated VM {vm.id} from host {source.id} to host {target.id}.")
        return source

    def clone(self):
        """Deep copy of hosts and placement. Nothing mutable is shared with the original."""
        return copy.deepcopy(self)

    def commit(self, snapshot):
        """Adopt a snapshot's hosts and placement in place of the current ones."""
        self.hosts = snapshot.hosts
        self._hosts_by_id = snapshot._hosts_by_id
        self._placement = snapshot._placement

    def active_hosts(self):
        seen = {}
        for host in self._placement.values():
            seen.setdefault(host.id, host)
        return list(seen.values())

    def log_cluster_stats(self, title="Cluster State"):
        logger.info(f"--- {title} ---")
        header = f"{'Host':<6} {'Rack':<6} {'Pod':<6} {'CPU %':<8} {'Mem %':<8} {'VM Count':<10}"
        logger.info(header)
        logger.info("-" * len(header))
        for host in self.hosts:
            vm_count = len(self.get_vms_on_host(host.id))
            logger.info(f"{host.id:<6} {host.rack_id:<6} {host.pod_id:<6} "
                        f"{host.cpu_utilization() * 100:<8.1f} {host.mem_utilization() * 100:<8.1f} {vm_count:<10}")
        logger.info(f"Total Hosts: {len(self.hosts)}, Active Hosts: {len(self.active_hosts())}, "
                    f"Placed VMs: {len(self._placement)}")
