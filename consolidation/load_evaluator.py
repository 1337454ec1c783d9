import logging

logger = logging.getLogger('tacs')

LAMBDA_EPSILON = 1e-9

# Release score weights: low utilization, balanced usage, slack vs the binding resource.
UTILIZATION_WEIGHT = 0.5
BALANCE_WEIGHT = 0.3
SLACK_WEIGHT = 0.2


class LoadEvaluator:
    """
    Utilization views over a list of hosts.

    Used by the Sercon-style consolidator for its blended host load and by the
    traffic-aware consolidator to score release candidates.
    """

    def __init__(self, hosts):
        self.hosts = hosts

    def get_utilization_lists(self):
        cpu_utilizations = [host.cpu_utilization() for host in self.hosts]
        mem_utilizations = [host.mem_utilization() for host in self.hosts]
        return cpu_utilizations, mem_utilizations

    def get_cluster_ratios(self):
        """Sum of used/total over all hosts, for compute and memory."""
        cpu_utilizations, mem_utilizations = self.get_utilization_lists()
        return sum(cpu_utilizations), sum(mem_utilizations)

    def get_blend_weight(self):
        cpu_ratio, mem_ratio = self.get_cluster_ratios()
        blend = cpu_ratio / (cpu_ratio + mem_ratio + LAMBDA_EPSILON)
        logger.debug(f"[LoadEvaluator] Cluster CPU ratio {cpu_ratio:.3f}, memory ratio {mem_ratio:.3f}, lambda {blend:.3f}")
        return blend

    @staticmethod
    def host_load(host, blend):
        return blend * host.cpu_utilization() + (1 - blend) * host.mem_utilization()

    @staticmethod
    def release_score(host):
        """
        Desirability of emptying this host: S = 0.5*U + 0.3*B + 0.2*R.

        U rewards low utilization, B rewards balanced CPU/memory usage (1 for an
        idle host) and R rewards slack relative to the binding resource (0 when
        either resource is unused).
        """
        u_cpu = host.cpu_utilization()
        u_mem = host.mem_utilization()
        peak = max(u_cpu, u_mem)

        utilization = 1 - (u_cpu + u_mem) / 2
        balance = 1.0 if peak == 0 else 1 - abs(u_cpu - u_mem) / peak
        slack = 0.0 if u_cpu == 0 or u_mem == 0 else min(1 - u_cpu, 1 - u_mem) / peak

        return UTILIZATION_WEIGHT * utilization + BALANCE_WEIGHT * balance + SLACK_WEIGHT * slack

    def get_host_load_map(self, blend):
        return {host.id: self.host_load(host, blend) for host in self.hosts}
