from enum import Enum

from consolidation.errors import InvalidInputError

SAME_RACK_DISTANCE = 1.0
AGGREGATION_DISTANCE = 5.0
CORE_DISTANCE = 20.0


class Topology(Enum):
    TREE = 'TREE'
    FAT_TREE = 'FAT_TREE'
    VL2 = 'VL2'

    @classmethod
    def from_name(cls, name):
        """
        Resolve a topology from a config or command-line value.
        Accepts enum members and case-insensitive names using '-' or '_' ('fat-tree', 'FAT_TREE').
        """
        if isinstance(name, cls):
            return name
        key = str(name).strip().upper().replace('-', '_')
        try:
            return cls[key]
        except KeyError:
            valid = ', '.join(t.name for t in cls)
            raise InvalidInputError(f"Unknown topology '{name}'. Expected one of: {valid}") from None


def distance(host_a, host_b, topology):
    """
    Network distance between two hosts under the given topology.

    Same host is 0 and same rack is 1 everywhere. Across racks:
      TREE      every cross-rack pair goes through the core (20)
      FAT_TREE  same pod stays in the aggregation layer (5), otherwise core (20)
      VL2       every cross-rack pair costs the aggregation penalty (5), pods are ignored
    """
    if host_a.id == host_b.id:
        return 0.0
    if host_a.rack_id == host_b.rack_id:
        return SAME_RACK_DISTANCE

    if topology is Topology.TREE:
        return CORE_DISTANCE
    if topology is Topology.FAT_TREE:
        if host_a.pod_id == host_b.pod_id:
            return AGGREGATION_DISTANCE
        return CORE_DISTANCE
    if topology is Topology.VL2:
        return AGGREGATION_DISTANCE

    raise InvalidInputError(f"Unsupported topology: {topology!r}")
