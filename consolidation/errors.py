class ConsolidationError(Exception):
    """Base class for every error raised by the consolidation engine."""


class CapacityExceeded(ConsolidationError):
    """
    An allocation would drive a host's remaining capacity below zero, or a
    release would push it above the host's total.
    Callers are expected to check fit before allocating, so this signals a bug.
    """

    def __init__(self, host_id, vm_id, resource, requested, available):
        self.host_id = host_id
        self.vm_id = vm_id
        self.resource = resource
        self.requested = requested
        self.available = available
        super().__init__(
            f"Host {host_id}: {resource} request of {requested} for VM {vm_id} exceeds available {available}"
        )


class PlacementError(ConsolidationError):
    """Ledger misuse: double allocation, releasing an unplaced VM or an unknown host."""


class InvalidInputError(ConsolidationError, ValueError):
    """Malformed input handed to the engine (traffic matrix, parameters, hosts)."""
