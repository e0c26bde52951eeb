"""Custom exceptions used by the xdp_cpumap package."""


class XDPCpumapError(RuntimeError):
    """Base class for cpumap statistics errors."""


class ConfigurationError(XDPCpumapError):
    """Raised when options are rejected before the poll loop starts."""


class AllocationError(XDPCpumapError):
    """Raised when snapshot buffers cannot be allocated."""


class CollectionError(XDPCpumapError):
    """Raised when a counter table cannot be read for one cycle."""

    def __init__(self, table: str, key: int, reason: str) -> None:
        super().__init__(f"Failed to collect {table}[{key}]: {reason}")
        self.table = table
        self.key = key
        self.reason = reason


class BPFUnavailableError(XDPCpumapError):
    """Raised when the BCC runtime is missing."""


class ProgramLoadError(XDPCpumapError):
    """Raised when the dataplane program fails to compile or load."""


class CpumapEntryError(XDPCpumapError):
    """Raised when a cpumap entry cannot be created for a CPU."""


class AttachError(XDPCpumapError):
    """Raised when the XDP function cannot be attached to the device."""
