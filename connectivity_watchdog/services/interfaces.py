"""Service interfaces and abstract base classes."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from ..models.probe import ConnectivityReport, ProbeTarget
from ..models.state import AdapterHandle


class AdapterProviderInterface(ABC):
    """Platform capability for discovering and resetting network adapters."""

    @abstractmethod
    def list_adapters(self) -> List[AdapterHandle]:
        """List adapters in provider enumeration order."""
        pass

    @abstractmethod
    def find_adapter(self, pattern: str) -> Optional[AdapterHandle]:
        """Return the first up adapter whose name matches the pattern."""
        pass

    @abstractmethod
    def get_default_gateway(self) -> Optional[str]:
        """Return the default gateway address from the routing table."""
        pass

    @abstractmethod
    def disable_adapter(self, adapter: AdapterHandle) -> None:
        """Administratively bring the adapter down."""
        pass

    @abstractmethod
    def enable_adapter(self, adapter: AdapterHandle) -> None:
        """Administratively bring the adapter up."""
        pass

    @abstractmethod
    def is_adapter_up(self, name: str) -> bool:
        """Check whether the named adapter is administratively up."""
        pass

    def settle(self) -> None:
        """Pause between disabling and re-enabling an adapter. No pause by default."""


class ConnectivityProberInterface(ABC):
    """Interface for running connectivity probes."""

    @abstractmethod
    def probe(self, adapter: AdapterHandle, targets: Sequence[ProbeTarget],
              timeout: float) -> ConnectivityReport:
        """Run every probe and return the aggregated report."""
        pass

    @abstractmethod
    def get_probe_info(self) -> Dict[str, Any]:
        """Get prober configuration and counters."""
        pass


class RemediationActuatorInterface(ABC):
    """Interface for the adapter reset primitive."""

    @abstractmethod
    def reset(self, adapter: AdapterHandle) -> "RemediationResult":
        """Disable then re-enable the adapter."""
        pass

    @abstractmethod
    def get_remediation_info(self) -> Dict[str, Any]:
        """Get a summary of recent remediation attempts."""
        pass


@dataclass
class RemediationResult:
    """Outcome of a remediation attempt."""
    success: bool
    error: Optional[str] = None
    attempted_at: datetime = field(default_factory=datetime.now)

    def __iter__(self):
        # Allows ``success, error = actuator.reset(adapter)``
        return iter((self.success, self.error))
