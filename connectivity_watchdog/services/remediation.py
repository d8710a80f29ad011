"""Adapter reset remediation."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from ..logging_config import get_logger
from ..models.state import AdapterHandle
from .error_decorators import log_execution_time
from .error_handler import ProviderUnavailableError
from .interfaces import AdapterProviderInterface, RemediationActuatorInterface, RemediationResult

logger = get_logger("remediation")


class RemediationActuator(RemediationActuatorInterface):
    """Disables and re-enables an adapter. Failures are reported, never raised."""

    def __init__(self, provider: AdapterProviderInterface, max_history_entries: int = 50):
        self.provider = provider
        self.max_history_entries = max_history_entries
        self.history: List[RemediationResult] = []

    @log_execution_time("remediation")
    def reset(self, adapter: AdapterHandle) -> RemediationResult:
        """Bring the adapter down then up. Safe to call on an adapter in either state."""
        logger.warning(f"Resetting adapter {adapter.name}")
        attempted_at = datetime.now()

        try:
            self.provider.disable_adapter(adapter)
            self.provider.settle()
            self.provider.enable_adapter(adapter)
            if not self.provider.is_adapter_up(adapter.name):
                # Some drivers report link state late; the next tick's probes decide
                logger.warning(f"Adapter {adapter.name} not yet reported up after enable")
        except ProviderUnavailableError:
            raise
        except Exception as e:
            error = f"Reset of {adapter.name} failed: {e}"
            logger.error(error)
            # Leave the adapter up if the disable step went through
            self._try_enable(adapter)
            result = RemediationResult(success=False, error=error, attempted_at=attempted_at)
        else:
            logger.info(f"Adapter {adapter.name} reset completed")
            result = RemediationResult(success=True, attempted_at=attempted_at)

        self._add_history(result)
        return result

    def _try_enable(self, adapter: AdapterHandle) -> None:
        try:
            self.provider.enable_adapter(adapter)
        except Exception as e:
            logger.debug(f"Re-enable of {adapter.name} after failed reset also failed: {e}")

    def _add_history(self, result: RemediationResult) -> None:
        self.history.append(result)
        if len(self.history) > self.max_history_entries:
            self.history = self.history[-self.max_history_entries:]

    def get_remediation_info(self) -> Dict[str, Any]:
        """Get a summary of recent remediation attempts."""
        last: Optional[RemediationResult] = self.history[-1] if self.history else None
        return {
            "attempts_recorded": len(self.history),
            "last_attempt": last.attempted_at.isoformat() if last else None,
            "last_success": last.success if last else None,
            "last_error": last.error if last else None
        }
