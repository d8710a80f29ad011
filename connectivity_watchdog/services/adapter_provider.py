"""Network adapter discovery and reset, one provider per platform."""

import fnmatch
import platform
import re
import shutil
import socket
import subprocess
import time
from typing import List, Optional, Sequence

import psutil

from ..config.defaults import SYSTEM_CONSTANTS
from ..logging_config import get_logger
from ..models.state import AdapterHandle
from .error_handler import ProviderUnavailableError, RemediationError
from .interfaces import AdapterProviderInterface

logger = get_logger("adapter_provider")

_WILDCARD_CHARS = set("*?[")
_IPV4_RE = re.compile(r"^\d{1,3}(?:\.\d{1,3}){3}$")


def match_adapter_name(pattern: str, name: str) -> bool:
    """Case-insensitive glob match of an adapter name. Empty names never match."""
    if not name:
        return False
    return fnmatch.fnmatchcase(name.lower(), pattern.lower())


def _is_loopback(name: str, flags: str) -> bool:
    if "loopback" in flags.split(","):
        return True
    return name == "lo" or name.lower().startswith("loopback")


class PsutilAdapterProvider(AdapterProviderInterface):
    """Shared adapter enumeration built on psutil; subclasses supply the OS commands."""

    def __init__(self, command_timeout: Optional[float] = None,
                 settle_seconds: Optional[float] = None):
        self.command_timeout = command_timeout or SYSTEM_CONSTANTS["ADAPTER_COMMAND_TIMEOUT_SECONDS"]
        self.settle_seconds = SYSTEM_CONSTANTS["ADAPTER_SETTLE_SECONDS"] \
            if settle_seconds is None else settle_seconds

    def list_adapters(self) -> List[AdapterHandle]:
        """List adapters in psutil enumeration order."""
        stats = psutil.net_if_stats()
        addresses = psutil.net_if_addrs()

        adapters = []
        for name, nic in stats.items():
            ipv4 = None
            for addr in addresses.get(name, []):
                if addr.family == socket.AF_INET:
                    ipv4 = addr.address
                    break
            adapters.append(AdapterHandle(
                name=name,
                is_up=bool(nic.isup),
                speed_mbps=nic.speed,
                mtu=nic.mtu,
                ipv4_address=ipv4
            ))
        return adapters

    def find_adapter(self, pattern: str) -> Optional[AdapterHandle]:
        """Return the first up adapter matching the pattern, or None."""
        explicit = not (_WILDCARD_CHARS & set(pattern))
        stats = psutil.net_if_stats()

        for adapter in self.list_adapters():
            if not adapter.is_up or not match_adapter_name(pattern, adapter.name):
                continue
            flags = getattr(stats.get(adapter.name), "flags", "") or ""
            if not explicit and _is_loopback(adapter.name, flags):
                continue
            return adapter

        return None

    def is_adapter_up(self, name: str) -> bool:
        nic = psutil.net_if_stats().get(name)
        return bool(nic and nic.isup)

    def _run_command(self, cmd: Sequence[str], ignore_phrases: Sequence[str] = ()) -> str:
        """Run an OS command, raising RemediationError on failure."""
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(list(cmd), capture_output=True, text=True,
                                    timeout=self.command_timeout)
        except subprocess.TimeoutExpired:
            raise RemediationError(f"'{' '.join(cmd)}' timed out after {self.command_timeout}s")
        except OSError as e:
            raise RemediationError(f"'{cmd[0]}' could not be executed: {e}")

        output = f"{result.stdout or ''}\n{result.stderr or ''}".strip()
        if result.returncode != 0:
            lowered = output.lower()
            if any(phrase in lowered for phrase in ignore_phrases):
                logger.debug(f"Ignoring benign failure from {cmd[0]}: {output}")
                return output
            raise RemediationError(
                f"'{' '.join(cmd)}' exited with {result.returncode}: {output or 'no output'}")
        return output

    def settle(self) -> None:
        """Pause between bringing an adapter down and back up."""
        if self.settle_seconds > 0:
            time.sleep(self.settle_seconds)


class LinuxAdapterProvider(PsutilAdapterProvider):
    """Adapter control through iproute2."""

    def get_default_gateway(self) -> Optional[str]:
        try:
            output = self._run_command(["ip", "route", "show", "default"])
        except RemediationError as e:
            logger.warning(f"Could not read default route: {e}")
            return None

        match = re.search(r"\bvia\s+(\d+\.\d+\.\d+\.\d+)\b", output)
        return match.group(1) if match else None

    def disable_adapter(self, adapter: AdapterHandle) -> None:
        self._run_command(["ip", "link", "set", "dev", adapter.name, "down"])

    def enable_adapter(self, adapter: AdapterHandle) -> None:
        self._run_command(["ip", "link", "set", "dev", adapter.name, "up"])


class WindowsAdapterProvider(PsutilAdapterProvider):
    """Adapter control through netsh."""

    # netsh reports these when the adapter is already in the requested state
    _ALREADY_PHRASES = ("already disabled", "already enabled", "already in this state")

    def get_default_gateway(self) -> Optional[str]:
        try:
            output = self._run_command(["route", "print", "-4", "0.0.0.0"])
        except RemediationError as e:
            logger.warning(f"Could not read default route: {e}")
            return None

        for line in output.splitlines():
            parts = line.split()
            if len(parts) >= 3 and parts[0] == "0.0.0.0" and parts[1] == "0.0.0.0" \
                    and _IPV4_RE.match(parts[2]):
                return parts[2]
        return None

    def _set_admin(self, adapter: AdapterHandle, state: str) -> None:
        self._run_command(
            ["netsh", "interface", "set", "interface", f"name={adapter.name}", f"admin={state}"],
            ignore_phrases=self._ALREADY_PHRASES
        )

    def disable_adapter(self, adapter: AdapterHandle) -> None:
        self._set_admin(adapter, "disabled")

    def enable_adapter(self, adapter: AdapterHandle) -> None:
        self._set_admin(adapter, "enabled")


def create_adapter_provider(system: Optional[str] = None) -> PsutilAdapterProvider:
    """Create the provider for the running platform."""
    system = system or platform.system()

    if system == "Linux":
        if shutil.which("ip") is None:
            raise ProviderUnavailableError("iproute2 'ip' command not found")
        provider = LinuxAdapterProvider()
    elif system == "Windows":
        if shutil.which("netsh") is None:
            raise ProviderUnavailableError("'netsh' command not found")
        provider = WindowsAdapterProvider()
    else:
        raise ProviderUnavailableError(f"Unsupported platform: {system}")

    try:
        psutil.net_if_stats()
    except (OSError, NotImplementedError, psutil.Error) as e:
        raise ProviderUnavailableError(f"Cannot enumerate network adapters: {e}")

    logger.info(f"Using {type(provider).__name__}")
    return provider
