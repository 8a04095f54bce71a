"""Windows network checks running through PowerShell."""

from typing import List, Optional

from cmdtool.shared import get_logger

from .line_processors import StringListLineProcessor
from .process import CommandRunner, RunCommandError

POWERSHELL = "powershell.exe"


def _quote(value: str) -> str:
    """Quote ``value`` as a PowerShell single-quoted literal."""
    return "'" + value.replace("'", "''") + "'"


class PowershellUtility:
    """Thin wrappers around PowerShell cmdlets."""

    def __init__(self, runner: Optional[CommandRunner] = None) -> None:
        self.runner = runner or CommandRunner()
        self.logger = get_logger(__name__, "powershell")

    def resolve_host(self, host: str) -> List[str]:
        """Resolve ``host`` through DNS and return the IPs of its A records."""
        # https://learn.microsoft.com/en-us/powershell/module/dnsclient/resolve-dnsname
        lines = self._run(
            f"Resolve-DnsName -Name {_quote(host)} -Type A "
            "| Select-Object IpAddress | Format-Table -HideTableHeaders"
        )
        return [line.strip() for line in lines]

    def is_local_ip(self, ip: str) -> bool:
        """Tell whether ``ip`` is bound to one of this machine's interfaces."""
        # https://learn.microsoft.com/en-us/powershell/module/nettcpip/get-netipaddress
        try:
            self._run(
                f"Get-NetIPAddress -IpAddress {_quote(ip)} "
                "| Select-Object IpAddress | Format-Table -HideTableHeaders"
            )
        except RunCommandError:
            # The cmdlet fails when no interface holds the address.
            self.logger.debug("IP not bound locally", extra={"ip": ip})
            return False
        return True

    def _run(self, ps_command: str) -> List[str]:
        processor = StringListLineProcessor()
        self.runner.run_command([POWERSHELL, "-NoProfile", "-Command", ps_command], processor)
        return processor.strings
