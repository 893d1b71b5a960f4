"""
Remote Command Execution Utilities

Runs a command on a fleet node over SSH and returns its combined output.

This module uses `asyncssh` instead of shelling out to `ssh`. Each call
runs its own event loop, so the executor can be shared by worker threads.
"""

import asyncio
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Coroutine, Dict, Optional, TypeVar

import asyncssh
from loguru import logger

T = TypeVar("T")


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, str):
        return value
    return str(value)


@dataclass
class CommandResult:
    """Result of a remote command execution"""
    host: str
    command: str
    success: bool
    # stdout and stderr interleaved
    output: str
    return_code: int


class RemoteExecutor:
    """
    Executes commands on remote servers via SSH (asyncssh).

    Host keys are not checked; fleet nodes are freshly booted and their
    keys are unknown. No timeout is applied unless command_timeout is set.
    """

    def __init__(
        self,
        ssh_key_path: Optional[str] = None,
        known_hosts: Optional[str] = None,
        connect_timeout: Optional[float] = None,
        command_timeout: Optional[float] = None,
    ):
        """
        Initialize the remote executor.

        Args:
            ssh_key_path: Path to SSH private key (None: default keys / agent)
            known_hosts: Path to known_hosts file (or None to disable host key checks)
            connect_timeout: SSH connect timeout seconds
            command_timeout: Per-command timeout seconds
        """
        self.ssh_key_path = ssh_key_path
        self.known_hosts = known_hosts
        self.connect_timeout = connect_timeout
        self.command_timeout = command_timeout

    def _run_coro(self, coro: Coroutine[Any, Any, T]) -> T:
        """Run coroutine from sync code.

        If called from within an existing event loop, it runs the coroutine in
        a background thread to avoid "Cannot run the event loop while another
        loop is running".
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(coro)

        with ThreadPoolExecutor(max_workers=1) as executor:
            fut = executor.submit(asyncio.run, coro)
            return fut.result()

    async def _connect(self, host: str, user: str) -> asyncssh.SSHClientConnection:
        options: Dict[str, Any] = {
            "username": user,
            "known_hosts": self.known_hosts,
        }
        if self.ssh_key_path:
            options["client_keys"] = [os.path.expanduser(self.ssh_key_path)]
        if self.connect_timeout is not None:
            options["connect_timeout"] = self.connect_timeout

        return await asyncssh.connect(host, **options)

    async def _run_one(
        self,
        host: str,
        user: str,
        command: str,
        input_data: Optional[str],
    ) -> CommandResult:
        try:
            async with await self._connect(host, user) as conn:
                run = conn.run(command, input=input_data, stderr=asyncssh.STDOUT, check=False)
                if self.command_timeout is not None:
                    res = await asyncio.wait_for(run, timeout=self.command_timeout)
                else:
                    res = await run
                exit_status = res.exit_status if res.exit_status is not None else -1
                return CommandResult(
                    host=host,
                    command=command,
                    success=exit_status == 0,
                    output=_as_text(res.stdout),
                    return_code=int(exit_status),
                )
        except (asyncio.TimeoutError, asyncssh.Error, OSError) as e:
            logger.debug(f"SSH to {user}@{host} failed: {e}")
            return CommandResult(
                host=host,
                command=command,
                success=False,
                output=str(e),
                return_code=-1,
            )

    def run(
        self,
        host: str,
        user: str,
        command: str,
        input_data: Optional[str] = None,
    ) -> CommandResult:
        """
        Execute a command on a single host.

        Args:
            host: Host name or IP
            user: Login name
            command: Command to execute
            input_data: Text fed to the command's stdin

        Returns:
            CommandResult
        """
        logger.debug(f"{user}@{host}: {command}")
        return self._run_coro(self._run_one(host, user, command, input_data))
