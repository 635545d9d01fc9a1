import asyncio
from typing import Awaitable, Callable, Optional, Tuple

from mcp_istio.logging import get_logger

logger = get_logger(__name__)

CommandResult = Tuple[int, str, str]
CommandRunner = Callable[..., Awaitable[CommandResult]]


async def run_command(*args: str, input: Optional[bytes] = None) -> CommandResult:
    """
    Run a command and return its exit code, stdout, and stderr.

    :param args: Command and arguments to run
    :param input: Bytes written to the command's stdin
    :return: Tuple of (returncode, stdout, stderr)
    :raises OSError: If the command cannot be launched
    """
    logger.debug({"event": "cmd_exec", "cmd": list(args)})

    proc = await asyncio.create_subprocess_exec(
        *args,
        stdin=asyncio.subprocess.PIPE if input is not None else asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await proc.communicate(input)

    logger.debug({"event": "cmd_complete", "cmd": args[0], "returncode": proc.returncode})

    return proc.returncode, stdout.decode(errors="replace"), stderr.decode(errors="replace")
