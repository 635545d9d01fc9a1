"""Tests for subprocess execution."""
import pytest

from mcp_istio.utils.process import run_command

from conftest import posix_only

pytestmark = posix_only


@pytest.mark.asyncio
async def test_run_command_captures_output():
    returncode, stdout, stderr = await run_command("sh", "-c", "echo out; echo err >&2; exit 3")

    assert returncode == 3
    assert stdout == "out\n"
    assert stderr == "err\n"


@pytest.mark.asyncio
async def test_run_command_pipes_input():
    returncode, stdout, _ = await run_command("cat", input=b"kind: Gateway\n")

    assert returncode == 0
    assert stdout == "kind: Gateway\n"


@pytest.mark.asyncio
async def test_run_command_replaces_undecodable_bytes():
    returncode, stdout, stderr = await run_command("sh", "-c", "printf 'a\\377b'; printf '\\376' >&2")

    assert returncode == 0
    assert stdout == "a�b"
    assert stderr == "�"
