# Copyright (c) 2022 Daniel Pereira
#
# SPDX-License-Identifier: Apache-2.0

import asyncio, asyncio.subprocess
from logging import getLogger

logger = getLogger(__name__)

async def cmd(cmd: str, *args: list[str], env: dict = None, output_encoding: str = "utf-8"):
    """
    Run a command in the existing thread event loop and return its return code and outputs.

    The call only returns once the process exits, which is what makes `rtcwake` usable as a blocking
    suspend: control comes back here after the machine has resumed.
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            cmd, *args, env=env,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError:
        logger.warning(f"Command '{cmd}' not found")
        return dict(rc=127, stderr="", stdout="")

    stdout, stderr = await proc.communicate()

    if proc.returncode != 0:
        stderr_str = stderr.decode(output_encoding).strip()
        logger.warning(f"Process '{cmd}' returned {proc.returncode}: {stderr_str}")

    return dict(
        rc=proc.returncode,
        stderr=stderr.decode(output_encoding),
        stdout=stdout.decode(output_encoding),
    )
