# tasks.example.py
#
# Copy to tasks.py (or point SEQUENT_TASKFILE / -f at it) and run:
#   sequent            -> every task, in dependency order
#   sequent deploy     -> deploy and everything it depends on
#   sequent --plan     -> print the order without running

from __future__ import annotations

import asyncio


def register(executor) -> None:
    executor.add_task("clean", lambda: print("cleaning build/"))
    executor.add_task("lint", lambda: print("linting sources"))
    executor.add_task("build", lambda: print("building wheel"), ["clean"])
    executor.add_task("test", lambda: print("running tests"), ["build"])

    @executor.task(depends_on=["lint", "test"])
    async def deploy() -> None:
        await asyncio.sleep(0.1)
        print("uploading artifacts")
