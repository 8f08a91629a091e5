"""Example definition file.

Copy it to a project root as ``violet.py`` and run ``violet test``.
"""

import asyncio


async def fetch_version(ctx):
    await asyncio.sleep(0)
    return {**ctx, "version": "1.0.0"}


def check_tools(ctx):
    ctx["tools"] = True


def define(violet):
    violet.log_level("log")

    violet.declare("clean").exec("rm", "-rf", "build").log("cleaned")

    violet.declare("build") \
        .dep("clean") \
        .run(fetch_version) \
        .parallel(check_tools, lambda ctx: None) \
        .exec("mkdir", "-p", "build") \
        .log("built")

    violet.declare("test").dep("build").exec("python", "-m", "pytest", "-q").warn("tests finished")
