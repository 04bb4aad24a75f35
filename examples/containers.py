"""List containers, show daemon version and tail the first container's logs."""

from __future__ import annotations

import asyncio
import sys

from dockwire import ApiError, ConnectError, DockerClient, StreamSelector


def log_section(title: str) -> None:
    print("\n" + "=" * 80)
    print(title)
    print("=" * 80)


async def main() -> int:
    async with DockerClient.from_env() as client:
        try:
            await client.ping()
        except ConnectError as exc:
            print(f"Cannot reach the daemon: {exc}", file=sys.stderr)
            return 1

        log_section("Version")
        version = await client.version()
        print(f"  Engine {version.get('Version')} (API {version.get('ApiVersion')})")

        log_section("Containers")
        containers = await client.containers(all=True)
        for container in containers:
            print(f"  {container['Id'][:12]} {container.get('Image')} {container.get('Status')}")
        if not containers:
            print("  (none)")
            return 0

        log_section("Logs of " + containers[0]["Id"][:12])
        try:
            async for frame in await client.logs(containers[0]["Id"], tail=20):
                stream = sys.stderr if frame.selector is StreamSelector.STDERR else sys.stdout
                stream.write(frame.text())
        except ApiError as exc:
            print(f"  logs unavailable: {exc.message}")
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
