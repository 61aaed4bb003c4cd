from __future__ import annotations

import argparse
import logging

from .core.settings import Settings
from .runtime.server import run


def main() -> None:
    env = Settings.from_env()

    p = argparse.ArgumentParser(prog="badgereg", description="badgereg: fee-gated badge registry server")
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", type=int, default=8000)
    p.add_argument("--admin", default=None, help=f"initial registry owner (default: {env.admin})")
    p.add_argument("--fee", type=int, default=None, help=f"registration fee (default: {env.fee})")
    p.add_argument("--journal", default=None, help="JSON-lines operation journal to replay and append to")
    p.add_argument("--log-level", default=None, choices=["debug", "info", "warning", "error"])
    args = p.parse_args()

    log_level = args.log_level or env.log_level
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    srv = run(
        host=args.host,
        port=args.port,
        admin=args.admin,
        fee=args.fee,
        journal=args.journal,
        log_level=log_level,
        new_server=True,
    )
    print(srv.url)

    # Block forever (so it behaves like a normal CLI server)
    import time

    while True:
        time.sleep(3600)


if __name__ == "__main__":
    main()
