import argparse
import asyncio
import logging

import uvicorn

from .api import create_app
from .feed import SnapshotFeed
from .store import ACTION_TTL_SECONDS, SNAPSHOT_TTL_SECONDS, ActionMailbox, SnapshotStore

logging.basicConfig(level=logging.INFO)

LOGGER = logging.getLogger("poker_relay")


async def _purge_forever(store: SnapshotStore, mailbox: ActionMailbox, interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        dropped = store.purge_expired() + mailbox.purge_expired()
        if dropped:
            LOGGER.info("Purged %s expired records", dropped)


async def serve(args: argparse.Namespace) -> None:
    store = SnapshotStore(ttl=args.snapshot_ttl)
    mailbox = ActionMailbox(ttl=args.action_ttl)
    app = create_app(store, mailbox)
    server = uvicorn.Server(uvicorn.Config(app, host=args.host, port=args.port))

    tasks = [asyncio.create_task(server.serve())]
    if args.feed_port:
        feed = SnapshotFeed(store, mailbox)
        tasks.append(asyncio.create_task(feed.start(host=args.host, port=args.feed_port)))
    tasks.append(asyncio.create_task(_purge_forever(store, mailbox, args.purge_interval)))

    # uvicorn owns the signal handling; once it stops, the rest follows.
    done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    for task in pending:
        task.cancel()
    await asyncio.gather(*pending, return_exceptions=True)
    for task in done:
        task.result()


def main() -> None:
    parser = argparse.ArgumentParser(description="Hold'em table relay (HTTP + websocket feed)")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument(
        "--feed-port",
        type=int,
        default=8765,
        help="Websocket snapshot feed port (0 disables the feed)",
    )
    parser.add_argument("--snapshot-ttl", type=float, default=SNAPSHOT_TTL_SECONDS, help="Seconds a table snapshot lives")
    parser.add_argument("--action-ttl", type=float, default=ACTION_TTL_SECONDS, help="Seconds a queued action lives")
    parser.add_argument("--purge-interval", type=float, default=60.0)
    args = parser.parse_args()

    asyncio.run(serve(args))


if __name__ == "__main__":
    main()
