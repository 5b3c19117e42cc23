import argparse
import asyncio
import logging
import random
import sys
from typing import List, Optional, Tuple

import httpx

from holdem.models import TableConfig
from .host import HostConfig, TableHost

logging.basicConfig(level=logging.INFO)

LOGGER = logging.getLogger("poker_table")

HELP = "Commands: <seat> fold|check|call|allin, <seat> raise <amount>"


def _parse_seats(humans: List[str], bots: int) -> List[Tuple[str, bool]]:
    seats = [(name, False) for name in humans]
    seats.extend((f"Bot {idx + 1}", True) for idx in range(bots))
    return seats


def _parse_command(line: str) -> Optional[Tuple[int, str, Optional[int]]]:
    parts = line.split()
    if len(parts) < 2:
        return None
    try:
        seat = int(parts[0])
        amount = int(parts[2]) if len(parts) > 2 else None
    except ValueError:
        return None
    return seat, parts[1].lower(), amount


async def _read_commands(host: TableHost) -> None:
    # Local keyboard seat control; remote devices go through the relay instead.
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()
    await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)
    while True:
        raw = await reader.readline()
        if not raw:
            return
        command = _parse_command(raw.decode().strip())
        if command is None:
            print(HELP)
            continue
        seat, action, amount = command
        host.submit_local(seat, action, amount)


async def run(args: argparse.Namespace) -> None:
    table_config = TableConfig(
        starting_stack=args.starting_stack,
        small_blind=args.sb,
        big_blind=args.bb,
    )
    host_config = HostConfig(
        table_id=args.table_id,
        bot_delay=args.bot_delay,
        transfer_pause=args.transfer_pause,
        poll_interval=args.poll_interval,
    )
    seats = _parse_seats(args.human, args.bots)
    rng = random.Random(args.seed) if args.seed is not None else None

    client = httpx.AsyncClient(base_url=args.relay_url, timeout=5.0) if args.relay_url else None
    try:
        host = TableHost(table_config, seats, host_config, client=client, rng=rng)
        commands = asyncio.create_task(_read_commands(host)) if args.human else None
        try:
            await host.run_session(max_hands=args.max_hands)
        finally:
            if commands is not None:
                commands.cancel()
                await asyncio.gather(commands, return_exceptions=True)
    finally:
        if client is not None:
            await client.aclose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Run a Hold'em table with bots and local/remote seats")
    parser.add_argument("--human", action="append", default=[], help="Human player name (repeatable)")
    parser.add_argument("--bots", type=int, default=3)
    parser.add_argument("--starting-stack", type=int, default=2000)
    parser.add_argument("--sb", type=int, default=10)
    parser.add_argument("--bb", type=int, default=20)
    parser.add_argument("--relay-url", default=None, help="Relay base URL, e.g. http://localhost:8000")
    parser.add_argument("--table-id", default="default")
    parser.add_argument("--bot-delay", type=float, default=1.0)
    parser.add_argument("--transfer-pause", type=float, default=1.0)
    parser.add_argument("--poll-interval", type=float, default=0.8)
    parser.add_argument("--max-hands", type=int, default=None)
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args()

    if len(args.human) + args.bots < 2:
        parser.error("At least two seats are required")
    if args.human:
        print(HELP)
    asyncio.run(run(args))


if __name__ == "__main__":
    main()
