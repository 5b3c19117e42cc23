"""Async table driver: bots, local and remote seats, notifications, relay sync."""

from .bots import BotStrategy, baseline_strategy
from .host import HostConfig, TableHost
from .inputs import LocalInput, RemoteSeatPoller
from .notifications import NotificationQueue
from .replicator import StateReplicator

__all__ = [
    "BotStrategy",
    "baseline_strategy",
    "HostConfig",
    "TableHost",
    "LocalInput",
    "RemoteSeatPoller",
    "NotificationQueue",
    "StateReplicator",
]
