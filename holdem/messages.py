from __future__ import annotations

from typing import Dict, Optional

STREET_TEXT = {
    "flop": "Flop (3 cards) dealt.",
    "turn": "Turn (4th card) dealt.",
    "river": "River (5th card) dealt.",
}


def describe(event: Dict[str, object]) -> Optional[str]:
    """Human-readable line for an engine event, or None if it has no text."""
    kind = event.get("ev")
    if kind == "DEALER":
        return f"{event['name']} is Dealer."
    if kind == "BLINDS_UP":
        return f"Blinds are now {event['sb']}/{event['bb']}."
    if kind == "BLIND":
        return f"{event['name']} posted {event['kind']} blind of {event['amount']}."
    if kind == "BUSTED":
        return f"{event['name']} is out of the game!"
    if kind == "SESSION_WINNER":
        return f"{event['name']} wins the game!"
    if kind == "PHASE":
        return STREET_TEXT.get(str(event["phase"]))
    if kind == "ACTION":
        return _describe_action(event)
    if kind == "WIN":
        return _describe_win(event)
    return None


def _describe_action(event: Dict[str, object]) -> str:
    name = event["name"]
    action = event["action"]
    if action == "fold":
        return f"{name} folded."
    if action == "check":
        return f"{name} checked."
    if action == "call":
        return f"{name} called {event['amount']}."
    if action == "raise":
        return f"{name} raised to {event['round_bet']}."
    if action == "allin":
        return f"{name} is all-in."
    return f"{name} did something."


def _describe_win(event: Dict[str, object]) -> str:
    players = list(event["players"])  # type: ignore[call-overload]
    if len(players) > 1:
        return f"{' & '.join(players)} split {event['amount']}"
    text = f"{players[0]} wins {event['amount']}"
    if event.get("hand"):
        text += f" with {event['hand']}"
    return text
