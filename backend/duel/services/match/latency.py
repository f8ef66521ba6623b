from typing import Any, Optional

from duel.payloads import parse_client_time


def echo(data: Any) -> Optional[dict]:
    """Pong payload for a latency probe, or None when there is nothing to echo."""
    client_time = parse_client_time(data)
    if client_time is None:
        return None
    return {'clientTime': client_time}
