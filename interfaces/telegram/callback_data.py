from __future__ import annotations


def encode_spin_again(machine_id: str, bet: int) -> str:
    """
    Encode a "spin again" button callback.

    Format: again:{machine_id}:{bet}
    """

    if ":" in machine_id:
        raise ValueError(f"Machine id may not contain ':': {machine_id}")
    return f"again:{machine_id}:{bet}"


def parse_spin_again(data: str) -> tuple[str, int]:
    parts = data.split(":")
    if len(parts) != 3 or parts[0] != "again" or not parts[1]:
        raise ValueError(f"Invalid spin-again callback data: {data}")

    machine_id = parts[1]
    bet = int(parts[2])
    return machine_id, bet
