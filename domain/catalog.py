from __future__ import annotations

import json
import logging
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from .errors import InvalidMachineConfig, MachineNotFound
from .models import Machine
from .paylines import pattern


logger = logging.getLogger(__name__)


DEFAULT_SYMBOL_WEIGHTS: Mapping[str, int] = MappingProxyType({
    "🍒": 30, "🍋": 25, "🍊": 20, "🍇": 15,
    "⭐": 8, "💎": 3, "7️⃣": 1,
    "💍": 2, "👑": 1, "🌟": 10, "💰": 5,
    "🎰": 3, "🔔": 12, "🐍": 18, "🏺": 22,
    "👁️": 8, "🔮": 6, "⚱️": 4, "🗿": 2, "🏛️": 1,
})


def _machine(
    id: str,
    name: str,
    theme: str,
    min_bet: int,
    max_bet: int,
    symbols: Iterable[str],
    payouts: Mapping[str, int],
    jackpot: int,
) -> Machine:
    return Machine(
        id=id,
        name=name,
        theme=theme,
        min_bet=min_bet,
        max_bet=max_bet,
        symbols=tuple(symbols),
        payouts=MappingProxyType(dict(payouts)),
        jackpot=jackpot,
    )


DEFAULT_MACHINES: Tuple[Machine, ...] = (
    _machine(
        id="classic",
        name="Classic Slots",
        theme="retro",
        min_bet=1,
        max_bet=100,
        symbols=["🍒", "🍋", "🍊", "🍇", "⭐", "💎", "7️⃣"],
        payouts={
            "🍒🍒🍒": 10,
            "🍋🍋🍋": 15,
            "🍊🍊🍊": 20,
            "🍇🍇🍇": 25,
            "⭐⭐⭐": 50,
            "💎💎💎": 100,
            "7️⃣7️⃣7️⃣": 500,
        },
        jackpot=10000,
    ),
    _machine(
        id="diamond",
        name="Diamond Rush",
        theme="luxury",
        min_bet=5,
        max_bet=500,
        symbols=["💎", "💍", "👑", "🌟", "💰", "🎰", "🔔"],
        payouts={
            "💎💎💎": 200,
            "💍💍💍": 150,
            "👑👑👑": 300,
            "🌟🌟🌟": 75,
            "💰💰💰": 100,
            "🎰🎰🎰": 250,
            "🔔🔔🔔": 50,
        },
        jackpot=50000,
    ),
    _machine(
        id="egyptian",
        name="Pharaoh's Gold",
        theme="ancient",
        min_bet=2,
        max_bet=200,
        symbols=["🐍", "🏺", "👁️", "🔮", "⚱️", "🗿", "🏛️"],
        payouts={
            "🐍🐍🐍": 80,
            "🏺🏺🏺": 60,
            "👁️👁️👁️": 120,
            "🔮🔮🔮": 150,
            "⚱️⚱️⚱️": 200,
            "🗿🗿🗿": 300,
            "🏛️🏛️🏛️": 400,
        },
        jackpot=25000,
    ),
)


def validate_machine(machine: Machine) -> None:
    """Raise `InvalidMachineConfig` if `machine` cannot be played."""

    label = machine.id or "<unnamed>"
    if not machine.id:
        raise InvalidMachineConfig("Machine id must be a non-empty string.")
    if machine.min_bet <= 0 or machine.max_bet <= 0:
        raise InvalidMachineConfig(f"Machine '{label}': bet limits must be positive.")
    if machine.min_bet > machine.max_bet:
        raise InvalidMachineConfig(
            f"Machine '{label}': min_bet {machine.min_bet} exceeds max_bet {machine.max_bet}."
        )
    if not machine.symbols:
        raise InvalidMachineConfig(f"Machine '{label}': symbols must be a non-empty list.")
    if machine.jackpot < 0:
        raise InvalidMachineConfig(f"Machine '{label}': jackpot must not be negative.")

    for key, multiplier in machine.payouts.items():
        if not key or len(key) % 3 != 0 or pattern(key[: len(key) // 3]) != key:
            raise InvalidMachineConfig(
                f"Machine '{label}': payout key {key!r} is not one symbol repeated three times."
            )
        if isinstance(multiplier, bool) or not isinstance(multiplier, int) or multiplier <= 0:
            raise InvalidMachineConfig(
                f"Machine '{label}': payout for {key!r} must be a positive integer."
            )


class MachineCatalog:
    """Read-only lookup of machines by id, iterated in declaration order."""

    def __init__(self, machines: Iterable[Machine]) -> None:
        by_id: Dict[str, Machine] = {}
        for machine in machines:
            validate_machine(machine)
            if machine.id in by_id:
                raise InvalidMachineConfig(f"Duplicate machine id '{machine.id}'.")
            by_id[machine.id] = machine
        self._machines = MappingProxyType(by_id)

    def get(self, machine_id: str) -> Optional[Machine]:
        return self._machines.get(machine_id)

    def require(self, machine_id: str) -> Machine:
        machine = self.get(machine_id)
        if machine is None:
            raise MachineNotFound(machine_id)
        return machine

    def __iter__(self) -> Iterator[Machine]:
        return iter(self._machines.values())

    def __len__(self) -> int:
        return len(self._machines)

    def __contains__(self, machine_id: object) -> bool:
        return machine_id in self._machines


def default_catalog() -> MachineCatalog:
    return MachineCatalog(DEFAULT_MACHINES)


def _require(entry: Mapping[str, Any], key: str, kind: type, index: int) -> Any:
    value = entry.get(key)
    if isinstance(value, bool) or not isinstance(value, kind):
        raise InvalidMachineConfig(
            f"machines[{index}].{key} must be a {kind.__name__}."
        )
    return value


def _optional(entry: Mapping[str, Any], key: str, kind: type, index: int, default: Any) -> Any:
    if key not in entry:
        return default
    return _require(entry, key, kind, index)


def _machine_from_dict(entry: Any, index: int) -> Machine:
    if not isinstance(entry, dict):
        raise InvalidMachineConfig(f"machines[{index}] must be an object.")

    symbols = _require(entry, "symbols", list, index)
    if not all(isinstance(s, str) and s for s in symbols):
        raise InvalidMachineConfig(f"machines[{index}].symbols must contain non-empty strings.")

    return _machine(
        id=_require(entry, "id", str, index),
        name=_require(entry, "name", str, index),
        theme=_optional(entry, "theme", str, index, ""),
        min_bet=_require(entry, "min_bet", int, index),
        max_bet=_require(entry, "max_bet", int, index),
        symbols=symbols,
        payouts=_require(entry, "payouts", dict, index),
        jackpot=_optional(entry, "jackpot", int, index, 0),
    )


def load_catalog(path: str) -> Tuple[MachineCatalog, Mapping[str, int]]:
    """
    Load machines and symbol weights from a JSON file.

    Expected shape::

        {
          "machines": [{"id": ..., "name": ..., "theme": ..., "min_bet": ...,
                        "max_bet": ..., "symbols": [...], "payouts": {...},
                        "jackpot": ...}],
          "weights": {"<symbol>": <positive int>, ...}
        }

    `weights` is optional and falls back to `DEFAULT_SYMBOL_WEIGHTS`.
    """

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise InvalidMachineConfig(
            f"Invalid JSON in {path}: {exc.msg} (line {exc.lineno}, col {exc.colno})"
        ) from exc

    if not isinstance(data, dict):
        raise InvalidMachineConfig("Catalog root must be an object.")

    entries = data.get("machines")
    if not isinstance(entries, list) or not entries:
        raise InvalidMachineConfig("Catalog must define a non-empty 'machines' list.")
    machines: List[Machine] = [_machine_from_dict(e, i) for i, e in enumerate(entries)]

    weights = data.get("weights")
    if weights is None:
        weights = dict(DEFAULT_SYMBOL_WEIGHTS)
    elif not isinstance(weights, dict):
        raise InvalidMachineConfig("'weights' must be an object.")
    for symbol, weight in weights.items():
        if isinstance(weight, bool) or not isinstance(weight, int) or weight <= 0:
            raise InvalidMachineConfig(f"Weight for {symbol!r} must be a positive integer.")

    catalog = MachineCatalog(machines)
    logger.info("Loaded %d machines from %s", len(catalog), path)
    return catalog, MappingProxyType(dict(weights))
