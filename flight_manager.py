#!/usr/bin/env python3
from __future__ import annotations

import argparse
import copy
import os
import sys
from enum import Enum
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from loguru import logger

# silent when imported; the CLI turns it back on in configure_logging
logger.disable(__name__)

OVERBOOKING_PERCENT = 105


# ---------------------------
# Outcomes
# ---------------------------

class Outcome(str, Enum):
    OK = "OK"
    DUPLICATE_ID = "DUPLICATE_ID"
    NOT_FOUND = "NOT_FOUND"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    INSUFFICIENT_RESERVED = "INSUFFICIENT_RESERVED"


class PersistenceError(ValueError):
    """Raised when a flights file cannot be parsed."""


# ---------------------------
# Data Model
# ---------------------------

class FlightRecord:
    """
    One flight's seat state. Out-of-range values passed to the constructor are
    normalized rather than rejected, so hand-edited files still load:
    negative counts become 0 and an overbooked reserved count is cut back to
    the 105% ceiling. Afterwards all three fields are read-only; reserved
    only moves through reserve_seats/cancel_seats, which refuse anything
    that would break the ceiling.
    """

    def __init__(self, id: int, capacity: int, reserved: int = 0) -> None:
        capacity = max(capacity, 0)
        reserved = max(reserved, 0)
        if 100 * reserved > OVERBOOKING_PERCENT * capacity:
            reserved = (OVERBOOKING_PERCENT * capacity) // 100
        self._id = id
        self._capacity = capacity
        self._reserved = reserved

    def __repr__(self) -> str:
        return f"FlightRecord(id={self._id}, capacity={self._capacity}, reserved={self._reserved})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FlightRecord):
            return NotImplemented
        return (self._id, self._capacity, self._reserved) == (other._id, other._capacity, other._reserved)

    @property
    def id(self) -> int:
        return self._id

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def reserved(self) -> int:
        return self._reserved

    @property
    def load_factor(self) -> float:
        if self._capacity == 0:
            return 0.0
        return 100.0 * self._reserved / self._capacity

    def reserve_seats(self, seats: int) -> bool:
        if seats <= 0 or 100 * (self._reserved + seats) > OVERBOOKING_PERCENT * self._capacity:
            return False
        self._reserved += seats
        return True

    def cancel_seats(self, seats: int) -> bool:
        if seats <= 0 or seats > self._reserved:
            return False
        self._reserved -= seats
        return True


# ---------------------------
# Registry
# ---------------------------

class FlightRegistry:
    def __init__(self) -> None:
        # insertion order is display order
        self._flights: Dict[int, FlightRecord] = {}

    def __len__(self) -> int:
        return len(self._flights)

    def __contains__(self, flight_id: object) -> bool:
        return flight_id in self._flights

    def get(self, flight_id: int) -> Optional[FlightRecord]:
        flight = self._flights.get(flight_id)
        return copy.copy(flight) if flight is not None else None

    def list_flights(self) -> List[FlightRecord]:
        """Snapshot of all flights in insertion order. Empty list means no flights."""
        return [copy.copy(f) for f in self._flights.values()]

    def add_record(self, record: FlightRecord) -> Outcome:
        if record.id in self._flights:
            return Outcome.DUPLICATE_ID
        self._flights[record.id] = record
        return Outcome.OK

    def create(self, flight_id: int, capacity: int) -> Outcome:
        outcome = self.add_record(FlightRecord(id=flight_id, capacity=capacity))
        logger.debug("create flight {} capacity={}: {}", flight_id, capacity, outcome.value)
        return outcome

    def delete(self, flight_id: int) -> Outcome:
        if self._flights.pop(flight_id, None) is None:
            logger.debug("delete flight {}: not found", flight_id)
            return Outcome.NOT_FOUND
        logger.debug("deleted flight {}", flight_id)
        return Outcome.OK

    def reserve(self, flight_id: int, seats: int) -> Outcome:
        return self._apply(flight_id, seats, FlightRecord.reserve_seats, Outcome.CAPACITY_EXCEEDED)

    def cancel(self, flight_id: int, seats: int) -> Outcome:
        return self._apply(flight_id, seats, FlightRecord.cancel_seats, Outcome.INSUFFICIENT_RESERVED)

    def clear(self) -> None:
        self._flights.clear()

    def _apply(
        self,
        flight_id: int,
        seats: int,
        op: Callable[[FlightRecord, int], bool],
        rejected: Outcome,
    ) -> Outcome:
        flight = self._flights.get(flight_id)
        if flight is None:
            outcome = Outcome.NOT_FOUND
        elif seats <= 0:
            outcome = Outcome.INVALID_QUANTITY
        elif not op(flight, seats):
            outcome = rejected
        else:
            outcome = Outcome.OK
        logger.debug("{} {} seats on flight {}: {}", op.__name__, seats, flight_id, outcome.value)
        return outcome


# ---------------------------
# Persistence
# ---------------------------

def parse_records(lines: Iterable[str]) -> List[FlightRecord]:
    """
    Parse "id capacity reserved" triples. Triples are whitespace separated
    and may span lines; reading stops at end of input.
    """
    tokens: List[Tuple[int, int]] = []
    for lineno, line in enumerate(lines, start=1):
        for raw in line.split():
            try:
                tokens.append((lineno, int(raw)))
            except ValueError:
                raise PersistenceError(f"line {lineno}: not an integer: {raw!r}") from None

    if len(tokens) % 3:
        raise PersistenceError(f"line {tokens[-1][0]}: incomplete flight record")

    records: List[FlightRecord] = []
    for i in range(0, len(tokens), 3):
        flight_id, capacity, reserved = (value for _, value in tokens[i:i + 3])
        records.append(FlightRecord(id=flight_id, capacity=capacity, reserved=reserved))
    return records


def format_records(records: Iterable[FlightRecord]) -> Iterator[str]:
    for f in records:
        yield f"{f.id} {f.capacity} {f.reserved}\n"


def load_registry(registry: FlightRegistry, path: str) -> bool:
    """
    Replace the registry contents with the flights stored at `path`.
    Returns False and leaves the registry alone if the file does not exist.
    """
    if not os.path.exists(path):
        logger.info("no saved data at {}", path)
        return False

    with open(path, "r", encoding="utf-8") as f:
        records = parse_records(f)

    registry.clear()
    for record in records:
        if registry.add_record(record) is Outcome.DUPLICATE_ID:
            logger.warning("{}: skipping duplicate flight {}", path, record.id)
    logger.info("loaded {} flights from {}", len(registry), path)
    return True


def save_registry(registry: FlightRegistry, path: str) -> None:
    tmp = f"{path}.tmp"
    with open(tmp, "w", encoding="utf-8") as f:
        f.writelines(format_records(registry.list_flights()))
    os.replace(tmp, path)
    logger.info("saved {} flights to {}", len(registry), path)


# ---------------------------
# Display
# ---------------------------

RULE = "-" * 50


def format_flight_table(flights: List[FlightRecord]) -> str:
    if not flights:
        return "No flights in the system."
    out: List[str] = [RULE]
    out.append(f"{'FlightID':>10}{'Capacity':>12}{'Reserved':>12}{'Load %':>12}")
    out.append(RULE)
    for f in flights:
        out.append(f"{f.id:>10}{f.capacity:>12}{f.reserved:>12}{f.load_factor:>12.1f}%")
    out.append(RULE)
    return "\n".join(out)


def describe(outcome: Outcome, action: str, flight_id: int, count: int = 0) -> str:
    if outcome is Outcome.OK:
        return {
            "create": f"Flight {flight_id} created with capacity {count}.",
            "delete": f"Flight {flight_id} deleted.",
            "reserve": f"Reserved {count} seats for flight {flight_id}.",
            "cancel": f"Canceled {count} seats for flight {flight_id}.",
        }[action]
    return {
        Outcome.DUPLICATE_ID: f"Flight {flight_id} already exists.",
        Outcome.NOT_FOUND: "Flight not found.",
        Outcome.INVALID_QUANTITY: f"Cannot {action} (invalid number).",
        Outcome.CAPACITY_EXCEEDED: "Cannot reserve (may exceed capacity).",
        Outcome.INSUFFICIENT_RESERVED: "Cannot cancel (not that many seats reserved).",
    }[outcome]


def report(outcome: Outcome, action: str, flight_id: int, count: int = 0) -> int:
    message = describe(outcome, action, flight_id, count)
    if outcome is Outcome.OK:
        print(message)
        return 0
    print(f"ERROR: {message}", file=sys.stderr)
    return 1


# ---------------------------
# CLI
# ---------------------------

def configure_logging(level: str) -> None:
    logger.enable(__name__)
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<lk>{time:HH:mm:ss}</> | <lvl>{level:<7}</> | {message}",
    )


def cmd_create(args: argparse.Namespace, registry: FlightRegistry) -> int:
    outcome = registry.create(args.flight_id, args.capacity)
    return report(outcome, "create", args.flight_id, max(args.capacity, 0))


def cmd_delete(args: argparse.Namespace, registry: FlightRegistry) -> int:
    return report(registry.delete(args.flight_id), "delete", args.flight_id)


def cmd_reserve(args: argparse.Namespace, registry: FlightRegistry) -> int:
    outcome = registry.reserve(args.flight_id, args.seats)
    return report(outcome, "reserve", args.flight_id, args.seats)


def cmd_cancel(args: argparse.Namespace, registry: FlightRegistry) -> int:
    outcome = registry.cancel(args.flight_id, args.seats)
    return report(outcome, "cancel", args.flight_id, args.seats)


def cmd_list(args: argparse.Namespace, registry: FlightRegistry) -> int:
    print(format_flight_table(registry.list_flights()))
    return 0


MENU = """
====== Flight Booking System ======
1. Create Flight
2. Delete Flight
3. Reserve Seats
4. Cancel Seats
5. Show All Flights
6. Save and Exit
------------------------------------"""


def _read_ints(prompt: str, count: int) -> Optional[List[int]]:
    parts = input(prompt).split()
    if len(parts) != count:
        return None
    try:
        return [int(p) for p in parts]
    except ValueError:
        return None


def cmd_shell(args: argparse.Namespace, registry: FlightRegistry) -> int:
    """
    Numbered menu driven from stdin. Option 6 (or end of input) saves the
    registry to the state file and returns.
    """
    if args.loaded:
        print(f"Data loaded from {args.state_file}")
    else:
        print("No saved data found.")

    prompts = {
        "1": ("Enter Flight ID and Capacity: ", 2),
        "2": ("Enter Flight ID to delete: ", 1),
        "3": ("Enter Flight ID and number of seats to reserve: ", 2),
        "4": ("Enter Flight ID and number of seats to cancel: ", 2),
    }
    try:
        while True:
            print(MENU)
            choice = input("Choose an option: ").strip()
            if choice == "5":
                print(format_flight_table(registry.list_flights()))
                continue
            if choice == "6":
                break
            if choice not in prompts:
                print("Invalid option. Try again.")
                continue

            prompt, count = prompts[choice]
            values = _read_ints(prompt, count)
            if values is None:
                print("Invalid input. Try again.")
                continue

            if choice == "1":
                flight_id, capacity = values
                report(registry.create(flight_id, capacity), "create", flight_id, max(capacity, 0))
            elif choice == "2":
                report(registry.delete(values[0]), "delete", values[0])
            elif choice == "3":
                flight_id, seats = values
                report(registry.reserve(flight_id, seats), "reserve", flight_id, seats)
            else:
                flight_id, seats = values
                report(registry.cancel(flight_id, seats), "cancel", flight_id, seats)
    except EOFError:
        print("")

    save_registry(registry, args.state_file)
    print(f"Data saved to {args.state_file}")
    print("Goodbye!")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="flight-manager", description="Flight seat booking manager")
    parser.add_argument(
        "--state-file",
        default="flights.txt",
        help="Path to the flights file (default: flights.txt)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level for diagnostics on stderr (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_create = sub.add_parser("create", help="Create a flight")
    p_create.add_argument("flight_id", type=int)
    p_create.add_argument("capacity", type=int)
    p_create.set_defaults(func=cmd_create)

    p_delete = sub.add_parser("delete", help="Delete a flight")
    p_delete.add_argument("flight_id", type=int)
    p_delete.set_defaults(func=cmd_delete)

    p_reserve = sub.add_parser("reserve", help="Reserve seats on a flight")
    p_reserve.add_argument("flight_id", type=int)
    p_reserve.add_argument("seats", type=int)
    p_reserve.set_defaults(func=cmd_reserve)

    p_cancel = sub.add_parser("cancel", help="Cancel reserved seats on a flight")
    p_cancel.add_argument("flight_id", type=int)
    p_cancel.add_argument("seats", type=int)
    p_cancel.set_defaults(func=cmd_cancel)

    p_list = sub.add_parser("list", help="Show all flights")
    p_list.set_defaults(func=cmd_list)

    p_shell = sub.add_parser("shell", help="Interactive menu")
    p_shell.set_defaults(func=cmd_shell, autosave=False)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(args.log_level)

    registry = FlightRegistry()
    try:
        args.loaded = load_registry(registry, args.state_file)
        rc = args.func(args, registry)
        # only successful commands touch the file; the shell saves on its own
        if rc == 0 and getattr(args, "autosave", True):
            save_registry(registry, args.state_file)
        return rc
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
