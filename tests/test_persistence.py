import pytest

from flight_manager import (
    FlightRegistry,
    PersistenceError,
    load_registry,
    parse_records,
    save_registry,
)


def triples(registry):
    return [(f.id, f.capacity, f.reserved) for f in registry.list_flights()]


def test_save_writes_one_line_per_flight(registry, tmp_path):
    registry.create(7, 100)
    registry.create(3, 20)
    registry.reserve(7, 42)
    path = tmp_path / "flights.txt"

    save_registry(registry, str(path))

    assert path.read_text(encoding="utf-8") == "7 100 42\n3 20 0\n"
    assert not (tmp_path / "flights.txt.tmp").exists()


def test_save_then_load_round_trip(registry, tmp_path):
    registry.create(5, 10)
    registry.create(0, 30)
    registry.create(2, 200)
    registry.reserve(5, 10)
    registry.reserve(2, 210)
    path = str(tmp_path / "flights.txt")

    save_registry(registry, path)
    loaded = FlightRegistry()
    assert load_registry(loaded, path) is True

    assert triples(loaded) == [(5, 10, 10), (0, 30, 0), (2, 200, 210)]


def test_save_overwrites_existing_file(registry, tmp_path):
    path = tmp_path / "flights.txt"
    path.write_text("1 1 1\n2 2 2\n3 3 3\n", encoding="utf-8")
    registry.create(9, 9)

    save_registry(registry, str(path))

    assert path.read_text(encoding="utf-8") == "9 9 0\n"


def test_save_empty_registry(registry, tmp_path):
    path = tmp_path / "flights.txt"
    save_registry(registry, str(path))
    assert path.read_text(encoding="utf-8") == ""


def test_load_missing_file_leaves_registry_alone(registry, tmp_path):
    registry.create(1, 10)
    assert load_registry(registry, str(tmp_path / "nope.txt")) is False
    assert triples(registry) == [(1, 10, 0)]


def test_load_replaces_contents(registry, tmp_path):
    path = tmp_path / "flights.txt"
    path.write_text("4 40 4\n", encoding="utf-8")
    registry.create(1, 10)

    load_registry(registry, str(path))

    assert triples(registry) == [(4, 40, 4)]


def test_load_normalizes_hand_edited_values(registry, tmp_path):
    path = tmp_path / "flights.txt"
    path.write_text("1 100 200\n2 -5 -3\n3 7 9\n", encoding="utf-8")

    load_registry(registry, str(path))

    assert triples(registry) == [(1, 100, 105), (2, 0, 0), (3, 7, 7)]


def test_load_accepts_any_whitespace(registry, tmp_path):
    path = tmp_path / "flights.txt"
    path.write_text("1 100\n  5\t2 50 0\n\n\n", encoding="utf-8")

    load_registry(registry, str(path))

    assert triples(registry) == [(1, 100, 5), (2, 50, 0)]


def test_load_keeps_first_of_duplicate_ids(registry, tmp_path):
    path = tmp_path / "flights.txt"
    path.write_text("1 10 0\n1 20 5\n2 5 1\n", encoding="utf-8")

    load_registry(registry, str(path))

    assert triples(registry) == [(1, 10, 0), (2, 5, 1)]


def test_load_rejects_non_integer(registry, tmp_path):
    path = tmp_path / "flights.txt"
    path.write_text("1 10 0\n2 abc 0\n", encoding="utf-8")
    registry.create(8, 80)

    with pytest.raises(PersistenceError, match="line 2"):
        load_registry(registry, str(path))
    assert triples(registry) == [(8, 80, 0)]


def test_parse_rejects_incomplete_record():
    with pytest.raises(PersistenceError, match="incomplete"):
        parse_records(["1 10 0\n", "2 5\n"])


def test_persistence_error_is_value_error():
    assert issubclass(PersistenceError, ValueError)
