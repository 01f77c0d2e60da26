# tests/test_config.py
from connhold.core import OpenerConfig, ServerConfig, parse_num_conns


def test_missing_or_empty_means_one():
    assert parse_num_conns(None) == 1
    assert parse_num_conns("") == 1
    assert parse_num_conns("   ") == 1


def test_numeric():
    assert parse_num_conns("3") == 3
    assert parse_num_conns(" 12 ") == 12
    assert parse_num_conns(7) == 7
    assert parse_num_conns("0") == 0


def test_non_numeric_falls_back_to_one():
    assert parse_num_conns("abc") == 1
    assert parse_num_conns("2.5") == 1


def test_negative_runs_zero_times():
    assert parse_num_conns("-4") == 0
    assert parse_num_conns(-1) == 0


def test_defaults():
    oc = OpenerConfig()
    assert (oc.host, oc.port, oc.num_conns) == ("localhost", 6379, 1)
    sc = ServerConfig()
    assert sc.max_connections == 100
    assert sc.hold_seconds == 5.0
    assert sc.address == "127.0.0.1:6379"
