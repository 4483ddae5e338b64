import pytest

from multinode import load_nodes


def test_load_nodes_in_file_order(node_config):
    path = node_config({
        "driver": "postgres",
        "nodes": [
            {"id": "east", "host": "10.0.0.1", "user": "app", "password": "pw", "database": "shop"},
            {"id": "west", "url": "mysql://app:pw@10.0.0.2:3307/shop"},
            {"driver": "sqlite", "database": "/var/data/local.db"},
        ],
    })

    east, west, local = load_nodes(path)

    assert (east.id, east.driver, east.host, east.database) == ("east", "postgres", "10.0.0.1", "shop")
    assert (west.id, west.driver, west.port) == ("west", "mysql", 3307)
    assert (local.id, local.driver) == (None, "sqlite")


def test_env_overrides(node_config, monkeypatch):
    path = node_config({"nodes": [{"database": "shop"}]})
    monkeypatch.setenv("MULTINODE_CONFIG", path)
    monkeypatch.setenv("MULTINODE_DRIVER", "pg")

    (spec,) = load_nodes()

    assert spec.driver == "postgres"


def test_default_driver_is_mysql(node_config, monkeypatch):
    monkeypatch.delenv("MULTINODE_DRIVER", raising=False)

    (spec,) = load_nodes(node_config({"nodes": [{"dbname": "shop", "dbhost": "h"}]}))

    assert (spec.driver, spec.database, spec.host) == ("mysql", "shop", "h")


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_nodes(str(tmp_path / "nope.json"))


def test_empty_nodes(node_config):
    with pytest.raises(ValueError):
        load_nodes(node_config({"driver": "mysql", "nodes": []}))


def test_null_driver_falls_back_to_mysql(node_config, monkeypatch):
    monkeypatch.delenv("MULTINODE_DRIVER", raising=False)
    path = node_config({"driver": None, "nodes": [{"database": "shop"}]})

    (spec,) = load_nodes(path)

    assert spec.driver == "mysql"
