"""
Load node lists from ~/.multinode.json.

    {
      "driver": "mysql",
      "nodes": [
        {"id": "east", "host": "10.0.0.1", "user": "app", "password": "pw", "database": "shop"},
        {"id": "west", "url": "mysql://app:pw@10.0.0.2/shop"},
        {"id": "local", "driver": "sqlite", "database": "~/shop.db"}
      ]
    }

MULTINODE_CONFIG overrides the path; MULTINODE_DRIVER overrides the
default driver for nodes that don't name one.
"""

import json
import os

from .registry import NodeSpec

CFG_PATH = os.path.expanduser("~/.multinode.json")


def config_path(path: str = None) -> str:
    return os.path.expanduser(path or os.environ.get("MULTINODE_CONFIG") or CFG_PATH)


def load_nodes(path: str = None) -> list[NodeSpec]:
    """Read the config file and return its node specs in file order."""
    path = config_path(path)
    if not os.path.exists(path):
        raise FileNotFoundError(
            f"No node config at {path}. "
            f"Create ~/.multinode.json or set MULTINODE_CONFIG."
        )

    with open(path) as f:
        cfg = json.load(f)

    driver = (
        os.environ.get("MULTINODE_DRIVER")
        or cfg.get("driver")
        or "mysql"
    ).lower().strip()

    nodes = cfg.get("nodes") or []
    if not nodes:
        raise ValueError(f"No 'nodes' in {path}")

    return [NodeSpec.from_dict(n, driver=driver) for n in nodes]
