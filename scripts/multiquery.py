#!/usr/bin/env python3
"""Run one SQL statement across every configured node and print the merged rows."""

import argparse
import json
import logging
import os
import sys

from connectors import StatementError
from multinode import MultiNodeDB, NoNodeAvailable, load_nodes

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def parse_args(argv=None):
    p = argparse.ArgumentParser(description=__doc__)
    p.add_argument("sql", nargs="?", help="statement to run")
    p.add_argument("--config", help="node config (default ~/.multinode.json)")
    p.add_argument("--single", action="store_true", help="run on the first reachable node only")
    p.add_argument("--expanded", action="store_true", help="include every node in each merged row")
    p.add_argument("--count", action="store_true", help="print row counts instead of rows")
    p.add_argument("--status", action="store_true", help="print node reachability and exit")
    p.add_argument("-v", "--verbose", action="store_true")
    args = p.parse_args(argv)
    if not args.sql and not args.status:
        p.error("sql is required unless --status is given")
    return args


def status(db, out):
    for entry in db.nodes():
        up = db.connect_node(entry.index)
        line = {"id": entry.id, "index": entry.index, "driver": entry.spec.driver, "reachable": up}
        if not up:
            line["error"] = entry.error or entry.connection.last_error()
        print(json.dumps(line, default=str), file=out)
    return 0


def run(args, out=sys.stdout):
    db = MultiNodeDB(load_nodes(args.config))
    with db:
        if args.status:
            return status(db, out)

        try:
            if args.single:
                q, node_id = db.query(args.sql)
                try:
                    print(json.dumps({"node": node_id}, default=str), file=out)
                    if args.count:
                        print(json.dumps({"total": q.row_count()}), file=out)
                    else:
                        for row in q:
                            print(json.dumps(row, default=str), file=out)
                finally:
                    q.release()
                return 0

            with db.multi_query(args.sql) as q:
                for o in q.outcomes:
                    if o.error is not None:
                        print(f"node {o.id!r}: {o.error}", file=sys.stderr)
                if args.count:
                    by_node = []
                    total = q.total_row_count(by_node)
                    per_node = [{"id": node_id, "rows": n} for node_id, n in by_node]
                    print(json.dumps({"total": total, "by_node": per_node}, default=str), file=out)
                    return 0
                for merged in q.rows(expanded=args.expanded):
                    print(json.dumps([s._asdict() for s in merged], default=str), file=out)
            return 0
        except NoNodeAvailable as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 1
        except StatementError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 1


def main(argv=None):
    args = parse_args(argv)
    level = "DEBUG" if args.verbose else os.environ.get("MULTINODE_LOG_LEVEL", "WARNING")
    logging.basicConfig(level=getattr(logging, level.upper(), logging.WARNING), format=LOG_FORMAT)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
