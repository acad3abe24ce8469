"""Shared fixtures: a fixed NodeIdentity plus stub fetch and restart."""

import json

import pytest

from nodewatch.errors import TransportError
from nodewatch.models import FetchResult, NodeIdentity, RestartResult

NODE_HOST = "coti-testnet.skint.network"


class StubFetch:
    """Serves canned responses by URL and records every call.

    Values may be a FetchResult, an Exception instance (raised), or a
    dict (served as a 200 JSON body).
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []

    def __call__(self, url, timeout=None):
        self.calls.append((url, timeout))
        if url not in self.routes:
            raise TransportError(url, "no route")
        value = self.routes[url]
        if isinstance(value, Exception):
            raise value
        if isinstance(value, dict):
            return FetchResult(status_code=200, body=json.dumps(value))
        return value

    def urls(self):
        return [url for url, _ in self.calls]


class StubRestarter:
    def __init__(self, result=None):
        self.calls = 0
        self.result = result or RestartResult(issued=True, returncode=0)

    def restart(self):
        self.calls += 1
        return self.result


@pytest.fixture
def identity():
    return NodeIdentity(
        network="testnet",
        node_host=NODE_HOST,
        node_url=f"https://{NODE_HOST}",
        reference_url="https://testnet-financialserver.coti.io",
        registry_url="https://testnet-nodemanager.coti.io",
        unsync_tolerance=10,
        restart_command="systemctl restart cnode.service",
        fetch_timeout=5,
        check_interval=60,
    )


@pytest.fixture
def restarter():
    return StubRestarter()


def registry_listing(*hosts):
    """Build a node-manager style JSON listing containing *hosts*."""
    return json.dumps({
        "fullNodes": [{"url": f"https://{h}", "nodeHash": "abc"} for h in hosts]
    })


def make_routes(identity, registry=None, local=None, reference=None):
    """Route table for one cycle.  Integers become lastIndex bodies."""
    routes = {}
    if registry is not None:
        routes[identity.nodes_url] = registry
    for base, value in ((identity.node_url, local),
                        (identity.reference_url, reference)):
        if value is None:
            continue
        if isinstance(value, int):
            value = {"lastIndex": value}
        routes[base + "/transaction/lastIndex"] = value
    return routes
