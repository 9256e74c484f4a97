"""Fixtures partilhadas: payloads de exemplo da API e um servidor BunnyCDN falso."""

import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import parse_qs, urlsplit

import pytest

PULL_ZONES = [
    {
        "Id": 34567,
        "Name": "pullzonename2",
        "OriginUrl": "https://storage.googleapis.com/gcs-bucket-example",
        "Enabled": True,
        "Hostnames": [{"Id": 43217, "Value": "pullzonename2.b-cdn.net", "ForceSSL": True}],
        "MonthlyBandwidthUsed": 74309996,
        "MonthlyCharges": 0.000831675729999988,
        "CnameDomain": "b-cdn.net",
    },
    {
        "Id": 12345,
        "Name": "pullzonename",
        "OriginUrl": "http://origin.url.com",
        "Enabled": True,
        "Hostnames": [{"Id": 54321, "Value": "pullzonename.b-cdn.net", "ForceSSL": False}],
        "MonthlyBandwidthUsed": 0,
        "MonthlyCharges": 0,
        "CnameDomain": "b-cdn.net",
    },
]

STATISTICS = {
    "TotalBandwidthUsed": 28639956,
    "TotalRequestsServed": 1261,
    "CacheHitRate": 100,
    "OriginResponseTimeChart": {"2019-05-02T00:00:00Z": 42},
    "BandwidthUsedChart": {"2019-05-02T00:00:00Z": 28639956},
    "BandwidthCachedChart": {"2019-05-02T00:00:00Z": 28000000},
    "CacheHitRateChart": {"2019-05-02T00:00:00Z": 0},
    "RequestsServedChart": {"2019-05-02T00:00:00Z": 1261},
    "PullRequestsPulledChart": {"2019-05-02T00:00:00Z": 0},
    "UserBalanceHistoryChart": {"2019-05-02T00:37:51": 1000},
    "UserStorageUsedChart": {"2019-05-02T09:35:02": 0},
    "GeoTrafficDistribution": {
        "EU: London, UK": 6040860,
        "NA: Los Angeles, CA": 5719265,
        "NA: Atlanta, GA": 2864106,
        "NA: New York City, NY": 2861460,
        "EU: Amsterdam, NL": 2566343,
        "NA: Chicago, IL": 2864106,
        "EU: Oslo, NO": 2884170,
        "EU: Frankfurt, DE": 2839646,
    },
    "Error3xxChart": {"2019-05-02T00:00:00Z": 3},
    "Error4xxChart": {"2019-05-02T00:00:00Z": 4},
    "Error5xxChart": {"2019-05-02T00:00:00Z": 5},
}


@pytest.fixture
def pull_zones_payload():
    return json.loads(json.dumps(PULL_ZONES))


@pytest.fixture
def statistics_payload():
    return json.loads(json.dumps(STATISTICS))


class FakeBunny:
    """Estado do servidor falso: respostas por caminho e requisições recebidas.

    ``routes`` mapeia o caminho (sem query) para ``(status, corpo)`` ou para um
    callable ``(query) -> (status, corpo)``. Corpos que não sejam bytes são
    serializados em JSON.
    """

    def __init__(self):
        self.routes = {}
        self.requests = []
        self.url = ""

    def respond(self, path, query):
        route = self.routes.get(path)
        if route is None:
            return 404, b"error"
        if callable(route):
            route = route(query)
        status, body = route
        if not isinstance(body, bytes):
            body = json.dumps(body).encode("utf-8")
        return status, body


@pytest.fixture
def fake_bunny():
    """Servidor HTTP local que imita a API do BunnyCDN numa porta efêmera."""
    state = FakeBunny()

    class Handler(BaseHTTPRequestHandler):
        def do_GET(self):
            parts = urlsplit(self.path)
            query = {k: v[0] for k, v in parse_qs(parts.query).items()}
            state.requests.append({"path": parts.path, "query": query, "headers": dict(self.headers)})
            status, body = state.respond(parts.path, query)
            self.send_response(status)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, format, *args):
            pass

    server = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    state.url = f"http://127.0.0.1:{server.server_address[1]}"
    try:
        yield state
    finally:
        server.shutdown()
        server.server_close()
