"""Shared fixtures: fake transports standing in for the network."""

import json
from typing import Any, Callable, List, Optional, Tuple

import pytest

from dep_health.config import EngineConfig
from dep_health.core.ecosystems import Severity
from dep_health.core.models import (
    AdvisoryFinding,
    AdvisorySourceKind,
    EventRange,
    ExplicitVersions,
    RangeEvent,
)
from dep_health.http.client import FetchResponse

Handler = Callable[[str, str, Optional[Any]], Any]


class FakeFetchClient:
    """Stands in for FetchClient; a handler decides what each request returns.

    The handler receives (method, url, json_body) and returns a payload to
    serve as JSON with status 200, a FetchResponse, None for a 404, or an
    exception instance to raise.
    """

    def __init__(self, handler: Handler, config: Optional[EngineConfig] = None) -> None:
        self.handler = handler
        self.config = config or EngineConfig(backoff_seconds=0)
        self.calls: List[Tuple[str, str, Optional[Any], Optional[dict]]] = []

    async def request(self, url, method="GET", json=None, headers=None):
        self.calls.append((method, url, json, headers))
        outcome = self.handler(method, url, json)
        if isinstance(outcome, BaseException):
            raise outcome
        if isinstance(outcome, FetchResponse):
            return outcome
        if outcome is None:
            return FetchResponse(url=url, status=404, text='{"message": "Not Found"}')
        return FetchResponse(url=url, status=200, text=_dumps(outcome))


def _dumps(payload: Any) -> str:
    return json.dumps(payload)


@pytest.fixture
def make_client():
    """Factory for FakeFetchClient instances."""
    def factory(handler: Handler, config: Optional[EngineConfig] = None) -> FakeFetchClient:
        return FakeFetchClient(handler, config)
    return factory


@pytest.fixture
def explicit_finding():
    """Finding whose affected range is an explicit version list."""
    return AdvisoryFinding(
        id="GHSA-explicit",
        source=AdvisorySourceKind.GITHUB_ADVISORY,
        package_name="lodash",
        summary="Prototype pollution in lodash",
        severity=Severity.HIGH,
        ranges=(ExplicitVersions(("4.17.0", "4.17.1")),),
    )


@pytest.fixture
def interval_finding():
    """Finding whose affected range is an introduced/fixed interval."""
    return AdvisoryFinding(
        id="GHSA-interval",
        source=AdvisorySourceKind.OSV,
        package_name="lodash",
        summary="Command injection in lodash",
        severity=Severity.HIGH,
        ranges=(EventRange((
            RangeEvent(RangeEvent.INTRODUCED, "4.0.0"),
            RangeEvent(RangeEvent.FIXED, "4.17.21"),
        )),),
    )


@pytest.fixture
def lodash_osv_vuln():
    """OSV record for a lodash advisory affecting every version below 4.17.21."""
    return {
        "id": "GHSA-35jh-r3h4-6jhm",
        "summary": "Command Injection in lodash",
        "aliases": ["CVE-2021-23337"],
        "severity": [
            {"type": "CVSS_V3", "score": "CVSS:3.1/AV:N/AC:L/PR:H/UI:N/S:U/C:H/I:H/A:H"}
        ],
        "database_specific": {"severity": "HIGH"},
        "affected": [
            {
                "package": {"ecosystem": "npm", "name": "lodash"},
                "ranges": [
                    {"type": "SEMVER", "events": [{"introduced": "0"}, {"fixed": "4.17.21"}]}
                ],
            }
        ],
        "references": [
            {"type": "ADVISORY", "url": "https://nvd.nist.gov/vuln/detail/CVE-2021-23337"}
        ],
        "published": "2021-05-06T16:05:51Z",
        "modified": "2024-03-11T05:24:58Z",
    }
