"""Latest published version lookups, one per registry ecosystem."""

import re
from typing import Any, Optional
from urllib.parse import quote

from ..config import EngineConfig
from ..core.ecosystems import Ecosystem, classify
from ..core.models import StalenessRecord
from ..core.versions import NormalizedVersion, normalize
from ..errors import NetworkError
from ..http.client import FetchClient
from ..sources.base import SCHEMA_ERRORS
from ..utils.logging import get_logger

JSON_HEADERS = {"Accept": "application/json"}

_UPPERCASE = re.compile(r'[A-Z]')


def escape_module_path(path: str) -> str:
    """Case-encode a Go module path for the module proxy.

    Each uppercase letter becomes ``!`` followed by its lowercase form,
    so ``github.com/Azure/x`` is requested as ``github.com/!azure/x``.
    """
    return _UPPERCASE.sub(lambda m: '!' + m.group(0).lower(), path)


class LatestVersionResolver:
    """Asks each ecosystem's registry for the newest published version."""

    def __init__(self, client: FetchClient, config: Optional[EngineConfig] = None) -> None:
        """Initialize the resolver.

        Args:
            client: Shared fetch client
            config: Engine configuration (registry URLs)
        """
        self.client = client
        self.config = config or client.config
        self.logger = get_logger("LatestVersionResolver")
        self._lookups = {
            Ecosystem.NPM: self._npm_latest,
            Ecosystem.PYPI: self._pypi_latest,
            Ecosystem.MAVEN: self._maven_latest,
            Ecosystem.NUGET: self._nuget_latest,
            Ecosystem.GO: self._go_latest,
            Ecosystem.RUBYGEMS: self._rubygems_latest,
        }

    async def resolve(self, package_name: str, ecosystem: Optional[Ecosystem] = None) -> Optional[NormalizedVersion]:
        """Resolve the latest version of a package.

        Args:
            package_name: Package name
            ecosystem: Registry to ask; classified from the name when omitted

        Returns:
            The normalized latest version, or None when it cannot be determined
        """
        ecosystem = ecosystem or classify(package_name)
        lookup = self._lookups.get(ecosystem)
        if lookup is None:
            self.logger.warning(f"Unsupported package ecosystem: {ecosystem} for {package_name}")
            return None

        try:
            raw = await lookup(package_name)
        except NetworkError as e:
            self.logger.warning(f"Failed to get {ecosystem.value} latest version for {package_name}: {e}")
            return None
        except SCHEMA_ERRORS as e:
            self.logger.warning(f"Unexpected {ecosystem.value} registry payload for {package_name}: {e!r}")
            return None

        if not isinstance(raw, str) or not raw:
            return None

        latest = normalize(raw)
        return latest if latest.valid else None

    async def _get_json(self, url: str) -> Optional[Any]:
        response = await self.client.request(url, headers=JSON_HEADERS)
        if not response.ok:
            self.logger.debug(f"Registry returned {response.status} for {url}")
            return None
        return response.json()

    async def _npm_latest(self, package_name: str) -> Optional[str]:
        # scoped names keep their "@" but encode the "/"
        url = f"{self.config.npm_registry_url}/{quote(package_name, safe='@')}/latest"
        data = await self._get_json(url)
        return data.get("version") if data else None

    async def _pypi_latest(self, package_name: str) -> Optional[str]:
        data = await self._get_json(f"{self.config.pypi_url}/{quote(package_name, safe='')}/json")
        return data["info"]["version"] if data else None

    async def _maven_latest(self, package_name: str) -> Optional[str]:
        if ':' in package_name:
            group_id, artifact_id = package_name.split(':', 2)[:2]
        else:
            group_id = artifact_id = package_name

        url = (
            f"{self.config.maven_search_url}"
            f"?q=g:%22{quote(group_id, safe='')}%22+AND+a:%22{quote(artifact_id, safe='')}%22&rows=1&wt=json"
        )
        data = await self._get_json(url)
        if not data:
            return None
        docs = data["response"]["docs"]
        return docs[0].get("latestVersion") if docs else None

    async def _nuget_latest(self, package_name: str) -> Optional[str]:
        url = f"{self.config.nuget_url}/{quote(package_name.lower(), safe='')}/index.json"
        data = await self._get_json(url)
        versions = data.get("versions") if data else None
        return versions[-1] if versions else None

    async def _go_latest(self, package_name: str) -> Optional[str]:
        module_path = escape_module_path(package_name)
        data = await self._get_json(f"{self.config.go_proxy_url}/{module_path}/@latest")
        return data.get("Version") if data else None

    async def _rubygems_latest(self, package_name: str) -> Optional[str]:
        data = await self._get_json(f"{self.config.rubygems_url}/{quote(package_name, safe='')}.json")
        return data.get("version") if data else None


def assess_staleness(package_name: str, current: Any, latest: Any) -> StalenessRecord:
    """Compare a declared version with the latest published one.

    A dependency is outdated only when both versions parse and the latest is
    strictly newer. Unparsable versions are never reported outdated.

    Args:
        package_name: Package name
        current: Declared version or specifier
        latest: Latest published version

    Returns:
        The staleness record
    """
    current_version = normalize(current)
    latest_version = normalize(latest)

    is_outdated = (
        current_version.valid
        and latest_version.valid
        and latest_version > current_version
    )

    return StalenessRecord(
        package_name=package_name,
        current_version=current_version,
        latest_version=latest_version,
        is_outdated=is_outdated,
        is_major_bump=is_outdated and latest_version.major != current_version.major,
    )
