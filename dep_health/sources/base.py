"""Common interface for advisory sources."""

import json
from abc import ABC, abstractmethod
from typing import List

from ..core.ecosystems import Ecosystem
from ..core.models import AdvisoryFinding
from ..core.versions import NormalizedVersion
from ..errors import NetworkError
from ..utils.logging import get_logger

# Errors raised while reading a source's native schema
SCHEMA_ERRORS = (KeyError, TypeError, ValueError, AttributeError, json.JSONDecodeError)


class AdvisorySource(ABC):
    """An advisory database translated into AdvisoryFinding objects.

    Subclasses implement ``_query`` and may raise freely; ``query`` turns
    every failure into an empty result so one unreachable source never
    fails a whole analysis.
    """

    name: str = "source"

    def __init__(self) -> None:
        self.logger = get_logger(type(self).__name__)

    async def query(
        self,
        package_name: str,
        ecosystem: Ecosystem,
        version: NormalizedVersion
    ) -> List[AdvisoryFinding]:
        """Fetch findings for one package version.

        Args:
            package_name: Package name
            ecosystem: Registry ecosystem of the package
            version: Normalized dependency version

        Returns:
            Findings in the common shape, empty on any failure
        """
        try:
            return await self._query(package_name, ecosystem, version)
        except NetworkError as e:
            self.logger.warning(f"{self.name} unreachable for {package_name}: {e}")
        except SCHEMA_ERRORS as e:
            self.logger.warning(f"{self.name} returned an unexpected payload for {package_name}: {e!r}")
        except Exception as e:
            self.logger.error(f"{self.name} query failed for {package_name}: {e!r}")
        return []

    @abstractmethod
    async def _query(
        self,
        package_name: str,
        ecosystem: Ecosystem,
        version: NormalizedVersion
    ) -> List[AdvisoryFinding]:
        pass
