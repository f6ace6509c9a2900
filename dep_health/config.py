"""Runtime configuration for the DepHealth engine."""

import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional

ENV_PREFIX = "DEPHEALTH_"


@dataclass
class EngineConfig:
    """Endpoints, network policy and cache bounds."""

    osv_url: str = "https://api.osv.dev/v1/query"
    github_api_url: str = "https://api.github.com"
    npm_registry_url: str = "https://registry.npmjs.org"
    pypi_url: str = "https://pypi.org/pypi"
    maven_search_url: str = "https://search.maven.org/solrsearch/select"
    nuget_url: str = "https://api.nuget.org/v3-flatcontainer"
    go_proxy_url: str = "https://proxy.golang.org"
    rubygems_url: str = "https://rubygems.org/api/v1/gems"

    user_agent: str = "DepHealth/0.1.0"
    request_timeout: float = 10.0
    max_retries: int = 2
    backoff_seconds: float = 1.0
    max_concurrency: int = 10

    cache_max_entries: int = 10_000
    cache_ttl_seconds: float = 24 * 3600
    memo_max_entries: int = 50_000
    use_known_patterns: bool = True

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.request_timeout <= 0:
            raise ValueError(f"request_timeout must be positive: {self.request_timeout}")
        if self.max_retries < 0:
            raise ValueError(f"max_retries cannot be negative: {self.max_retries}")
        if self.backoff_seconds < 0:
            raise ValueError(f"backoff_seconds cannot be negative: {self.backoff_seconds}")
        if self.max_concurrency < 1:
            raise ValueError(f"max_concurrency must be at least 1: {self.max_concurrency}")
        if self.cache_max_entries < 1 or self.memo_max_entries < 1:
            raise ValueError("cache sizes must be at least 1")
        if self.cache_ttl_seconds <= 0:
            raise ValueError(f"cache_ttl_seconds must be positive: {self.cache_ttl_seconds}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        """Build a config from ``DEPHEALTH_*`` variables, e.g. ``DEPHEALTH_MAX_RETRIES``.

        Args:
            environ: Mapping to read instead of ``os.environ``

        Returns:
            Configuration with overrides applied
        """
        environ = os.environ if environ is None else environ
        overrides: Dict[str, Any] = {}

        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            if f.type in (bool, "bool"):
                overrides[f.name] = raw.strip().lower() in ("1", "true", "yes", "on")
            elif f.type in (int, "int"):
                overrides[f.name] = int(raw)
            elif f.type in (float, "float"):
                overrides[f.name] = float(raw)
            else:
                overrides[f.name] = raw

        return cls(**overrides)
