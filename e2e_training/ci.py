"""CI detection and spec sharding helpers."""
from __future__ import annotations

import math
import os
import time
from typing import Dict, List, Mapping, Optional, Sequence, TypeVar

from e2e_training.fixtures import load_fixture

T = TypeVar("T")

# First matching variable wins; JENKINS_URL is checked before the generic CI flag.
CI_PLATFORMS = (
    ("jenkins", "JENKINS_URL"),
    ("github-actions", "GITHUB_ACTIONS"),
    ("gitlab", "GITLAB_CI"),
    ("circleci", "CIRCLECI"),
    ("travis", "TRAVIS"),
    ("azure-pipelines", "TF_BUILD"),
    ("bitbucket", "BITBUCKET_BUILD_NUMBER"),
)

JENKINS_VARIABLES = ("JENKINS_URL", "BUILD_NUMBER", "JOB_NAME", "WORKSPACE", "BUILD_URL", "NODE_NAME")


def _env(env: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    return os.environ if env is None else env


def is_ci(env: Optional[Mapping[str, str]] = None) -> bool:
    environ = _env(env)
    if environ.get("CI", "").strip().lower() in {"1", "true", "yes"}:
        return True
    return detect_ci_platform(environ) != "local"


def detect_ci_platform(env: Optional[Mapping[str, str]] = None) -> str:
    environ = _env(env)
    for platform, variable in CI_PLATFORMS:
        if environ.get(variable):
            return platform
    return "local"


def jenkins_info(env: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Jenkins build variables; unset ones read "not set (local run)"."""
    environ = _env(env)
    return {name: environ.get(name) or "not set (local run)" for name in JENKINS_VARIABLES}


def build_id(env: Optional[Mapping[str, str]] = None) -> str:
    environ = _env(env)
    return environ.get("BUILD_ID") or environ.get("BUILD_NUMBER") or f"local-{int(time.time() * 1000)}"


def ci_timeout(env: Optional[Mapping[str, str]] = None) -> int:
    """Default command timeout (ms): longer on CI machines."""
    timeouts = load_fixture("cicd_data")["timeouts"]
    return int(timeouts["ciDefault"] if is_ci(env) else timeouts["localDefault"])


def ci_retries(env: Optional[Mapping[str, str]] = None) -> int:
    retry_config = load_fixture("cicd_data")["retryConfig"]
    return int(retry_config["ci"] if is_ci(env) else retry_config["local"])


def specs_per_machine(total_specs: int, machines: int) -> int:
    if machines < 1:
        raise ValueError("machines must be at least 1")
    return math.ceil(total_specs / machines)


def distribute_specs(specs: Sequence[T], machines: int) -> List[List[T]]:
    """Split specs into `machines` contiguous chunks of ceil(n/m).

    Trailing machines get an empty list when there are fewer specs than
    machines.
    """
    size = specs_per_machine(len(specs), machines)
    items = list(specs)
    if size == 0:
        return [[] for _ in range(machines)]
    return [items[index * size:(index + 1) * size] for index in range(machines)]


def select_shard(specs: Sequence[T], index: int, total: int) -> List[T]:
    """Specs assigned to shard `index` (0-based) of `total`."""
    if not 0 <= index < total:
        raise ValueError(f"shard index {index} out of range for {total} shards")
    return distribute_specs(specs, total)[index]
