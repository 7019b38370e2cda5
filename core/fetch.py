"""Concurrent fetch-and-diff of declared dependencies."""

import asyncio
import logging
from collections.abc import Mapping

from .config import DEFAULT_CONCURRENCY, CheckOptions, validate_concurrency
from .errors import FetchFailed, InvalidVersionString, RegistryError
from .models import ChangeRecord, ChangeSet, CheckResult, PendingLookup
from .registry import RegistryClient
from .version_spec import is_resolvable, parse_version_spec
from .work_queue import WorkQueue

logger = logging.getLogger(__name__)

DEPENDENCIES = "dependencies"
DEV_DEPENDENCIES = "devDependencies"


def build_lookups(declared: Mapping[str, str] | None) -> list[PendingLookup]:
    """Create one lookup per dependency that looks like a registry version.

    Args:
        declared: Package name to declared version mapping, or None

    Returns:
        Lookups for every resolvable entry, in mapping order
    """
    lookups = []
    for name, raw in (declared or {}).items():
        try:
            spec = parse_version_spec(raw)
        except InvalidVersionString:
            logger.warning("Skipping %s: empty version", name)
            continue

        if not is_resolvable(spec):
            logger.debug("Skipping %s: %s is not a registry version", name, raw)
            continue

        lookups.append(PendingLookup(package_name=name, declared_spec=spec))
    return lookups


class FetchEngine:
    """Runs a bounded pool of workers against the registry."""

    def __init__(self, registry, fail_fast: bool = True):
        """Initialize fetch engine.

        Args:
            registry: Object with an async ``fetch_latest(name)`` method
            fail_fast: Abort the run on the first registry error. When False
                the failed package is recorded in ``ChangeSet.failures`` and
                the worker moves on.
        """
        self.registry = registry
        self.fail_fast = fail_fast

    async def run(
        self,
        declared: Mapping[str, str] | None,
        concurrency: int = DEFAULT_CONCURRENCY,
        section: str = DEPENDENCIES,
    ) -> ChangeSet:
        """Compare declared versions of one section against the registry.

        Args:
            declared: Package name to declared version mapping
            concurrency: Number of workers to spawn
            section: Name of the section, used in reports and errors

        Returns:
            ChangeSet for the section

        Raises:
            ConfigError: If concurrency is not a positive integer
            FetchFailed: If a lookup failed and the engine is fail-fast
        """
        validate_concurrency(concurrency)
        queue = WorkQueue(build_lookups(declared))
        failures: dict[str, str] = {}
        logger.info("Checking %d %s with %d workers", len(queue), section, concurrency)

        results = await asyncio.gather(
            *(self._worker(queue, failures) for _ in range(concurrency)),
            return_exceptions=True,
        )

        changes: list[ChangeRecord] = []
        for result in results:
            if isinstance(result, RegistryError):
                raise FetchFailed(section, result) from result
            if isinstance(result, BaseException):
                raise result
            changes.extend(result)

        return ChangeSet(section=section, changes=changes, failures=failures)

    async def _worker(self, queue: WorkQueue, failures: dict[str, str]) -> list[ChangeRecord]:
        changes: list[ChangeRecord] = []

        while True:
            lookup = queue.try_pop()
            if lookup is None:
                return changes

            logger.debug("Fetching %s", lookup.package_name)
            try:
                latest = await self.registry.fetch_latest(lookup.package_name)
            except RegistryError as e:
                if self.fail_fast:
                    raise
                logger.warning("Skipping %s: %s", lookup.package_name, e)
                failures[lookup.package_name] = str(e)
                continue

            if latest != lookup.declared_spec.numeric_version:
                changes.append(
                    ChangeRecord(
                        package_name=lookup.package_name,
                        declared_spec=lookup.declared_spec,
                        latest_version=latest,
                    )
                )


async def check_manifest(
    dependencies: Mapping[str, str] | None,
    dev_dependencies: Mapping[str, str] | None,
    options: CheckOptions | None = None,
    registry=None,
) -> CheckResult:
    """Check both dependency sections concurrently.

    A failing section is reported in ``CheckResult.errors`` and does not stop
    the other one.

    Args:
        dependencies: The manifest's ``dependencies`` mapping
        dev_dependencies: The manifest's ``devDependencies`` mapping
        options: Run configuration, defaults when omitted
        registry: Registry client to use; one is built from ``options`` if None

    Returns:
        Change sets and errors keyed by section name
    """
    options = options or CheckOptions()
    if registry is None:
        async with RegistryClient(options.registry_url, timeout=options.timeout) as client:
            return await check_manifest(dependencies, dev_dependencies, options, client)

    engine = FetchEngine(registry, fail_fast=options.fail_fast)
    sections = {DEPENDENCIES: dependencies, DEV_DEPENDENCIES: dev_dependencies}
    outcomes = await asyncio.gather(
        *(engine.run(declared, options.concurrency, section) for section, declared in sections.items()),
        return_exceptions=True,
    )

    result = CheckResult()
    for section, outcome in zip(sections, outcomes):
        if isinstance(outcome, FetchFailed):
            logger.error("%s", outcome)
            result.errors[section] = outcome
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            result.change_sets[section] = outcome
    return result
