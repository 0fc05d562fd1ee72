"""
Controller - drives resource plugins from desired state.

For every resource in the configuration the controller refreshes what
GitHub reports, diffs it against desired state, and dispatches create,
update or delete to the resource's plugin. Resources are reconciled
concurrently and independently; ordering between them (a child team
declared alongside its parent) is left to the plugins' retry policy.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from plugins.base import PlanAction, PlanResult, ResourceData
from plugins.provider import Provider
from plugins.registry import ResourceRegistry, get_registry
from plugins.resources.base import ResourcePlugin
from state import DesiredResource, ResourceState, StateStore

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Outcome of reconciling one resource."""

    name: str
    action: PlanAction = PlanAction.NOOP
    success: bool = False
    message: str = ""
    resource_id: str = ""


class Controller:
    """
    Reconciles configured resources against GitHub.

    State changes are applied to the StateStore in memory; callers save it.
    """

    def __init__(
        self,
        provider: Provider,
        state: StateStore,
        registry: Optional[ResourceRegistry] = None,
        parallelism: int = 10,
    ):
        self.provider = provider
        self.state = state
        self.registry = registry or get_registry()
        self.semaphore = asyncio.Semaphore(parallelism)

    async def plan(self, desired: List[DesiredResource]) -> Dict[str, PlanResult]:
        """
        Compute planned changes without modifying GitHub or saved state.

        Prior state is refreshed in memory first so out-of-band deletions
        show up as creates.
        """
        names = {r.name for r in desired}
        tasks = [self._plan_resource(r.name, r.type_name, r.config) for r in desired]
        tasks += [
            self._plan_resource(s.name, s.type_name, None)
            for s in self.state.list()
            if s.name not in names
        ]
        results = await asyncio.gather(*tasks)
        return dict(results)

    async def apply(self, desired: List[DesiredResource]) -> List[ReconcileResult]:
        """
        Converge GitHub onto desired state.

        Resources in state but no longer configured are deleted.
        """
        names = {r.name for r in desired}
        tasks = [
            self._reconcile_resource(r.name, r.type_name, r.config) for r in desired
        ]
        tasks += [
            self._reconcile_resource(s.name, s.type_name, None)
            for s in self.state.list()
            if s.name not in names
        ]
        return list(await asyncio.gather(*tasks))

    async def refresh(self) -> List[ReconcileResult]:
        """Re-read every managed resource, dropping those that are gone."""
        tasks = [self._refresh_resource(s) for s in self.state.list()]
        return list(await asyncio.gather(*tasks))

    async def destroy(
        self, names: Optional[List[str]] = None
    ) -> List[ReconcileResult]:
        """Delete managed resources (all of them unless names are given)."""
        targets = [s for s in self.state.list() if names is None or s.name in names]
        tasks = [self._reconcile_resource(s.name, s.type_name, None) for s in targets]
        return list(await asyncio.gather(*tasks))

    async def import_resource(
        self, name: str, type_name: str, resource_id: str
    ) -> ResourceData:
        """
        Adopt an existing remote object into state.

        Raises:
            ValueError: If the name is already managed or nothing exists
                under the ID.
        """
        if self.state.get(name):
            raise ValueError(f"Resource '{name}' is already managed")

        resource = self.registry.get_resource_plugin(type_name)
        d = await resource.import_state(resource_id, self.provider)
        if not d.id:
            raise ValueError(
                f"Cannot import non-existent remote object: {type_name} {resource_id}"
            )

        self.state.put(name, type_name, d.state())
        logger.info(f"Imported {type_name} '{name}' (id {d.id})")
        return d

    def _get_resource(self, name: str, type_name: str) -> ResourcePlugin:
        prior = self.state.get(name)
        if prior and prior.type_name != type_name:
            raise ValueError(
                f"Resource '{name}' changed type from {prior.type_name} to "
                f"{type_name}; destroy it first"
            )
        return self.registry.get_resource_plugin(type_name)

    async def _refresh_prior(
        self, resource: ResourcePlugin, prior: Optional[ResourceState], config
    ) -> Optional[ResourceData]:
        """Read the prior object; None when absent or gone."""
        if prior is None or not prior.resource_id:
            return None

        d = resource.new_resource_data(
            config=config, state=prior.attributes, resource_id=prior.resource_id
        )
        await resource.read(d, self.provider)
        return d if d.id else None

    async def _plan_resource(self, name: str, type_name: str, config):
        async with self.semaphore:
            resource = self._get_resource(name, type_name)
            if config is not None:
                resource.validate(config)

            d = await self._refresh_prior(resource, self.state.get(name), config)
            prior_state = d.state() if d else None
            return name, resource.plan(prior_state, config)

    async def _reconcile_resource(self, name: str, type_name: str, config):
        """
        Reconcile a single resource.

        Errors are captured in the result so one failing resource does not
        stop the others.
        """
        async with self.semaphore:
            result = ReconcileResult(name=name)

            try:
                resource = self._get_resource(name, type_name)
                prior = self.state.get(name)

                if config is None:
                    result.action = PlanAction.DELETE
                    if prior and prior.resource_id:
                        result.resource_id = prior.resource_id
                        d = resource.new_resource_data(
                            state=prior.attributes, resource_id=prior.resource_id
                        )
                        await resource.delete(d, self.provider)
                    self.state.remove(name)
                    logger.info(f"Deleted {type_name} '{name}'")
                else:
                    resource.validate(config)
                    d = await self._refresh_prior(resource, prior, config)

                    if d is None:
                        result.action = PlanAction.CREATE
                        d = resource.new_resource_data(
                            config=config, is_new_resource=True
                        )
                        await resource.create(d, self.provider)
                        d.apply_config()
                        logger.info(f"Created {type_name} '{name}' (id {d.id})")
                    else:
                        plan = resource.plan(d.state(), config)
                        result.action = plan.action
                        if plan.has_changes:
                            await resource.update(d, self.provider)
                            d.apply_config()
                            logger.info(f"Updated {type_name} '{name}' (id {d.id})")

                    result.resource_id = d.id
                    if d.id:
                        self.state.put(name, type_name, d.state())
                    else:
                        self.state.remove(name)

                result.success = True

            except Exception as e:
                logger.error(f"Error reconciling {type_name} '{name}': {e}")
                result.message = str(e)

            return result

    async def _refresh_resource(self, prior: ResourceState) -> ReconcileResult:
        async with self.semaphore:
            result = ReconcileResult(name=prior.name, resource_id=prior.resource_id)
            try:
                resource = self.registry.get_resource_plugin(prior.type_name)
                d = await self._refresh_prior(resource, prior, None)
                if d is None:
                    result.action = PlanAction.DELETE
                    result.message = "no longer exists"
                    self.state.remove(prior.name)
                else:
                    self.state.put(prior.name, prior.type_name, d.state())
                result.success = True
            except Exception as e:
                logger.error(f"Error refreshing '{prior.name}': {e}")
                result.message = str(e)
            return result
