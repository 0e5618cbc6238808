"""
Factory for ObjectContext instances.

A host configures the factory once (endpoint, type/key properties, transport,
scheduler) and asks it for contexts. By default the factory hands out a single
shared context; with ``restrict_to_single_context=False`` every create() call
returns a fresh one.
"""
import logging
from typing import Optional

from objectcontext.config import ContextConfig
from objectcontext.object_context import ObjectContext
from objectcontext.scheduler import ChangeDetectionScheduler
from objectcontext.transport import ChangeTransport

logger = logging.getLogger(__name__)


class ObjectContextFactory:
    """Creates ObjectContexts that share one configuration."""

    def __init__(
        self,
        restrict_to_single_context: bool = True,
        endpoint_uri: Optional[str] = None,
        config: Optional[ContextConfig] = None,
        transport: Optional[ChangeTransport] = None,
        scheduler: Optional[ChangeDetectionScheduler] = None,
    ):
        self.restrict_to_single_context = restrict_to_single_context
        self._config = config or ContextConfig()
        if endpoint_uri is not None:
            self._config = self._config.with_overrides(endpoint_uri=endpoint_uri)
        self._transport = transport
        self._scheduler = scheduler
        self._instance: Optional[ObjectContext] = None

    @property
    def config(self) -> ContextConfig:
        return self._config

    def set_endpoint_uri(self, endpoint_uri: str) -> None:
        """Endpoint used by contexts created from now on."""
        self._config = self._config.with_overrides(endpoint_uri=endpoint_uri)

    def create(self, auto_evaluate: bool = True) -> ObjectContext:
        """Return a context (the shared one when restricted to a single context)."""
        if self.restrict_to_single_context and self._instance is not None:
            return self._instance

        context = ObjectContext(
            config=self._config.with_overrides(auto_evaluate=auto_evaluate),
            transport=self._transport,
            scheduler=self._scheduler,
        )
        logger.debug(f"Created ObjectContext (auto_evaluate={auto_evaluate}, "
                     f"shared={self.restrict_to_single_context})")

        if self.restrict_to_single_context:
            self._instance = context
        return context

    def get_instance(self, auto_evaluate: bool = True) -> ObjectContext:
        return self.create(auto_evaluate)
