"""
Transport boundary for loading and saving tracked objects.

The context never performs I/O. A host plugs in a ChangeTransport that knows
how to fetch objects of a logical type and how to submit a changeset; the
context registers what comes back and commits once a save succeeds.
"""
from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Optional

from objectcontext.snapshot_model import ContextChangeset


class ChangeTransport(ABC):
    """Fetches and persists tracked objects on behalf of an ObjectContext."""

    @abstractmethod
    def fetch(self, type_name: str, params: Mapping[str, Any], endpoint_uri: Optional[str]) -> List[Any]:
        """Return freshly loaded objects of ``type_name``.

        The returned objects are registered by the context as-is.
        """

    @abstractmethod
    def submit(self, changeset: ContextChangeset, endpoint_uri: Optional[str]) -> Mapping[int, Any]:
        """Persist a changeset.

        Returns:
            Save results keyed by record identifier. Scalar values in each
            result (server-assigned ids, timestamps) are copied back onto the
            matching tracked object when changes are accepted.
        """


def join_endpoint(endpoint_uri: str, path: str) -> str:
    """Join a base URI and a path with exactly one slash between them."""
    separator = '' if endpoint_uri.endswith('/') else '/'
    return f"{endpoint_uri}{separator}{path.lstrip('/')}"
