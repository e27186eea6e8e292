"""Base extractor interface and fallback-chain building blocks."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
import logging

from ..models.template import SourceTemplate

logger = logging.getLogger(__name__)


class EnvelopeError(ValueError):
    """A response body did not have the expected envelope shape."""


def keyed_envelope(key: str) -> Callable[[Any], List[Dict[str, Any]]]:
    """
    Build an extractor for bodies that hold items under ``key``.

    A missing or null key yields an empty list.
    """
    def extract(body: Any) -> List[Dict[str, Any]]:
        if not isinstance(body, dict):
            raise EnvelopeError(f"Expected an object with '{key}', got {type(body).__name__}")
        items = body.get(key) or []
        if not isinstance(items, list):
            raise EnvelopeError(f"Expected '{key}' to be a list, got {type(items).__name__}")
        return items

    extract.__name__ = f"keyed_envelope_{key}"
    return extract


def bare_envelope(body: Any) -> List[Dict[str, Any]]:
    """Extractor for bodies that are themselves the item list."""
    if body is None:
        return []
    if not isinstance(body, list):
        raise EnvelopeError(f"Expected a list body, got {type(body).__name__}")
    return body


@dataclass(frozen=True)
class EndpointStrategy:
    """One endpoint in a fallback chain and how to unwrap its response."""
    name: str
    path: str
    extract: Callable[[Any], List[Dict[str, Any]]]


@dataclass
class FetchAttempt:
    """Outcome of trying one endpoint: either items or an error."""
    strategy: EndpointStrategy
    items: Optional[List[Dict[str, Any]]] = None
    error: Optional[str] = None
    details: Optional[Any] = None
    status_code: Optional[int] = None

    @classmethod
    def succeeded(cls, strategy: EndpointStrategy, items: List[Dict[str, Any]]) -> "FetchAttempt":
        return cls(strategy=strategy, items=items)

    @classmethod
    def failed(
        cls,
        strategy: EndpointStrategy,
        error: str,
        details: Optional[Any] = None,
        status_code: Optional[int] = None
    ) -> "FetchAttempt":
        return cls(strategy=strategy, error=error, details=details, status_code=status_code)

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "endpoint": self.strategy.name,
            "ok": self.ok,
            "count": len(self.items) if self.items is not None else None,
            "error": self.error,
            "status_code": self.status_code,
        }


class BaseExtractor(ABC):
    """
    Base class for source template extractors.

    Extractors pull templates from a source system and normalize them
    into SourceTemplate objects.
    """

    def __init__(self):
        self.attempts: List[FetchAttempt] = []
        self._warnings: List[str] = []

    @abstractmethod
    def fetch_all(self) -> List[SourceTemplate]:
        """
        Fetch every available template.

        Returns:
            List of SourceTemplate objects (possibly empty)
        """
        pass

    def validate_source(self) -> List[str]:
        """
        Validate the extractor configuration.

        Returns:
            List of validation error messages
        """
        return []

    def add_warning(self, message: str) -> None:
        """Add a warning to the extraction."""
        self._warnings.append(message)
        logger.warning(f"Extraction warning: {message}")

    @property
    def warnings(self) -> List[str]:
        return self._warnings.copy()

    def reset(self) -> None:
        """Reset the extractor state."""
        self.attempts = []
        self._warnings = []
