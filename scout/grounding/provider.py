"""Abstract grounding interface, its result types and error taxonomy."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Tuple

if TYPE_CHECKING:
    from scout.search.models import QueryVariant


@dataclass(frozen=True)
class Citation:
    """A source the grounding service cited for its answer."""

    url: str
    title: str = ""
    snippet: str = ""


@dataclass(frozen=True)
class GroundedAnswer:
    """Narrative answer plus its citations, in service order."""

    answer_text: str
    citations: Tuple[Citation, ...] = ()


class GroundingError(Exception):
    """Base class for grounding failures.  ``retryable`` marks transient ones."""

    retryable = False


class RateLimitedError(GroundingError):
    retryable = True


class UnavailableError(GroundingError):
    retryable = True


class InvalidResponseError(GroundingError):
    """Malformed or unusable payload; retrying will not help."""


class UnauthorizedError(GroundingError):
    """Missing or rejected credentials.  Fatal for the whole run."""


class GroundingClient(ABC):
    """Abstract interface -- swap implementations without touching callers."""

    name = "base"

    @abstractmethod
    async def ground(self, variant: "QueryVariant") -> GroundedAnswer:
        """Return the grounded answer for one query variant.

        Raises a ``GroundingError`` subclass on failure.
        """
        ...
