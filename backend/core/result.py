"""
Outcome of a call to an external collaborator (geocoder, model, scraper).

Adapters never raise to their callers. They return either ``Ok`` (the
upstream answered, possibly from cache) or ``Degraded`` (the upstream failed
and ``value`` is the fallback the caller should use). Both expose ``value``,
so call sites that do not care about the distinction read it directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T
    from_cache: bool = False

    @property
    def degraded(self) -> bool:
        return False

    @property
    def reason(self) -> Optional[str]:
        return None


@dataclass(frozen=True)
class Degraded(Generic[T]):
    value: T
    reason: str

    @property
    def degraded(self) -> bool:
        return True

    @property
    def from_cache(self) -> bool:
        return False


Outcome = Union[Ok[T], Degraded[T]]
