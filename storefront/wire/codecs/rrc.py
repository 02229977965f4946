from dataclasses import dataclass
from typing import Any, Protocol, TypeVar

from pydantic import BaseModel


DomainT_co = TypeVar("DomainT_co", covariant=True)
DomainT_contra = TypeVar("DomainT_contra", contravariant=True)


class ToDomain(Protocol[DomainT_co]):
    def to_domain(self) -> DomainT_co: ...


class FromDomain(Protocol[DomainT_contra]):
    @classmethod
    def from_domain(cls, dom: DomainT_contra) -> BaseModel: ...


@dataclass(frozen=True, slots=True)
class RequestResponseCodec:
    """
    Request model → domain input; domain value → response model.

    Note: `response=None` renders `data: null` (e.g. logout).
    `message` is copied into the envelope on success.
    """

    request: type[ToDomain[Any]]
    response: type[FromDomain[Any]] | None = None
    message: str | None = None
