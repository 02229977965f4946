from dataclasses import dataclass
from enum import Enum
from typing import Literal


type Method = Literal["GET", "POST", "PUT", "DELETE", "PATCH"]
type Path = str


class Auth(Enum):
    """How a route treats the bearer token."""

    NONE = "none"  # token ignored
    OPTIONAL = "optional"  # token passed through undecoded, if present
    REQUIRED = "required"  # token resolved to an identity or 401


@dataclass(frozen=True, slots=True)
class HTTPRouteTrigger:
    method: Method
    path: Path
    auth: Auth = Auth.NONE
    summary: str | None = None
