from __future__ import annotations
from dataclasses import dataclass
from typing import Optional


@dataclass(eq=False)
class SDKError(Exception):
    message: str
    code: Optional[int] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return f"{type(self).__name__}(code={self.code}, message={self.message})"


@dataclass(eq=False)
class ConfigurationError(SDKError):
    pass


@dataclass(eq=False)
class TransportError(SDKError):
    """Network failure (code is None) or a non-2xx response."""

    body: Optional[str] = None

    @property
    def status_code(self) -> Optional[int]:
        return self.code


@dataclass(eq=False)
class AuthError(TransportError):
    pass


@dataclass(eq=False)
class NotFoundError(TransportError):
    pass
