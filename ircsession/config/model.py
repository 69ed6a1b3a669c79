from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..constants import (
    CLIENT_VERSION,
    DEFAULT_REAL_NAME,
    MAX_NICKNAME_LENGTH,
    MAX_PORT,
    MIN_PORT,
    TLS_PORTS,
)
from ..errors import CommandError


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ConnectDetails(BaseModel):
    """Connection details entered by the user.

    Attributes:
        host: Server host name.
        port: Server port (1-65535).
        nickname: Requested nickname.
        password: Optional server password.
        real_name: Optional real name (GECOS).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    host: str = Field(min_length=1)
    port: int = Field(ge=MIN_PORT, le=MAX_PORT)
    nickname: str = Field(min_length=1, max_length=MAX_NICKNAME_LENGTH)
    password: str | None = None
    real_name: str | None = Field(default=None, alias="realName")

    @field_validator("host", mode="before")
    @classmethod
    def validate_host(cls, v: Any) -> Any:
        """Strip surrounding whitespace; host must not contain spaces."""
        if isinstance(v, str):
            v = v.strip()
            if " " in v:
                raise ValueError("host must not contain spaces")
        return v

    @field_validator("nickname", mode="before")
    @classmethod
    def validate_nickname(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            if " " in v:
                raise ValueError("nickname must not contain spaces")
        return v

    @field_validator("password", "real_name", mode="before")
    @classmethod
    def validate_optional_text(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @property
    def server_id(self) -> str:
        return f"{self.host}:{self.port}"

    @property
    def uses_tls(self) -> bool:
        return self.port in TLS_PORTS

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ConnectDetails:
        """Create ConnectDetails from a dictionary.

        Raises:
            CommandError: If the details do not validate; carries the input.
        """
        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            raise CommandError(
                f"Invalid connection details: {_first_error(e)}", repr(dict(data))
            ) from e

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)

    def to_request(self) -> ConnectRequest:
        """Build the normalized connect request forwarded to the transport."""
        return ConnectRequest(
            host=self.host,
            port=self.port,
            nick=self.nickname,
            username=self.nickname,
            gecos=self.real_name or DEFAULT_REAL_NAME,
            password=self.password,
            tls=self.uses_tls,
        )


class ConnectRequest(BaseModel):
    """Normalized connect request handed to the protocol event source.

    Automatic reconnect is always off: every reconnect is a fresh, explicit
    ``connect`` command.
    """

    model_config = ConfigDict(frozen=True)

    host: str
    port: int
    nick: str
    username: str
    gecos: str
    password: str | None = None
    tls: bool = False
    version: str = CLIENT_VERSION
    encoding: str = "utf8"
    auto_reconnect: bool = False


def _first_error(error: ValidationError) -> str:
    errors = error.errors()
    if not errors:
        return str(error)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg', 'invalid value')}" if location else first.get("msg", "")


def coerce_connect_details(details: ConnectDetails | Mapping[str, Any]) -> ConnectDetails:
    """Accept either a validated model or a raw mapping of user input."""
    if isinstance(details, ConnectDetails):
        return details
    return ConnectDetails.from_dict(details)
