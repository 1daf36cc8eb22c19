"""Pydantic models for bridge request bodies."""

from pydantic import BaseModel


class ConnectByIpRequest(BaseModel):
    """Body of a discovery request."""

    ip: str | None = None


class AuthenticateRequest(BaseModel):
    """Body of an authenticate request."""

    uid: str | None = None
    mode: str | None = None


class StartCameraRequest(BaseModel):
    """Body of a start camera request."""

    uid: str | None = None
    encoding: str | None = None


class PrinterRequest(BaseModel):
    """Body of requests that only name a printer."""

    uid: str | None = None
