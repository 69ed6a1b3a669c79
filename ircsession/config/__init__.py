"""Validated connection configuration models."""

from .model import ConnectDetails, ConnectRequest, coerce_connect_details  # noqa: F401

__all__ = ["ConnectDetails", "ConnectRequest", "coerce_connect_details"]
