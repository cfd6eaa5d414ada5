"""Domain exceptions shared across layers."""

from __future__ import annotations


class ConvexVisualError(Exception):
    """Base class for errors raised by this package."""


class NotConnectedError(ConvexVisualError):
    """No deployment URL is configured."""


class DeploymentError(ConvexVisualError):
    """A call to the deployment failed or returned an error payload."""


class PreviewLaunchError(ConvexVisualError):
    """The local preview listener could not be started."""


__all__ = [
    "ConvexVisualError",
    "DeploymentError",
    "NotConnectedError",
    "PreviewLaunchError",
]
