"""Deployment client capability set and the Convex implementation."""

from .base import DeploymentClient
from .convex import ConvexClient

__all__ = ["ConvexClient", "DeploymentClient"]
