"""Pool data and cost collaborators."""

from .base import ChainDataProvider, CostEstimator, PoolDiscovery
from .cost import NativePriceCostEstimator
from .http import HttpPoolDiscovery
from .static import PassthroughChainData, StaticPoolDiscovery

__all__ = [
    "ChainDataProvider",
    "CostEstimator",
    "HttpPoolDiscovery",
    "NativePriceCostEstimator",
    "PassthroughChainData",
    "PoolDiscovery",
    "StaticPoolDiscovery",
]
