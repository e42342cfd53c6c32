"""Smart Order Router - multi-path swap routing across AMM pools."""

from sor.router import SmartOrderRouter

__version__ = "0.1.0"
__all__ = ["SmartOrderRouter", "__version__"]
