"""
Billboard kernel -- value types, currency boundary, typed errors and logging
shared by the pricing engines and the configuration layer.
"""

from billboard_kernel.logging_config import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
