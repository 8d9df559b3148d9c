"""
Core module for varlink.
Provides error handling, logging and configuration.
"""
from varlink.core.errors import (
    VarlinkError, ValidationError, FeatureExprError, OracleError
)
from varlink.core.logging import get_logger
from varlink.core.config import OracleConfig

__all__ = [
    "VarlinkError", "ValidationError", "FeatureExprError", "OracleError",
    "get_logger",
    "OracleConfig",
]
