"""
Custom exception hierarchy for the soilflow package.
Provides clear error categories and rich error information.
"""
from typing import Optional, Any, Dict
from dataclasses import dataclass


@dataclass
class ErrorContext:
    """Context information for errors"""
    component: Optional[str] = None
    operation: Optional[str] = None
    layer: Optional[int] = None
    time_step: Optional[int] = None
    details: Optional[Dict[str, Any]] = None


class SoilflowError(Exception):
    """Base exception for all soilflow errors"""

    def __init__(self, message: str, context: Optional[ErrorContext] = None):
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()

    def __str__(self) -> str:
        context_str = ""
        if self.context.component:
            context_str += f" [Component: {self.context.component}]"
        if self.context.operation:
            context_str += f" [Operation: {self.context.operation}]"
        if self.context.layer is not None:
            context_str += f" [Layer: {self.context.layer}]"
        if self.context.time_step is not None:
            context_str += f" [Step: {self.context.time_step}]"

        return f"{self.__class__.__name__}: {self.message}{context_str}"


# Configuration errors
class ConfigurationError(SoilflowError):
    """Invalid or physically inconsistent parameters"""
    pass


# Indexing errors
class DimensionError(SoilflowError):
    """Layer or time index outside the allocated (or simulated) arrays"""
    pass


# Physics model errors
class PhysicsModelError(SoilflowError):
    """Base class for physics model errors"""
    pass


class WaterBalanceError(PhysicsModelError):
    """Water balance violation"""
    pass
