"""
FX Pulse Services

Service layer containing all business logic.
Each service has a defined interface (contract) and implementation.
"""

from fxpulse.services.base import BaseService

__all__ = ["BaseService"]
