"""
Diagnostics Use Cases
"""

from .run_security_test_use_case import RunSecurityTestUseCase

__all__ = ["RunSecurityTestUseCase"]
