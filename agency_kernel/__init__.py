"""
Agency Kernel

Shared foundation for the agency operations back-end:
- Typed exceptions with machine-readable codes
- Structured JSON logging with request-scoped context
- Injectable clock
- Closed status enumerations
- SQLAlchemy declarative base and engine management
"""

__version__ = "0.1.0"
