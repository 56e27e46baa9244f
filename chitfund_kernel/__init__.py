"""
Chit Fund Kernel

Immutable entities, snapshot, codec and validation for rotating-savings
(chit fund) schemes:
- Typed entities with Decimal amounts
- Explicit snapshot passing, no ambient state
- Typed errors with machine-readable codes
- Structured JSON logging
"""

__version__ = "0.1.0"
