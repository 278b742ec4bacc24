"""Kernel domain layer -- pure values and the clock abstraction. ZERO I/O."""
