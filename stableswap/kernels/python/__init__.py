"""
Production Python kernels.

These modules are designed to be:
- deterministic (integer-only),
- easy to audit (explicit intermediate variables),
- small surface-area (pure functions over plain ints),
- testable against closed-form values on simple inputs.
"""
