"""
Kernel layer.

`stableswap/kernels/python/` holds the integer-only numeric kernels used by the
pool engine. They are pure functions with explicit rounding rules and no
knowledge of pool state, fees or events.
"""
