"""Three-party replicated secret sharing with fixed-point values, bit-sliced conversion and piecewise functions."""

__version__ = "0.1.0"
__all__ = [
    "converter",
    "encryptor",
    "fixedpoint",
    "piecewise",
    "sharing",
]