"""Complex arithmetic helpers for phasor quantities.

Angles cross this module's boundary in degrees:
  from_polar(1.0, 30.0)  ->  1.0∠30°
  to_polar(z)            ->  (|z|, θ in degrees, range (-180, 180])
Radians are only used internally.
"""

from __future__ import annotations

import cmath
import math

from powerflow.network.errors import ComplexDivisionByZero


def rect(re: float, im: float = 0.0) -> complex:
    """Complex number from rectangular components."""
    return complex(re, im)


def from_polar(magnitude: float, angle_deg: float) -> complex:
    """Complex number from magnitude and angle in degrees."""
    return cmath.rect(magnitude, math.radians(angle_deg))


def add(a: complex, b: complex) -> complex:
    return complex(a) + complex(b)


def sub(a: complex, b: complex) -> complex:
    return complex(a) - complex(b)


def mul(a: complex, b: complex) -> complex:
    return complex(a) * complex(b)


def div(a: complex, b: complex) -> complex:
    """a / b, raising ComplexDivisionByZero when |b| == 0."""
    b = complex(b)
    if b == 0:
        raise ComplexDivisionByZero(f"Division of {complex(a)} by zero-magnitude divisor")
    return complex(a) / b


def conj(z: complex) -> complex:
    return complex(z).conjugate()


def magnitude(z: complex) -> float:
    return abs(complex(z))


def angle_deg(z: complex) -> float:
    """Phase angle in degrees, normalised to (-180, 180]."""
    deg = math.degrees(cmath.phase(complex(z)))
    if deg <= -180.0:
        deg += 360.0
    return deg


def to_polar(z: complex) -> tuple[float, float]:
    """(magnitude, angle in degrees)."""
    return magnitude(z), angle_deg(z)


def format_polar(z: complex, mag_digits: int = 4, angle_digits: int = 2) -> str:
    """Polar string such as '0.9812∠-2.35°'."""
    mag, ang = to_polar(z)
    return f"{mag:.{mag_digits}f}∠{ang:.{angle_digits}f}°"


def format_rect(z: complex, digits: int = 4) -> str:
    """Rectangular string such as '5.0000-15.0000j'."""
    z = complex(z)
    sign = "+" if z.imag >= 0 else "-"
    return f"{z.real:.{digits}f}{sign}{abs(z.imag):.{digits}f}j"
