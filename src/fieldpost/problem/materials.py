"""
Material Models
===============

Block material properties for the problem kinds that carry a scalar
potential (electrostatics) or temperature (heat flow).
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional


@dataclass(eq=False)
class ElectrostaticMaterial:
    """
    Linear, possibly anisotropic dielectric.

    Attributes:
        ex: relative permittivity in x [-]
        ey: relative permittivity in y [-]
        qv: volume charge density [C/m³]
        name: material name
    """
    ex: float = 1.0
    ey: float = 1.0
    qv: float = 0.0
    name: str = ""

    def __post_init__(self):
        """Validate material parameters."""
        if self.ex <= 0 or self.ey <= 0:
            raise ValueError(f"Permittivities must be positive, got ({self.ex}, {self.ey})")

    def is_air(self) -> bool:
        """Free space: unit permittivity and no charge."""
        return self.ex == 1 and self.ey == 1 and self.qv == 0

    def is_same_material_as(self, other) -> bool:
        """Materials are the same only if they are the same record."""
        return self is other

    def permittivity(self) -> complex:
        """Relative permittivity as ex + i ey."""
        return complex(self.ex, self.ey)


@dataclass(eq=False)
class HeatFlowMaterial:
    """
    Heat conductor with optional temperature-dependent conductivity.

    Attributes:
        kx: thermal conductivity in x [W/(m·K)]
        ky: thermal conductivity in y [W/(m·K)]
        qv: volume heat generation [W/m³]
        kt: optional shape (n, 2) table of (temperature, conductivity)
            pairs; when given, conductivity is isotropic and interpolated
        name: material name
    """
    kx: float = 1.0
    ky: float = 1.0
    qv: float = 0.0
    kt: Optional[np.ndarray] = None
    name: str = ""

    def __post_init__(self):
        """Validate material parameters."""
        if self.kx <= 0 or self.ky <= 0:
            raise ValueError(f"Conductivities must be positive, got ({self.kx}, {self.ky})")
        if self.kt is not None:
            self.kt = np.asarray(self.kt, dtype=np.float64)
            if self.kt.ndim != 2 or self.kt.shape[1] != 2 or len(self.kt) == 0:
                raise ValueError("kt must have shape (n, 2)")
            self.kt = self.kt[np.argsort(self.kt[:, 0])]

    def is_air(self) -> bool:
        """Free space: unit conductivity, no generation, no table."""
        return self.kx == 1 and self.ky == 1 and self.qv == 0 and self.kt is None

    def is_same_material_as(self, other) -> bool:
        """Materials are the same only if they are the same record."""
        return self is other

    def get_k(self, t: float) -> complex:
        """
        Conductivity tensor diagonal at temperature t, as kx + i ky.

        With a table, conductivity is linearly interpolated in temperature
        and held constant beyond the ends of the table.

        Args:
            t: temperature [K]

        Returns:
            k: complex conductivity
        """
        if self.kt is None:
            return complex(self.kx, self.ky)
        k = float(np.interp(t, self.kt[:, 0], self.kt[:, 1]))
        return complex(k, k)


@dataclass(eq=False)
class MagneticMaterial:
    """
    Magnetic block material.

    Magnetic problems carry a vector potential, so only the air test is
    used by the post-processor.
    """
    mu_x: float = 1.0
    mu_y: float = 1.0
    name: str = ""

    def is_air(self) -> bool:
        """Free space: unit relative permeability."""
        return self.mu_x == 1 and self.mu_y == 1

    def is_same_material_as(self, other) -> bool:
        """Materials are the same only if they are the same record."""
        return self is other
