"""
Soil hydraulic functions for the Campbell / Clapp-Hornberger model.

This module provides the relationships used by the explicit column model:

1. Unsaturated hydraulic conductivity: K(θ) = K_sat (θ/θ_s)^(2b+3)
2. Matric potential: ψ_m(θ) = -ψ_sat (θ/θ_s)^(-b)
3. Total water potential (matric + gravitational)
4. Darcy flux between adjacent nodes
5. Volume limiting of a transfer by source supply and receiver capacity

All functions accept scalars or numpy arrays and broadcast.

References:
- Campbell, G.S. (1974). A simple method for determining unsaturated
  conductivity from moisture retention data. Soil Science 117:311-314.
- Clapp, R.B. and Hornberger, G.M. (1978). Empirical equations for some soil
  hydraulic properties. Water Resources Research, 14(4):601-604.
- Darcy, H. (1856). Les fontaines publiques de la ville de Dijon. Dalmont, Paris.
"""
import logging

import numpy as np

from soilflow.physics.texture import TextureParameters

logger = logging.getLogger(__name__)


def relative_saturation(theta, texture: TextureParameters):
    """S = θ/θ_s"""
    return np.asarray(theta, dtype=float) / texture.theta_sat


def campbell_conductivity(theta, texture: TextureParameters):
    """
    Unsaturated hydraulic conductivity.

    K(θ) = K_sat × (θ/θ_s)^(2b+3)

    Args:
        theta: Volumetric water content (m³/m³)
        texture: Texture parameters

    Returns:
        Hydraulic conductivity (m/s)
    """
    return texture.k_sat * relative_saturation(theta, texture) ** texture.conductivity_exponent


def campbell_matric_potential(theta, texture: TextureParameters):
    """
    Matric potential from the Campbell retention curve.

    ψ_m(θ) = -ψ_sat × (θ/θ_s)^(-b)

    The magnitude grows sharply as the soil dries. θ must be positive.

    Args:
        theta: Volumetric water content (m³/m³)
        texture: Texture parameters

    Returns:
        Matric potential (m, negative for suction)
    """
    return -texture.psi_sat * relative_saturation(theta, texture) ** (-texture.b)


def water_potential(theta, gravitational_potential, texture: TextureParameters):
    """
    Total water potential ψ = h + ψ_m(θ).

    Args:
        theta: Volumetric water content (m³/m³)
        gravitational_potential: Elevation head h (m, negative below surface)
        texture: Texture parameters

    Returns:
        Total potential (m)
    """
    return gravitational_potential + campbell_matric_potential(theta, texture)


def darcy_flux(conductivity, psi_upper, psi_lower, dz: float):
    """
    Darcy flux between two vertically adjacent nodes.

    q = -K × (ψ_lower - ψ_upper) / dz

    Sign convention: positive flux is downward (potential decreasing with
    depth).

    Args:
        conductivity: Hydraulic conductivity (m/s)
        psi_upper: Potential of the upper node (m)
        psi_lower: Potential of the lower node (m)
        dz: Node spacing (m)

    Returns:
        Darcy flux (m/s, positive = downward)
    """
    return -conductivity * (psi_lower - psi_upper) / dz


def limit_transfer_volume(candidate, source_available, receiver_capacity):
    """
    Clamp a flux-implied transfer to what the column can physically move.

    vol = max(0, min(candidate, source_available, receiver_capacity))

    Negative candidates (upward gradients) are clamped to zero; the model
    does not reverse the flow direction.
    """
    limited = np.minimum(np.minimum(candidate, source_available), receiver_capacity)
    return np.maximum(limited, 0.0)
