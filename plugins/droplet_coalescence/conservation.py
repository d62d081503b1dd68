"""
Global Mass Correction

The reaction term does not conserve oil, so after every step the total is
pulled back to the tracked target by spreading the difference evenly over
all cells. The field is then clamped to [0, 1]; clamping can lose or gain
a little mass again where cells sit at 0 or 1, so the correction is
approximate on saturated fields.
"""

import numpy as np


def conserve_mass(field, target_mass):
    """Shift `field` uniformly toward `target_mass`, then clamp to [0, 1].

    Mutates `field` in place. Returns the per-cell correction applied.
    """
    correction = (target_mass - float(field.sum())) / field.size
    field += correction
    np.clip(field, 0.0, 1.0, out=field)
    return correction


def mass_drift(field, target_mass):
    """Signed difference between the field's mass and the target."""
    return float(field.sum()) - target_mass
