"""
component_3_learning_rule.py

Fuzzy ART weight update.

    W_new = beta * (I ^ W_old) + (1 - beta) * W_old

beta = 1 (fast learning) snaps the prototype onto I ^ W_old. Because
I ^ W_old <= W_old component-wise, weights never grow and stay in [0, 1].
"""

import numpy as np


def apply_learning_rule(
    encoded: np.ndarray, weight: np.ndarray, learning_rate: float
) -> np.ndarray:
    """
    Returns the updated weight as a new read-only array.

    Args:
        encoded: Complement-coded input
        weight: Current category weight
        learning_rate: beta in (0, 1]
    """
    overlap = np.minimum(encoded, weight)
    if learning_rate == 1.0:
        updated = overlap
    else:
        updated = learning_rate * overlap + (1.0 - learning_rate) * weight
        # rounding of the convex combination may step a hair outside [0, 1]
        np.clip(updated, 0.0, 1.0, out=updated)
    updated.setflags(write=False)
    return updated
