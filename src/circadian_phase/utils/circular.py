import numpy as np

HOURS_PER_DAY = 24.0

# ============================================================================
# ANGULAR MAPPING
# ============================================================================

def time_to_degrees(time):
    """
    Convert phase in hours to an angle in degrees

    Linear, not modular: 0h -> 0°, 24h -> 360°

    Args:
        time: Hours as a float, numpy array or pandas Series

    Returns:
        Degrees, same container type as the input
    """
    return (time / HOURS_PER_DAY) * 360


def degrees_to_time(degrees):
    """Convert an angle in degrees back to phase in hours"""
    return (degrees / 360) * HOURS_PER_DAY


def wrap_hours(hours, period=HOURS_PER_DAY):
    """
    Bring phases slightly over one period back into range

    Only subtracts a single period from values > period, so values in
    [0, 2 * period) end up in [0, period]. Negative values are untouched.
    """
    hours = np.asarray(hours, dtype=float)
    wrapped = np.where(hours > period, hours - period, hours)
    return wrapped.item() if wrapped.ndim == 0 else wrapped

# ============================================================================
# CIRCULAR STATISTICS FUNCTIONS
# ============================================================================

def _phase_radians(phases, period=HOURS_PER_DAY):
    phases = np.asarray(phases, dtype=float).ravel()
    phases = phases[~np.isnan(phases)]
    return phases / period * 2 * np.pi


def circular_mean(phases, period=HOURS_PER_DAY):
    """
    Mean phase of a group, taking the 0/24 wraparound into account

    Phases of 23h and 1h average to 0h, not 12h.

    Args:
        phases: Array-like of phases in hours; NaNs are ignored
        period: Length of the cycle in hours

    Returns:
        Mean phase in hours, in [0, period), or NaN without usable phases
    """
    theta = _phase_radians(phases, period)
    if theta.size == 0:
        return np.nan

    mean_theta = np.arctan2(np.mean(np.sin(theta)), np.mean(np.cos(theta)))
    mean_phase = float(mean_theta % (2 * np.pi) / (2 * np.pi) * period)
    return 0.0 if mean_phase >= period else mean_phase


def circular_std(phases, period=HOURS_PER_DAY):
    """
    Circular standard deviation of phases, in radians

    0 when all phases coincide, growing without bound as they spread out
    """
    theta = _phase_radians(phases, period)
    if theta.size == 0:
        return np.nan

    # Mean resultant length (R)
    R = np.hypot(np.mean(np.cos(theta)), np.mean(np.sin(theta)))
    R = min(R, 1.0)  # rounding can push identical phases just over 1

    with np.errstate(divide="ignore"):
        return float(np.sqrt(-2 * np.log(R)))
