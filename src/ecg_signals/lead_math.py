"""Lead derivation, resampling and amplitude helpers.

This module provides the numeric building blocks shared by ``Signals`` and
``BufferedSignals``:

- Einthoven/Goldberger derivation of leads III, aVR, aVL and aVF from I and II
  (and III when it was recorded)
- Sample-rate conversion of a single lead
- Overflow-free rescaling of sample positions between sample rates
- Changing the amplitude multiplier (AVM) of stored samples

All derivations work on the stored integer samples. Halving uses an arithmetic
shift (floor division) and results wrap to 16 bits, the same way the samples are
stored by the binary formats.
"""

import math

import numpy as np
from scipy import signal

from .types import LeadType, SampleArray

INT16_MIN = np.iinfo(np.int16).min
INT16_MAX = np.iinfo(np.int16).max


def to_sample_array(values) -> SampleArray | None:
    """Convert a sequence of samples into an int16 array (``None`` stays ``None``)."""
    if values is None:
        return None
    return np.asarray(values, dtype=np.int16)


def _fit(lead: SampleArray, total_length: int) -> np.ndarray:
    """Zero-pad or clip a lead to ``total_length`` samples as int32."""
    fitted = np.zeros(total_length, dtype=np.int32)
    n = min(len(lead), total_length)
    fitted[:n] = lead[:n]
    return fitted


def _check_leads(total_length: int, *leads: SampleArray | None) -> bool:
    if total_length < 0:
        raise ValueError(f"Total length must be non-negative, got {total_length}")
    return all(lead is not None and len(lead) > 0 for lead in leads)


def calculate_lead_iii(lead_i: SampleArray, lead_ii: SampleArray, total_length: int) -> SampleArray | None:
    """Calculate lead III as ``II - I``.

    Args:
        lead_i: Samples of lead I.
        lead_ii: Samples of lead II.
        total_length: Number of samples of the result. Shorter inputs are
            zero-padded, longer inputs are clipped.

    Returns:
        Samples of lead III or ``None`` if an input lead is missing or empty.
    """
    if not _check_leads(total_length, lead_i, lead_ii):
        return None
    return (_fit(lead_ii, total_length) - _fit(lead_i, total_length)).astype(np.int16)


def calculate_lead_avr(lead_i: SampleArray, lead_ii: SampleArray, total_length: int) -> SampleArray | None:
    """Calculate lead aVR as ``-(I + II) / 2``."""
    if not _check_leads(total_length, lead_i, lead_ii):
        return None
    return (-((_fit(lead_i, total_length) + _fit(lead_ii, total_length)) >> 1)).astype(np.int16)


def calculate_lead_avl(
    lead_i: SampleArray,
    lead_x: SampleArray,
    total_length: int,
    three_leads: bool,
) -> SampleArray | None:
    """Calculate lead aVL.

    Args:
        lead_i: Samples of lead I.
        lead_x: Samples of lead III if ``three_leads`` is set, otherwise lead II.
        total_length: Number of samples of the result.
        three_leads: Whether ``lead_x`` is lead III.

    Returns:
        ``(I - III) / 2`` or ``(2 * I - II) / 2``, ``None`` on missing input.
    """
    if not _check_leads(total_length, lead_i, lead_x):
        return None
    data_i = _fit(lead_i, total_length)
    data_x = _fit(lead_x, total_length)
    if three_leads:
        return ((data_i - data_x) >> 1).astype(np.int16)
    return (((data_i << 1) - data_x) >> 1).astype(np.int16)


def calculate_lead_avf(
    lead_x: SampleArray,
    lead_ii: SampleArray,
    total_length: int,
    three_leads: bool,
) -> SampleArray | None:
    """Calculate lead aVF.

    Args:
        lead_x: Samples of lead III if ``three_leads`` is set, otherwise lead I.
        lead_ii: Samples of lead II.
        total_length: Number of samples of the result.
        three_leads: Whether ``lead_x`` is lead III.

    Returns:
        ``(II + III) / 2`` or ``(2 * II - I) / 2``, ``None`` on missing input.
    """
    if not _check_leads(total_length, lead_x, lead_ii):
        return None
    data_x = _fit(lead_x, total_length)
    data_ii = _fit(lead_ii, total_length)
    if three_leads:
        return ((data_ii + data_x) >> 1).astype(np.int16)
    return (((data_ii << 1) - data_x) >> 1).astype(np.int16)


def calculate_leads(
    lead_i: SampleArray,
    lead_ii: SampleArray,
    total_length: int,
    lead_iii: SampleArray | None = None,
) -> dict[LeadType, SampleArray] | None:
    """Calculate the limb leads missing from a recording of I and II (and III).

    Args:
        lead_i: Samples of lead I.
        lead_ii: Samples of lead II.
        total_length: Number of samples of every derived lead.
        lead_iii: Samples of lead III when it was recorded. aVL and aVF are then
            calculated using III and III itself is not part of the result.

    Returns:
        Mapping of derived lead type to samples, in canonical order, or ``None``
        if the generating leads are missing.
    """
    if lead_iii is None:
        if not _check_leads(total_length, lead_i, lead_ii):
            return None
        return {
            LeadType.III: calculate_lead_iii(lead_i, lead_ii, total_length),
            LeadType.aVR: calculate_lead_avr(lead_i, lead_ii, total_length),
            LeadType.aVL: calculate_lead_avl(lead_i, lead_ii, total_length, three_leads=False),
            LeadType.aVF: calculate_lead_avf(lead_i, lead_ii, total_length, three_leads=False),
        }

    if not _check_leads(total_length, lead_i, lead_ii, lead_iii):
        return None
    return {
        LeadType.aVR: calculate_lead_avr(lead_i, lead_ii, total_length),
        LeadType.aVL: calculate_lead_avl(lead_i, lead_iii, total_length, three_leads=True),
        LeadType.aVF: calculate_lead_avf(lead_iii, lead_ii, total_length, three_leads=True),
    }


def rescale_position(value: int, new_rate: int, old_rate: int) -> int:
    """Rescale a sample position from ``old_rate`` to ``new_rate``.

    Computes ``round(value * new_rate / old_rate)`` with exact integer
    arithmetic, rounding halves away from zero, so positions deep into long
    recordings cannot overflow or lose precision.

    Raises:
        ZeroDivisionError: If ``old_rate`` is zero.
    """
    numerator = int(value) * int(new_rate)
    old_rate = int(old_rate)
    quotient = (2 * abs(numerator) + abs(old_rate)) // (2 * abs(old_rate))
    return quotient if (numerator >= 0) == (old_rate > 0) else -quotient


def resample_lead(
    samples: SampleArray | None,
    src_rate: int,
    dst_rate: int,
    length: int | None = None,
) -> SampleArray | None:
    """Resample one lead to another sample rate.

    A polyphase filter is used, so no aliasing is introduced when decimating and
    the edges of a window are extended linearly instead of wrapping around.

    Args:
        samples: Samples of the lead, ``None`` is passed through.
        src_rate: Sample rate of ``samples`` in Hz.
        dst_rate: Sample rate to resample to in Hz.
        length: Number of output samples. Defaults to
            ``len(samples) * dst_rate // src_rate``.

    Returns:
        Resampled samples as int16, clipped to the int16 range.

    Raises:
        ValueError: If a sample rate is not positive or ``length`` is negative.
    """
    if src_rate <= 0 or dst_rate <= 0:
        raise ValueError(f"Sample rates must be positive, got {src_rate} Hz -> {dst_rate} Hz")
    if samples is None:
        return None

    samples = np.asarray(samples)
    if length is None:
        length = (len(samples) * dst_rate) // src_rate
    if length < 0:
        raise ValueError(f"Output length must be non-negative, got {length}")

    if len(samples) == 0 or length == 0:
        return np.zeros(length, dtype=np.int16)

    if src_rate == dst_rate:
        resampled = samples.astype(np.float64)
    elif len(samples) < 2:
        resampled = np.full(length, float(samples[0]))
    else:
        gcd = math.gcd(int(src_rate), int(dst_rate))
        resampled = signal.resample_poly(
            samples.astype(np.float64), int(dst_rate) // gcd, int(src_rate) // gcd, padtype="line"
        )

    if len(resampled) >= length:
        resampled = resampled[:length]
    else:
        resampled = np.pad(resampled, (0, length - len(resampled)), mode="edge")

    return np.clip(np.rint(resampled), INT16_MIN, INT16_MAX).astype(np.int16)


def change_multiplier(samples: SampleArray | None, src_avm: float, dst_avm: float) -> bool:
    """Rescale stored samples in place from one AVM to another.

    Values are truncated toward zero, so precision is lost when the new
    multiplier is larger than the old one.

    Args:
        samples: Samples to rescale in place.
        src_avm: Current amplitude multiplier in uV.
        dst_avm: Preferred amplitude multiplier in uV.

    Returns:
        True if the samples are expressed in ``dst_avm`` afterwards.
    """
    if samples is None:
        return False
    if src_avm == dst_avm:
        return True
    if src_avm <= 0 or dst_avm <= 0:
        return False

    scaled = np.trunc(samples.astype(np.float64) * src_avm / dst_avm)
    samples[:] = np.clip(scaled, INT16_MIN, INT16_MAX).astype(np.int16)
    return True
