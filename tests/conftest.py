"""Shared test fixtures for ecg-signals tests."""

import neurokit2 as nk
import numpy as np
import pytest

from ecg_signals import TWELVE_LEAD_LAYOUT, LeadType, Signal, Signals

AVM = 2.5  # uV per stored unit
SFREQ = 500


def _simulate_twelve_leads(duration: int, sfreq: int, random_state: int = 0) -> np.ndarray:
    """Simulate 12 leads in canonical order, scaled to stored int16 samples."""
    ecg = nk.ecg_simulate(
        duration=duration,
        sampling_rate=sfreq,
        noise=0.01,
        heart_rate=70,
        method="multileads",
        random_state=random_state,
    )
    # mV -> stored units
    samples = np.asarray(ecg, dtype=np.float64).T * 1000.0 / AVM
    return np.clip(np.rint(samples), -32768, 32767).astype(np.int16)


@pytest.fixture(scope="session")
def twelve_lead_data() -> tuple[np.ndarray, int]:
    """Generate synthetic 12-lead ECG data.

    Returns:
        Tuple of (ecg_data, sfreq) where ecg_data has shape (12, n_timepoints)
    """
    return _simulate_twelve_leads(duration=20, sfreq=SFREQ), SFREQ


def make_signals(data: np.ndarray, lead_types, sfreq: int = SFREQ, median_length: int = 0) -> Signals:
    """Build a ``Signals`` with one lead per row of ``data``.

    When ``median_length`` is set, the first ``median_length`` samples of every
    lead are used as its median beat.
    """
    sigs = Signals(len(lead_types))
    sigs.rhythm_avm = AVM
    sigs.rhythm_samples_per_second = sfreq
    if median_length:
        sigs.median_avm = AVM
        sigs.median_samples_per_second = sfreq
        sigs.median_length = median_length * 1000 // sfreq
    for i, (lead_type, row) in enumerate(zip(lead_types, data)):
        median = row[:median_length] if median_length else None
        sigs[i] = Signal(lead_type, 0, len(row), row, median)
    return sigs


@pytest.fixture
def twelve_lead_signals(twelve_lead_data: tuple[np.ndarray, int]) -> Signals:
    """Canonical 12-lead signals of 20 s with median beats."""
    data, sfreq = twelve_lead_data
    return make_signals(data, TWELVE_LEAD_LAYOUT, sfreq, median_length=400)


@pytest.fixture
def eight_lead_signals(twelve_lead_data: tuple[np.ndarray, int]) -> Signals:
    """Leads I, II, V1 - V6 as recorded by a 12-lead device, with median beats."""
    data, sfreq = twelve_lead_data
    keep = [TWELVE_LEAD_LAYOUT.index(lead) for lead in (LeadType.I, LeadType.II)] + list(range(6, 12))
    return make_signals(data[keep], [TWELVE_LEAD_LAYOUT[i] for i in keep], sfreq, median_length=400)


@pytest.fixture
def signals_factory():
    """Return the ``make_signals`` helper."""
    return make_signals
