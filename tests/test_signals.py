"""Tests for the Signals container and its transformations."""

import numpy as np
import pandas as pd
import pytest

from ecg_signals import (
    FIFTEEN_LEAD_LAYOUTS,
    TWELVE_LEAD_LAYOUT,
    FilterState,
    LeadSettings,
    LeadType,
    QRSZone,
    Settings,
    Signal,
    Signals,
)
from ecg_signals.lead_math import calculate_lead_avf, calculate_lead_avl, calculate_lead_avr, calculate_lead_iii


def _types(sigs: Signals) -> list[LeadType]:
    return [lead.type for lead in sigs]


def _lead_of(sigs: Signals, lead_type: LeadType) -> Signal:
    return next(lead for lead in sigs if lead.type == lead_type)


class TestContainer:
    def test_nr_leads_allocates_empty_slots(self):
        sigs = Signals(3)

        assert sigs.nr_leads == 3
        assert len(sigs) == 3
        assert list(sigs) == [None, None, None]

    @pytest.mark.parametrize("nr_leads", [-1, 256])
    def test_invalid_nr_leads_is_ignored(self, nr_leads):
        sigs = Signals(2)
        sigs.nr_leads = nr_leads
        assert sigs.nr_leads == 2

    def test_index_out_of_range(self):
        sigs = Signals(1)
        assert sigs[1] is None
        assert sigs[-1] is None

    def test_set_leads(self):
        sigs = Signals()
        leads = [Signal(LeadType.I), Signal(LeadType.II)]

        sigs.set_leads(leads)

        assert sigs.get_leads() == leads
        assert sigs[1] is leads[1]

    def test_set_too_many_leads_is_ignored(self):
        sigs = Signals(1)
        sigs.set_leads([Signal(LeadType.I)] * 256)
        assert sigs.nr_leads == 1

    def test_not_buffered(self):
        sigs = Signals(1)
        assert not sigs.is_buffered
        assert sigs.as_buffered_signals is None

    def test_clone_is_deep(self, twelve_lead_signals):
        twelve_lead_signals.qrs_zone = [QRSZone(0, 10, 20, 30)]

        clone = twelve_lead_signals.clone()
        clone[0].rhythm[0] += 1
        clone.qrs_zone[0].start = 11

        assert clone is not twelve_lead_signals
        assert clone.rhythm_avm == twelve_lead_signals.rhythm_avm
        assert clone.median_length == twelve_lead_signals.median_length
        assert clone[0].rhythm[0] != twelve_lead_signals[0].rhythm[0]
        assert twelve_lead_signals.qrs_zone[0].start == 10

    def test_start_and_end(self):
        sigs = Signals()
        sigs.set_leads([Signal(LeadType.I, 10, 20, np.zeros(10)), Signal(LeadType.II, 5, 15, np.zeros(10))])

        assert sigs.calculate_start_and_end() == (5, 20)

    def test_start_and_end_without_leads(self):
        assert Signals().calculate_start_and_end() == (2**31 - 1, -(2**31))

    def test_sort_on_type(self, twelve_lead_signals):
        twelve_lead_signals.set_leads(list(reversed(twelve_lead_signals.get_leads())))

        twelve_lead_signals.sort_on_type()

        assert _types(twelve_lead_signals) == sorted(TWELVE_LEAD_LAYOUT)

    def test_sort_on_type_with_empty_slots(self):
        sigs = Signals(3)
        sigs[2] = Signal(LeadType.II, 0, 10, np.zeros(10, dtype=np.int16))

        sigs.sort_on_type()

        assert sigs[0].type == LeadType.II
        assert sigs[1] is None and sigs[2] is None

    def test_is_normal(self, eight_lead_signals, twelve_lead_signals):
        assert eight_lead_signals.is_normal()
        assert not twelve_lead_signals.is_normal()

    def test_simultaneous_tolerance_from_settings(self):
        sigs = Signals(settings=Settings(leads=LeadSettings(simultaneous_tolerance=0)))
        sigs.set_leads([Signal(LeadType.I, 0, 10, np.zeros(10)), Signal(LeadType.II, 1, 11, np.zeros(10))])

        assert sigs.nr_simultaneously() == 1


class TestTrimSignals:
    def _signals(self, rhythms, starts=None, rate=100) -> Signals:
        sigs = Signals()
        sigs.rhythm_samples_per_second = rate
        starts = starts or [0] * len(rhythms)
        sigs.set_leads(
            [
                Signal(LeadType.I + i, start, start + len(rhythm), rhythm)
                for i, (start, rhythm) in enumerate(zip(starts, rhythms))
            ]
        )
        return sigs

    def test_trims_padding_of_at_least_one_second(self):
        rhythm = np.concatenate([np.zeros(150), np.ones(500), np.zeros(120)])
        sigs = self._signals([rhythm])

        sigs.trim_signals(0)

        lead = sigs[0]
        assert (lead.rhythm_start, lead.rhythm_end) == (150, 650)
        assert len(lead.rhythm) == 500
        assert np.all(lead.rhythm == 1)

    def test_short_padding_is_kept(self):
        rhythm = np.concatenate([np.zeros(99), np.ones(500), np.zeros(99)])
        sigs = self._signals([rhythm])

        sigs.trim_signals(0)

        assert (sigs[0].rhythm_start, sigs[0].rhythm_end) == (0, 698)
        assert len(sigs[0].rhythm) == 698

    def test_trims_one_edge_only(self):
        rhythm = np.concatenate([np.zeros(50), np.ones(500), np.zeros(200)])
        sigs = self._signals([rhythm])

        sigs.trim_signals(0)

        assert (sigs[0].rhythm_start, sigs[0].rhythm_end) == (0, 550)

    def test_only_leads_at_the_extent_are_trimmed(self):
        padded = np.concatenate([np.zeros(200), np.ones(500)])
        sigs = self._signals([padded, padded], starts=[0, 10])

        sigs.trim_signals(0)

        assert sigs[0].rhythm_start == 200
        assert sigs[1].rhythm_start == 10
        assert len(sigs[1].rhythm) == 700

    def test_other_padding_value(self):
        rhythm = np.concatenate([np.full(200, -1), np.ones(500)])
        sigs = self._signals([rhythm])

        sigs.trim_signals(0)
        assert sigs[0].rhythm_start == 0

        sigs.trim_signals(-1)
        assert sigs[0].rhythm_start == 200

    def test_explicit_bounds(self):
        rhythm = np.concatenate([np.zeros(200), np.ones(500)])
        sigs = self._signals([rhythm])

        sigs.trim_signals(0, start=-1, end=700)

        assert sigs[0].rhythm_start == 0


class TestMakeSpecificLength:
    def _signals(self) -> Signals:
        sigs = Signals()
        sigs.rhythm_samples_per_second = 100
        sigs.set_leads(
            [
                Signal(LeadType.I, 0, 1000, np.arange(1000)),
                Signal(LeadType.II, 100, 600, np.arange(500)),
            ]
        )
        return sigs

    def test_clips_to_length(self):
        sigs = self._signals()

        sigs.make_specific_length(5)

        for lead in sigs:
            assert (lead.rhythm_start, lead.rhythm_end) == (0, 500)
            assert len(lead.rhythm) == 500
        np.testing.assert_array_equal(sigs[0].rhythm, np.arange(500))
        assert np.all(sigs[1].rhythm[:100] == 0)
        np.testing.assert_array_equal(sigs[1].rhythm[100:], np.arange(400))

    def test_start_point(self):
        sigs = self._signals()

        sigs.make_specific_length(5, start_point=2)

        np.testing.assert_array_equal(sigs[0].rhythm, np.arange(200, 700))
        np.testing.assert_array_equal(sigs[1].rhythm[:400], np.arange(100, 500))
        assert np.all(sigs[1].rhythm[400:] == 0)

    def test_pads_with_zeros(self):
        sigs = self._signals()

        sigs.make_specific_length(12)

        assert len(sigs[0].rhythm) == 1200
        assert np.all(sigs[0].rhythm[1000:] == 0)


class TestResample:
    def test_halves_rate(self, twelve_lead_signals):
        resampled = twelve_lead_signals.resample(250)

        assert resampled is not twelve_lead_signals
        assert resampled.rhythm_samples_per_second == 250
        assert resampled.median_samples_per_second == 250
        for lead in resampled:
            assert (lead.rhythm_start, lead.rhythm_end) == (0, 5000)
            assert len(lead.rhythm) == lead.rhythm_end - lead.rhythm_start
            assert len(lead.median) == 200

    def test_input_is_unchanged(self, twelve_lead_signals):
        twelve_lead_signals.resample(250)

        assert twelve_lead_signals.rhythm_samples_per_second == 500
        assert len(twelve_lead_signals[0].rhythm) == 10000

    def test_round_trip_bounds(self, signals_factory):
        sigs = signals_factory(np.zeros((2, 997), dtype=np.int16), [LeadType.I, LeadType.II])
        for lead in sigs:
            lead.rhythm_start += 333
            lead.rhythm_end += 333

        back = sigs.resample(360).resample(500)

        for original, lead in zip(sigs, back):
            assert abs(lead.rhythm_start - original.rhythm_start) <= 1
            assert abs(lead.rhythm_end - original.rhythm_end) <= 1
            assert len(lead.rhythm) == lead.rhythm_end - lead.rhythm_start

    def test_waveform_is_preserved(self, twelve_lead_signals):
        lead_ii = twelve_lead_signals[1].rhythm.astype(float)

        resampled = twelve_lead_signals.resample(1000)[1].rhythm.astype(float)

        assert np.corrcoef(resampled[::2][100:-100], lead_ii[100:-100])[0, 1] > 0.99

    def test_zero_avm_stream_is_not_resampled(self, twelve_lead_signals):
        twelve_lead_signals.median_avm = 0.0

        resampled = twelve_lead_signals.resample(250)

        assert resampled.median_samples_per_second == 500
        assert len(resampled[0].median) == 400
        assert resampled.rhythm_samples_per_second == 250

    def test_qrs_zones_and_fiducial_point(self, twelve_lead_signals):
        twelve_lead_signals.qrs_zone = [QRSZone(0, 100, 151, 200)]
        twelve_lead_signals.median_fiducial_point = 201

        resampled = twelve_lead_signals.resample(250)

        assert resampled.qrs_zone == [QRSZone(0, 50, 76, 100)]
        assert resampled.median_fiducial_point == 101
        assert twelve_lead_signals.qrs_zone == [QRSZone(0, 100, 151, 200)]

    def test_invalid_rate_raises(self, twelve_lead_signals):
        with pytest.raises(ValueError):
            twelve_lead_signals.resample(0)


class TestSetAVM:
    def test_rescales_streams(self):
        sigs = Signals(1)
        sigs.rhythm_avm = 5.0
        sigs.median_avm = 5.0
        sigs[0] = Signal(LeadType.I, 0, 2, [100, 201], [50, -7])

        sigs.set_avm(10.0)

        np.testing.assert_array_equal(sigs[0].rhythm, [50, 100])
        np.testing.assert_array_equal(sigs[0].median, [25, -3])
        assert sigs.rhythm_avm == 10.0
        assert sigs.median_avm == 10.0

    def test_unset_avm_is_kept(self):
        sigs = Signals(1)
        sigs.rhythm_avm = 5.0
        sigs[0] = Signal(LeadType.I, 0, 2, [100, 200], [50, 60])

        sigs.set_avm(10.0)

        np.testing.assert_array_equal(sigs[0].median, [50, 60])
        assert sigs.median_avm == 0.0

    def test_zero_avm_is_ignored(self):
        sigs = Signals(1)
        sigs.rhythm_avm = 5.0
        sigs[0] = Signal(LeadType.I, 0, 2, [100, 200])

        sigs.set_avm(0.0)

        assert sigs.rhythm_avm == 5.0
        np.testing.assert_array_equal(sigs[0].rhythm, [100, 200])


class TestClassification:
    def _signals(self, lead_types, signals_factory) -> Signals:
        return signals_factory(np.zeros((len(lead_types), 100), dtype=np.int16), lead_types)

    def test_twelve_leads(self, twelve_lead_signals):
        assert twelve_lead_signals.is_twelve_leads()
        assert not twelve_lead_signals.is_fifteen_leads()

    def test_permuted_twelve_leads(self, twelve_lead_signals):
        twelve_lead_signals.set_leads(list(reversed(twelve_lead_signals.get_leads())))
        assert not twelve_lead_signals.is_twelve_leads()

    def test_non_simultaneous_leads(self, twelve_lead_signals):
        twelve_lead_signals[11].rhythm_start += 100
        assert not twelve_lead_signals.is_twelve_leads()

    @pytest.mark.parametrize("layout", FIFTEEN_LEAD_LAYOUTS)
    def test_fifteen_leads(self, layout, signals_factory):
        sigs = self._signals(layout, signals_factory)

        assert sigs.is_fifteen_leads()
        assert sigs.is_twelve_leads()

    def test_fifteen_leads_with_unrecognized_extension_count_as_twelve_leads(self, signals_factory):
        # the extra leads are never compared
        sigs = self._signals(TWELVE_LEAD_LAYOUT + (LeadType.V9, LeadType.X, LeadType.V3R), signals_factory)

        assert sigs.is_twelve_leads()
        assert not sigs.is_fifteen_leads()

    def test_fifteen_leads_need_canonical_first_twelve(self, signals_factory):
        layout = FIFTEEN_LEAD_LAYOUTS[0]
        sigs = self._signals((layout[1], layout[0]) + layout[2:], signals_factory)

        assert not sigs.is_twelve_leads()
        assert not sigs.is_fifteen_leads()


class TestCalculateTwelveLeads:
    def test_canonical_returns_same_instance(self, twelve_lead_signals):
        assert twelve_lead_signals.calculate_twelve_leads() is twelve_lead_signals

    def test_permuted_returns_reordered_copy(self, twelve_lead_signals):
        twelve_lead_signals.set_leads(list(reversed(twelve_lead_signals.get_leads())))

        result = twelve_lead_signals.calculate_twelve_leads()

        assert result is not twelve_lead_signals
        assert result.is_twelve_leads()
        assert _types(result) == list(TWELVE_LEAD_LAYOUT)
        for lead in result:
            original = _lead_of(twelve_lead_signals, lead.type)
            assert lead is not original
            np.testing.assert_array_equal(lead.rhythm, original.rhythm)

    def test_eight_leads_derive_limb_leads(self, eight_lead_signals):
        result = eight_lead_signals.calculate_twelve_leads()

        assert result.is_twelve_leads()
        assert result.rhythm_samples_per_second == eight_lead_signals.rhythm_samples_per_second
        lead_i, lead_ii = eight_lead_signals[0], eight_lead_signals[1]
        n = len(lead_i.rhythm)
        np.testing.assert_array_equal(result[2].rhythm, calculate_lead_iii(lead_i.rhythm, lead_ii.rhythm, n))
        np.testing.assert_array_equal(result[3].rhythm, calculate_lead_avr(lead_i.rhythm, lead_ii.rhythm, n))
        np.testing.assert_array_equal(result[4].rhythm, calculate_lead_avl(lead_i.rhythm, lead_ii.rhythm, n, False))
        np.testing.assert_array_equal(result[5].rhythm, calculate_lead_avf(lead_i.rhythm, lead_ii.rhythm, n, False))
        np.testing.assert_array_equal(
            result[2].median.astype(int), lead_ii.median.astype(int) - lead_i.median.astype(int)
        )
        for lead in result:
            assert (lead.rhythm_start, lead.rhythm_end) == (lead_i.rhythm_start, lead_i.rhythm_end)

    def test_nine_leads_use_recorded_lead_iii(self, twelve_lead_signals):
        nine = [twelve_lead_signals[i] for i in (0, 1, 2, 6, 7, 8, 9, 10, 11)]
        twelve_lead_signals.set_leads(nine)

        result = twelve_lead_signals.calculate_twelve_leads()

        lead_i, lead_ii, lead_iii = nine[:3]
        n = len(lead_i.rhythm)
        assert result[2].rhythm is not lead_iii.rhythm
        np.testing.assert_array_equal(result[2].rhythm, lead_iii.rhythm)
        np.testing.assert_array_equal(result[4].rhythm, calculate_lead_avl(lead_i.rhythm, lead_iii.rhythm, n, True))
        np.testing.assert_array_equal(result[5].rhythm, calculate_lead_avf(lead_iii.rhythm, lead_ii.rhythm, n, True))

    def test_extra_leads_are_dropped(self, eight_lead_signals, signals_factory):
        extra = signals_factory(np.ones((3, 10000), dtype=np.int16), [LeadType.V7, LeadType.V8, LeadType.V9])
        eight_lead_signals.set_leads(eight_lead_signals.get_leads() + extra.get_leads())

        result = eight_lead_signals.calculate_twelve_leads()

        assert _types(result) == list(TWELVE_LEAD_LAYOUT)

    def test_without_medians(self, eight_lead_signals):
        for lead in eight_lead_signals:
            lead.median = None

        result = eight_lead_signals.calculate_twelve_leads()

        assert result[2].median is None
        assert result.is_twelve_leads()

    def test_unrecognized_lead_set(self, eight_lead_signals):
        eight_lead_signals.set_leads(eight_lead_signals.get_leads()[:3])
        assert eight_lead_signals.calculate_twelve_leads() is None

    def test_non_simultaneous_leads(self, eight_lead_signals):
        eight_lead_signals[3].rhythm_end -= 100
        assert eight_lead_signals.calculate_twelve_leads() is None

    def test_single_lead(self, signals_factory):
        sigs = signals_factory(np.zeros((1, 10), dtype=np.int16), [LeadType.I])
        assert sigs.calculate_twelve_leads() is None

    def test_missing_rhythm(self, eight_lead_signals):
        eight_lead_signals[1].rhythm = None
        assert eight_lead_signals.calculate_twelve_leads() is None


class TestCalculateFifteenLeads:
    def test_canonical_returns_same_instance(self, signals_factory):
        sigs = signals_factory(np.zeros((15, 10), dtype=np.int16), FIFTEEN_LEAD_LAYOUTS[0])
        assert sigs.calculate_fifteen_leads() is sigs

    @pytest.mark.parametrize("layout", FIFTEEN_LEAD_LAYOUTS)
    def test_eleven_leads_derive_limb_leads(self, eight_lead_signals, signals_factory, layout):
        extra = signals_factory(np.ones((3, 10000), dtype=np.int16), layout[12:])
        eight_lead_signals.set_leads(eight_lead_signals.get_leads() + extra.get_leads())

        result = eight_lead_signals.calculate_fifteen_leads()

        assert result.is_fifteen_leads()
        assert tuple(_types(result)) == layout
        np.testing.assert_array_equal(
            result[2].rhythm.astype(int),
            eight_lead_signals[1].rhythm.astype(int) - eight_lead_signals[0].rhythm.astype(int),
        )

    def test_permuted_fifteen_leads(self, signals_factory):
        layout = FIFTEEN_LEAD_LAYOUTS[1]
        data = np.arange(15, dtype=np.int16)[:, None].repeat(10, axis=1)
        sigs = signals_factory(data[::-1], layout[::-1])

        result = sigs.calculate_fifteen_leads()

        assert tuple(_types(result)) == layout
        assert result[0].rhythm[0] == 0

    def test_twelve_leads_are_not_fifteen_leads(self, twelve_lead_signals):
        assert twelve_lead_signals.calculate_fifteen_leads() is None


class TestFilters:
    def test_lowpass_returns_filtered_copy(self, twelve_lead_signals):
        result = twelve_lead_signals.apply_lowpass_filter(40.0)

        assert result is not twelve_lead_signals
        assert result.nr_leads == 12
        assert result.rhythm_avm == twelve_lead_signals.rhythm_avm
        for original, lead in zip(twelve_lead_signals, result):
            assert lead.type == original.type
            assert len(lead.rhythm) == len(original.rhythm)
            assert len(lead.median) == len(original.median)
            assert lead.rhythm.dtype == np.int16

    def test_highpass_removes_offset(self, signals_factory):
        data = np.full((2, 10000), 1000, dtype=np.int16)
        sigs = signals_factory(data, [LeadType.I, LeadType.II])

        result = sigs.apply_highpass_filter(0.5)

        assert np.all(np.abs(result[0].rhythm[-1000:]) <= 1)

    def test_bandpass_approximates_lowpass_then_highpass(self, twelve_lead_signals):
        bandpass = twelve_lead_signals.apply_bandpass_filter(0.5, 40.0)
        cascade = twelve_lead_signals.apply_lowpass_filter(40.0).apply_highpass_filter(0.5)

        for a, b in zip(bandpass, cascade):
            # skip the first two seconds of transient
            assert np.corrcoef(a.rhythm[1000:].astype(float), b.rhythm[1000:].astype(float))[0, 1] > 0.99

    def test_defaults_from_settings(self, twelve_lead_signals):
        state = FilterState()

        twelve_lead_signals.apply_bandpass_filter(state=state)

        assert state.key == (("bandpass", 0.05, 40.0, 2), 500, 500)

    @pytest.mark.parametrize("method", ["apply_bandpass_filter", "apply_lowpass_filter", "apply_highpass_filter"])
    def test_zero_sections_is_rejected(self, twelve_lead_signals, method):
        with pytest.raises(ValueError, match="at least 1"):
            getattr(twelve_lead_signals, method)(num_sections=0)

    def test_unknown_sample_rate(self, twelve_lead_signals):
        twelve_lead_signals.median_samples_per_second = 0
        assert twelve_lead_signals.apply_lowpass_filter(40.0) is None

    def test_state_is_reused_across_windows(self, twelve_lead_signals):
        state = FilterState()

        twelve_lead_signals.apply_lowpass_filter(40.0, state=state)
        filters = list(state.rhythm_filters)
        twelve_lead_signals.apply_lowpass_filter(40.0, state=state)

        assert len(state) == 12
        assert all(a is b for a, b in zip(filters, state.rhythm_filters))

    def test_state_continues_history(self, signals_factory):
        data = np.full((1, 2000), 1000, dtype=np.int16)
        window = signals_factory(data, [LeadType.I])
        state = FilterState()

        first = window.apply_highpass_filter(0.5, state=state)
        second = window.apply_highpass_filter(0.5, state=state)

        # the offset is already removed at the start of the second window
        assert abs(int(first[0].rhythm[0])) > 900
        assert abs(int(second[0].rhythm[0])) < abs(int(first[0].rhythm[0]))

    def test_state_is_rebuilt_for_other_filter(self, twelve_lead_signals):
        state = FilterState()

        twelve_lead_signals.apply_lowpass_filter(40.0, state=state)
        filters = list(state.rhythm_filters)
        twelve_lead_signals.apply_lowpass_filter(30.0, state=state)

        assert state.rhythm_filters[0] is not filters[0]


class TestToDataFrame:
    def test_rhythm(self):
        sigs = Signals()
        sigs.set_leads(
            [
                Signal(LeadType.I, 10, 14, [1, 2, 3, 4]),
                Signal(LeadType.II, 12, 14, [5, 6]),
            ]
        )

        df = sigs.to_dataframe()

        assert isinstance(df, pd.DataFrame)
        assert list(df.columns) == ["I", "II"]
        assert list(df.index) == [10, 11, 12, 13]
        assert df["I"].tolist() == [1, 2, 3, 4]
        assert df["II"].isna().tolist() == [True, True, False, False]
        assert df.loc[13, "II"] == 6

    def test_median(self, twelve_lead_signals):
        df = twelve_lead_signals.to_dataframe("median")

        assert df.shape == (400, 12)
        assert list(df.columns) == [lead.name for lead in TWELVE_LEAD_LAYOUT]

    def test_empty(self):
        assert Signals().to_dataframe().empty

    def test_unknown_stream(self):
        with pytest.raises(ValueError, match="Unknown stream"):
            Signals().to_dataframe("template")
