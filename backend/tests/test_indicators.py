"""Tests for technical indicators."""

import math

import pytest

from quantcore.indicators import (
    bollinger_bands,
    ema,
    is_undefined,
    lag,
    log_returns,
    macd,
    momentum,
    returns,
    rolling_skew,
    rolling_std,
    rsi,
    sma,
)

# A choppy series with both gains and losses
PRICES = [
    44.34, 44.09, 44.15, 43.61, 44.33, 44.83, 45.10, 45.42, 45.84, 46.08,
    45.89, 46.03, 45.61, 46.28, 46.28, 46.00, 46.03, 46.41, 46.22, 45.64,
    46.21, 46.25, 45.71, 46.45, 45.78, 45.35, 44.03, 44.18, 44.22, 44.57,
    43.42, 42.66, 43.13, 43.95, 44.12, 44.60, 45.01, 44.75, 45.20, 45.90,
]


class TestSMA:
    """Tests for SMA calculation."""

    def test_sma_basic(self):
        """Test basic SMA calculation."""
        result = sma([1.0, 2.0, 3.0, 4.0, 5.0], 3)

        # First 2 values should be NaN
        assert is_undefined(result[0])
        assert is_undefined(result[1])

        assert result[2] == 2.0  # (1+2+3)/3
        assert result[3] == 3.0  # (2+3+4)/3
        assert result[4] == 4.0  # (3+4+5)/3

    def test_sma_empty(self):
        assert sma([], 3) == []

    def test_sma_shorter_than_period(self):
        result = sma([1.0, 2.0], 3)
        assert len(result) == 2
        assert all(is_undefined(v) for v in result)

    def test_sma_non_positive_period(self):
        """A zero period yields undefined values instead of raising."""
        result = sma([1.0, 2.0, 3.0], 0)
        assert len(result) == 3
        assert all(is_undefined(v) for v in result)


class TestEMA:
    """Tests for EMA calculation."""

    def test_ema_seed_is_sma(self):
        """First valid EMA is the SMA of the first `period` values."""
        result = ema([1.0, 2.0, 3.0, 4.0, 5.0], 3)

        assert is_undefined(result[0])
        assert is_undefined(result[1])
        assert result[2] == 2.0

    def test_ema_smoothing(self):
        """EMA(today) = (price - EMA(yesterday)) * 2/(period+1) + EMA(yesterday)."""
        result = ema([1.0, 2.0, 3.0, 4.0, 5.0], 3)

        # multiplier = 2 / (3 + 1) = 0.5
        assert result[3] == pytest.approx((4.0 - 2.0) * 0.5 + 2.0)
        assert result[4] == pytest.approx((5.0 - 3.0) * 0.5 + 3.0)

    @pytest.mark.parametrize("period", [1, 5, 12, 26])
    def test_ema_seed_matches_sma_exactly(self, period):
        ema_values = ema(PRICES, period)
        sma_values = sma(PRICES, period)
        assert ema_values[period - 1] == sma_values[period - 1]

    def test_ema_skips_leading_undefined(self):
        """Window completion starts at the first defined input."""
        nan = float("nan")
        result = ema([nan, nan, 1.0, 2.0, 3.0, 4.0], 3)

        assert len(result) == 6
        assert all(is_undefined(v) for v in result[:4])
        assert result[4] == 2.0
        assert result[5] == pytest.approx(3.0)

    def test_ema_all_undefined(self):
        nan = float("nan")
        result = ema([nan, nan, nan], 2)
        assert len(result) == 3
        assert all(is_undefined(v) for v in result)

    def test_ema_empty(self):
        assert ema([], 3) == []

    def test_ema_insufficient_data(self):
        result = ema([100.0, 101.0, 102.0], 10)
        assert len(result) == 3
        assert all(is_undefined(v) for v in result)


class TestRSI:
    """Tests for RSI calculation."""

    def test_rsi_insufficient_data(self):
        result = rsi([1.0, 2.0, 3.0], 5)
        assert len(result) == 3
        assert all(is_undefined(v) for v in result)

    def test_rsi_empty_and_single(self):
        assert rsi([], 14) == []
        assert len(rsi([1.0], 14)) == 1

    def test_rsi_warm_up(self):
        result = rsi(PRICES, 14)
        assert len(result) == len(PRICES)
        assert all(is_undefined(v) for v in result[:14])
        assert not is_undefined(result[14])

    def test_rsi_only_gains_is_100(self):
        """Strictly increasing prices yield RSI = 100."""
        prices = [float(i + 1) for i in range(20)]
        result = rsi(prices, 14)
        assert result[-1] == 100.0

    def test_rsi_flat_prices_is_100(self):
        """Zero average loss yields exactly 100, never a division error."""
        result = rsi([10.0] * 20, 14)
        assert result[-1] == 100.0

    def test_rsi_only_losses_is_0(self):
        prices = [float(30 - i) for i in range(20)]
        result = rsi(prices, 14)
        assert result[-1] == pytest.approx(0.0)

    def test_rsi_wilder_smoothing(self):
        """Running averages are smoothed from the previous averages."""
        # changes: +1, -1, +1, -1
        result = rsi([1.0, 2.0, 1.0, 2.0, 1.0], 2)

        # Initial averages: gain 0.5, loss 0.5 -> RSI 50
        assert result[2] == pytest.approx(50.0)
        # gain (0.5 + 1) / 2 = 0.75, loss (0.5 + 0) / 2 = 0.25 -> RS 3
        assert result[3] == pytest.approx(75.0)
        # gain 0.375, loss 0.625 -> RS 0.6
        assert result[4] == pytest.approx(37.5)

    def test_rsi_recovers_after_100(self):
        """Carried averages keep working after a run of pure gains."""
        prices = [float(i) for i in range(1, 17)] + [10.0]
        result = rsi(prices, 14)
        assert result[15] == 100.0
        assert 0 < result[16] < 100

    def test_rsi_bounds(self):
        result = rsi(PRICES, 14)
        defined = [v for v in result if not is_undefined(v)]
        assert defined
        assert all(0 <= v <= 100 for v in defined)


class TestMACD:
    """Tests for MACD calculation."""

    def test_macd_alignment(self):
        result = macd(PRICES)
        assert len(result.macd) == len(PRICES)
        assert len(result.signal) == len(PRICES)
        assert len(result.histogram) == len(PRICES)

    def test_macd_warm_up(self):
        """MACD starts with the slow EMA; signal needs 9 defined MACD values."""
        macd_line, signal_line, histogram = macd(PRICES)

        assert all(is_undefined(v) for v in macd_line[:25])
        assert not is_undefined(macd_line[25])

        assert all(is_undefined(v) for v in signal_line[:33])
        assert not is_undefined(signal_line[33])
        assert all(is_undefined(v) for v in histogram[:33])

    def test_macd_signal_seeded_from_defined_values(self):
        macd_line, signal_line, _ = macd(PRICES)
        expected_seed = sum(macd_line[25:34]) / 9
        assert signal_line[33] == pytest.approx(expected_seed)

    def test_macd_histogram_identity(self):
        macd_line, signal_line, histogram = macd(PRICES)
        for m, s, h in zip(macd_line, signal_line, histogram):
            if not (is_undefined(m) or is_undefined(s)):
                assert h == pytest.approx(m - s, abs=1e-4)

    def test_macd_short_input(self):
        result = macd(PRICES[:10])
        assert all(is_undefined(v) for v in result.macd)
        assert all(is_undefined(v) for v in result.histogram)

    def test_macd_empty(self):
        result = macd([])
        assert result.macd == []
        assert result.signal == []
        assert result.histogram == []


class TestBollingerBands:
    """Tests for Bollinger Bands calculation."""

    def test_bands_symmetric(self):
        upper, middle, lower = bollinger_bands(PRICES, 20, 2.0)
        for u, m, lo in zip(upper, middle, lower):
            if not is_undefined(m):
                assert u - m == pytest.approx(m - lo)

    def test_bands_use_population_std(self):
        prices = [2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0]
        upper, middle, lower = bollinger_bands(prices, 8, 2.0)

        # mean 5, population std 2
        assert middle[-1] == 5.0
        assert upper[-1] == pytest.approx(9.0)
        assert lower[-1] == pytest.approx(1.0)

    def test_bands_constant_prices(self):
        upper, middle, lower = bollinger_bands([10.0] * 25, 20)
        assert upper[-1] == middle[-1] == lower[-1] == 10.0

    def test_bands_warm_up(self):
        upper, middle, lower = bollinger_bands(PRICES, 20)
        assert len(upper) == len(PRICES)
        assert all(is_undefined(v) for v in upper[:19])
        assert all(is_undefined(v) for v in lower[:19])
        assert not is_undefined(upper[19])


class TestRollingStd:
    """Tests for rolling standard deviation."""

    def test_population_std(self):
        result = rolling_std([2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0], 8)
        assert result[-1] == pytest.approx(2.0)

    def test_warm_up_and_length(self):
        result = rolling_std(PRICES, 10)
        assert len(result) == len(PRICES)
        assert all(is_undefined(v) for v in result[:9])
        assert all(v >= 0 for v in result[9:])

    def test_constant_window_not_negative(self):
        """Rounding never produces a NaN from a negative variance."""
        result = rolling_std([0.1] * 30, 10)
        assert all(v >= 0 and not math.isnan(v) for v in result[9:])


class TestReturns:
    """Tests for simple and log returns."""

    def test_returns_basic(self):
        result = returns([100.0, 110.0, 99.0])
        assert is_undefined(result[0])
        assert result[1] == pytest.approx(0.10)
        assert result[2] == pytest.approx(-0.10)

    def test_returns_zero_denominator(self):
        result = returns([0.0, 5.0, 10.0])
        assert result[1] == 0.0
        assert result[2] == 1.0

    def test_returns_empty(self):
        assert returns([]) == []

    def test_log_returns_basic(self):
        result = log_returns([1.0, math.e])
        assert is_undefined(result[0])
        assert result[1] == pytest.approx(1.0)

    def test_log_returns_non_positive_guard(self):
        result = log_returns([1.0, 0.0, 2.0, -1.0, 3.0])
        assert result[1:] == [0.0, 0.0, 0.0, 0.0]

    def test_log_returns_empty(self):
        assert log_returns([]) == []


class TestLag:
    """Tests for lag."""

    def test_lag_zero_unchanged(self):
        assert lag([1.0, 2.0, 3.0], 0) == [1.0, 2.0, 3.0]

    def test_lag_shifts_right(self):
        result = lag([1.0, 2.0, 3.0, 4.0], 2)
        assert is_undefined(result[0])
        assert is_undefined(result[1])
        assert result[2:] == [1.0, 2.0]

    def test_lag_longer_than_input(self):
        result = lag([1.0, 2.0], 5)
        assert len(result) == 2
        assert all(is_undefined(v) for v in result)


class TestMomentum:
    """Tests for momentum."""

    def test_momentum_basic(self):
        result = momentum([100.0, 105.0, 110.0], 2)
        assert is_undefined(result[0])
        assert is_undefined(result[1])
        assert result[2] == pytest.approx(0.10)

    def test_momentum_zero_denominator(self):
        result = momentum([0.0, 1.0, 2.0], 1)
        assert result[1] == 0.0
        assert result[2] == 1.0


class TestRollingSkew:
    """Tests for rolling skewness."""

    def test_constant_window_is_zero(self):
        result = rolling_skew([5.0] * 10, 5)
        assert all(v == 0.0 for v in result[4:])

    @pytest.mark.parametrize(
        "values,period",
        [([0.1] * 5, 3), ([0.01] * 20, 20), ([1e-7] * 8, 4), ([123456.789] * 6, 5)],
    )
    def test_inexact_constant_window_is_zero(self, values, period):
        """A mean that rounds away from the value still counts as flat."""
        result = rolling_skew(values, period)
        assert all(v == 0.0 for v in result[period - 1 :])

    def test_tiny_but_real_spread_is_not_flat(self):
        result = rolling_skew([1.0, 1.0, 1.0, 1.0 + 1e-6], 4)
        assert result[-1] > 0

    def test_symmetric_window_is_zero(self):
        result = rolling_skew([1.0, 2.0, 3.0], 3)
        assert result[-1] == pytest.approx(0.0)

    def test_right_tail_is_positive(self):
        result = rolling_skew([1.0, 1.0, 1.0, 10.0], 4)
        assert result[-1] > 0

    def test_warm_up(self):
        result = rolling_skew(PRICES, 20)
        assert len(result) == len(PRICES)
        assert all(is_undefined(v) for v in result[:19])


class TestAlignment:
    """Every indicator returns one value per input."""

    @pytest.mark.parametrize("period", [1, 2, 5, 14, 50])
    def test_output_length_matches_input(self, period):
        n = len(PRICES)
        assert len(sma(PRICES, period)) == n
        assert len(ema(PRICES, period)) == n
        assert len(rsi(PRICES, period)) == n
        assert len(rolling_std(PRICES, period)) == n
        assert len(rolling_skew(PRICES, period)) == n
        assert len(momentum(PRICES, period)) == n
        assert len(lag(PRICES, period)) == n

    @pytest.mark.parametrize("period", [2, 5, 14])
    def test_warm_up_lengths(self, period):
        assert all(is_undefined(v) for v in sma(PRICES, period)[: period - 1])
        assert all(is_undefined(v) for v in ema(PRICES, period)[: period - 1])
        assert all(is_undefined(v) for v in rolling_std(PRICES, period)[: period - 1])
        assert not is_undefined(sma(PRICES, period)[period - 1])
        assert not is_undefined(ema(PRICES, period)[period - 1])
