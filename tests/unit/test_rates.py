"""
Tests for constants, the state rate table and utility rate resolution.
"""

import pytest

from solar_engines.rates import (
    DEFAULT_ASSUMPTIONS,
    DEFAULT_UTILITY_RATE,
    STATE_UTILITY_RATES,
    EngineAssumptions,
    RateSource,
    UtilityRate,
    resolve_utility_rate,
)


class TestStateTable:
    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            STATE_UTILITY_RATES["ZZ"] = 1.0

    def test_known_rates(self):
        assert STATE_UTILITY_RATES["HI"] == 0.4320
        assert STATE_UTILITY_RATES["WA"] == 0.1180
        assert len(STATE_UTILITY_RATES) == 23


class TestResolveUtilityRate:
    def test_no_inputs_is_national(self):
        assert resolve_utility_rate() == UtilityRate(DEFAULT_UTILITY_RATE, RateSource.NATIONAL)

    @pytest.mark.parametrize("code", ["CA", "ca", " Ca "])
    def test_state_lookup_normalizes(self, code):
        rate = resolve_utility_rate(code)

        assert rate == UtilityRate(0.3158, RateSource.STATE, "CA")

    def test_unknown_state(self):
        rate = resolve_utility_rate("ZZ")

        assert rate.rate == DEFAULT_UTILITY_RATE
        assert rate.source == RateSource.NATIONAL
        assert rate.state_code == "ZZ"

    def test_custom_rate_beats_state(self):
        rate = resolve_utility_rate("HI", custom_rate=0.11)

        assert rate == UtilityRate(0.11, RateSource.CUSTOM, "HI")

    def test_zero_custom_rate_wins(self):
        assert resolve_utility_rate("CA", custom_rate=0.0).rate == 0.0

    def test_empty_state_is_none(self):
        assert resolve_utility_rate("   ").state_code is None

    def test_custom_table(self):
        assumptions = DEFAULT_ASSUMPTIONS.with_overrides(
            state_utility_rates={"VT": 0.21}, national_utility_rate=0.15
        )

        assert resolve_utility_rate("vt", assumptions=assumptions).rate == 0.21
        assert resolve_utility_rate("CA", assumptions=assumptions).rate == 0.15


class TestEngineAssumptions:
    def test_defaults(self):
        assumptions = EngineAssumptions()

        assert assumptions.panel_wattage == 400
        assert assumptions.panel_efficiency == 0.20
        assert assumptions.inverter_efficiency == 0.96
        assert assumptions.degradation_rate == 0.005
        assert assumptions.lifespan_years == 25
        assert assumptions.cost_per_watt == 2.50
        assert assumptions.federal_itc == 0.30
        assert assumptions.utility_escalation == 0.03
        assert assumptions.loan_10.apr == 0.0699
        assert assumptions.loan_15.apr == 0.0799
        assert assumptions.ppa_rate == 0.12
        assert assumptions.ppa_escalation == 0.029

    def test_with_overrides_copies(self):
        changed = DEFAULT_ASSUMPTIONS.with_overrides(federal_itc=0.26)

        assert changed.federal_itc == 0.26
        assert DEFAULT_ASSUMPTIONS.federal_itc == 0.30

    def test_frozen(self):
        with pytest.raises(AttributeError):
            DEFAULT_ASSUMPTIONS.federal_itc = 0.1

    def test_unhashable(self):
        with pytest.raises(TypeError):
            hash(DEFAULT_ASSUMPTIONS)

    def test_equality_by_value(self):
        assert EngineAssumptions() == DEFAULT_ASSUMPTIONS
        assert DEFAULT_ASSUMPTIONS.with_overrides(ppa_rate=0.10) != DEFAULT_ASSUMPTIONS
