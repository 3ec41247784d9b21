"""
Tests for assumption-set loading.

Covers:
- The shipped default set matches the engine defaults
- Partial sets fall back to defaults
- Rejection of unknown keys and bad values
- Checksum determinism and the SOLAR_CONFIG_TRACE record
"""

from textwrap import dedent

import pytest

from solar_config import AssumptionSet, get_active_assumptions
from solar_config.loader import compute_checksum, parse_assumptions
from solar_engines import DEFAULT_ASSUMPTIONS, LoanTerm, generate_proposal
from solar_kernel.exceptions import AssumptionSetNotFoundError, InvalidAssumptionError


def _write_set(tmp_path, name, body):
    path = tmp_path / f"{name}.yaml"
    path.write_text(dedent(body))
    return path


class TestDefaultSet:
    def test_loads(self):
        loaded = get_active_assumptions()

        assert isinstance(loaded, AssumptionSet)
        assert loaded.name == "default"
        assert len(loaded.checksum) == 64

    def test_matches_engine_defaults(self):
        assumptions = get_active_assumptions().assumptions

        assert assumptions.panel_wattage == DEFAULT_ASSUMPTIONS.panel_wattage
        assert assumptions.lifespan_years == DEFAULT_ASSUMPTIONS.lifespan_years
        assert assumptions.federal_itc == DEFAULT_ASSUMPTIONS.federal_itc
        assert assumptions.loan_10 == DEFAULT_ASSUMPTIONS.loan_10
        assert assumptions.loan_15 == DEFAULT_ASSUMPTIONS.loan_15
        assert dict(assumptions.state_utility_rates) == dict(
            DEFAULT_ASSUMPTIONS.state_utility_rates
        )

    def test_same_proposal_as_defaults(self):
        assumptions = get_active_assumptions().assumptions

        from_config = generate_proposal("lead-1", 20, 1600, "CA", assumptions=assumptions)
        from_defaults = generate_proposal("lead-1", 20, 1600, "CA")

        assert from_config.costs == from_defaults.costs
        assert from_config.savings == from_defaults.savings
        assert from_config.scenarios == from_defaults.scenarios

    def test_trace_emitted(self, captured_logs):
        loaded = get_active_assumptions()

        traces = [r for r in captured_logs() if r["message"] == "SOLAR_CONFIG_TRACE"]
        assert len(traces) == 1
        assert traces[0]["assumption_set"] == "default"
        assert traces[0]["checksum"] == loaded.checksum


class TestCustomSets:
    def test_partial_set_uses_defaults(self, tmp_path):
        _write_set(
            tmp_path,
            "premium",
            """
            name: premium
            version: 2
            assumptions:
              cost_per_watt: 3.10
              loan_10:
                years: 12
                apr: 0.0599
            """,
        )

        loaded = get_active_assumptions("premium", config_dir=tmp_path)

        assert loaded.version == "2"
        assert loaded.assumptions.cost_per_watt == 3.10
        assert loaded.assumptions.loan_10 == LoanTerm(years=12, apr=0.0599)
        assert loaded.assumptions.federal_itc == DEFAULT_ASSUMPTIONS.federal_itc

    def test_state_codes_upper_cased(self, tmp_path):
        _write_set(
            tmp_path,
            "northeast",
            """
            assumptions:
              state_utility_rates:
                "vt": 0.21
                "me": 0.24
            """,
        )

        rates = get_active_assumptions("northeast", config_dir=tmp_path).assumptions.state_utility_rates

        assert dict(rates) == {"VT": 0.21, "ME": 0.24}

    def test_missing_set(self, tmp_path):
        with pytest.raises(AssumptionSetNotFoundError) as exc_info:
            get_active_assumptions("nope", config_dir=tmp_path)

        assert exc_info.value.name == "nope"

    def test_assumptions_must_be_mapping(self, tmp_path):
        _write_set(tmp_path, "broken", "assumptions: [1, 2]\n")

        with pytest.raises(InvalidAssumptionError):
            get_active_assumptions("broken", config_dir=tmp_path)

    def test_bare_boolean_state_key_rejected(self, tmp_path):
        _write_set(
            tmp_path,
            "yaml11",
            """
            assumptions:
              state_utility_rates:
                NO: 0.2
            """,
        )

        with pytest.raises(InvalidAssumptionError) as exc_info:
            get_active_assumptions("yaml11", config_dir=tmp_path)

        assert exc_info.value.key == "state_utility_rates"


class TestParseAssumptions:
    def test_empty_is_defaults(self):
        assert parse_assumptions({}) == DEFAULT_ASSUMPTIONS

    def test_unknown_key(self):
        with pytest.raises(InvalidAssumptionError) as exc_info:
            parse_assumptions({"panel_colour": 1})

        assert exc_info.value.key == "panel_colour"
        assert exc_info.value.code == "INVALID_ASSUMPTION"

    @pytest.mark.parametrize(
        "data, key",
        [
            ({"federal_itc": "thirty"}, "federal_itc"),
            ({"federal_itc": True}, "federal_itc"),
            ({"degradation_rate": -0.01}, "degradation_rate"),
            ({"lifespan_years": 0}, "lifespan_years"),
            ({"lifespan_years": 25.5}, "lifespan_years"),
            ({"loan_15": {"years": 15}}, "loan_15"),
            ({"loan_15": {"years": 0, "apr": 0.07}}, "loan_15.years"),
            ({"loan_15": {"years": 15, "apr": -0.07}}, "loan_15.apr"),
            ({"state_utility_rates": ["CA"]}, "state_utility_rates"),
            ({"state_utility_rates": {"CA": "high"}}, "state_utility_rates.CA"),
        ],
    )
    def test_bad_values(self, data, key):
        with pytest.raises(InvalidAssumptionError) as exc_info:
            parse_assumptions(data)

        assert exc_info.value.key == key

    def test_integers_become_floats(self):
        parsed = parse_assumptions({"cost_per_watt": 3})

        assert parsed.cost_per_watt == 3.0
        assert isinstance(parsed.cost_per_watt, float)


class TestChecksum:
    def test_key_order_irrelevant(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})

    def test_value_sensitive(self):
        assert compute_checksum({"a": 1}) != compute_checksum({"a": 2})
