"""Tests for the cross-section spline list (xsec_splines.spline_list.store).

Tests cover:
- Creation defaults and their setters
- Lookup by key and by (algorithm, interaction)
- Spline creation, per-call overrides and idempotent replacement
- Initial-set bookkeeping
- The process-wide instance
"""

from __future__ import annotations

import logging

import numpy as np
import pytest

from xsec_splines.config import SplineListConfig
from xsec_splines.errors import InvalidEnergyRangeError
from xsec_splines.numerical import Spline
from xsec_splines.spline_list import XSecSplineList, instance, reset_instance


class TestDefaults:
    """Tests for list-wide creation defaults."""

    def test_initial_defaults(self, spline_list: XSecSplineList) -> None:
        assert spline_list.use_log_energy is True
        assert spline_list.n_knots == 100
        assert spline_list.e_min == 0.01
        assert spline_list.e_max == 100.0
        assert len(spline_list) == 0
        assert spline_list.keys() == []

    @pytest.mark.parametrize(("requested", "effective"), [(-3, 10), (0, 10), (5, 10), (9, 10), (10, 10), (11, 11), (250, 250)])
    def test_knot_count_floor(self, spline_list: XSecSplineList, requested: int, effective: int) -> None:
        spline_list.set_n_knots(requested)
        assert spline_list.n_knots == effective

    @pytest.mark.parametrize("value", [0.0, -1.0])
    def test_non_positive_energies_ignored(self, spline_list: XSecSplineList, value: float) -> None:
        spline_list.set_min_energy(value)
        spline_list.set_max_energy(value)
        assert spline_list.e_min == 0.01
        assert spline_list.e_max == 100.0

    def test_energy_setters(self, spline_list: XSecSplineList) -> None:
        spline_list.set_min_energy(0.5)
        spline_list.set_max_energy(50.0)
        assert spline_list.e_min == 0.5
        assert spline_list.e_max == 50.0

    def test_use_log_energy_setter(self, spline_list: XSecSplineList) -> None:
        spline_list.set_use_log_energy(False)
        assert spline_list.use_log_energy is False

    def test_constructor_applies_setter_rules(self) -> None:
        splines = XSecSplineList(use_log_energy=False, n_knots=3, e_min=-1.0, e_max=20.0)
        assert splines.use_log_energy is False
        assert splines.n_knots == 10
        assert splines.e_min == 0.01
        assert splines.e_max == 20.0

    def test_from_config_and_back(self) -> None:
        config = SplineListConfig(use_log_energy=False, n_knots=42, e_min=0.1, e_max=20.0)
        splines = XSecSplineList.from_config(config)
        assert splines.to_config() == config

    def test_configure_keeps_existing_splines(self, populated_spline_list: XSecSplineList) -> None:
        before = {key: populated_spline_list.get(key) for key in populated_spline_list.keys()}
        populated_spline_list.configure(SplineListConfig(n_knots=300, e_min=1.0, e_max=2.0))
        assert populated_spline_list.n_knots == 300
        for key, spline in before.items():
            assert populated_spline_list.get(key) is spline
            assert spline.n_knots == 20


class TestLookup:
    """Tests for exists/get and keys."""

    def test_exists_and_get(self, spline_list, fake_algorithm, make_interaction) -> None:
        interaction = make_interaction(threshold=1.0)
        assert not spline_list.exists_for(fake_algorithm, interaction)
        assert spline_list.get_for(fake_algorithm, interaction) is None

        created = spline_list.create(fake_algorithm, interaction, n_knots=20)

        key = spline_list.build_key(fake_algorithm, interaction)
        assert spline_list.exists(key)
        assert spline_list.exists_for(fake_algorithm, interaction)
        assert spline_list.get(key) is created
        assert spline_list.get_for(fake_algorithm, interaction) is created
        assert key in spline_list

    def test_miss_is_reported_not_raised(self, spline_list, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            assert spline_list.get("alg/cfg/missing;") is None
        assert "Couldn't find spline for key = alg/cfg/missing;" in caplog.text

    def test_empty_key_never_exists(self, spline_list, make_interaction) -> None:
        assert not spline_list.exists("")
        assert not spline_list.exists_for(None, make_interaction())
        assert spline_list.get_for(None, make_interaction()) is None

    def test_keys_sorted(self, spline_list) -> None:
        for key in ["b/x/2;", "a/x/9;", "c/x/1;", "a/x/1;"]:
            spline_list.insert(key, Spline([1.0, 2.0], [1.0, 1.0]))
        assert spline_list.keys() == ["a/x/1;", "a/x/9;", "b/x/2;", "c/x/1;"]
        assert list(spline_list) == spline_list.keys()
        assert [key for key, _ in spline_list.items()] == spline_list.keys()


class TestCreate:
    """Tests for XSecSplineList.create."""

    def test_uses_defaults(self, fake_algorithm, make_interaction) -> None:
        splines = XSecSplineList(n_knots=25, e_min=0.1, e_max=20.0)
        spline = splines.create(fake_algorithm, make_interaction())
        assert spline is not None
        assert spline.n_knots == 25
        assert spline.x_min == 0.1
        assert spline.x_max == 20.0

    def test_per_call_overrides(self, spline_list, fake_algorithm, make_interaction) -> None:
        spline = spline_list.create(fake_algorithm, make_interaction(), n_knots=15, e_min=0.5, e_max=5.0)
        assert spline.n_knots == 15
        assert spline.x_min == 0.5
        assert spline.x_max == 5.0

    @pytest.mark.parametrize("n_knots", [-1, 0, 1, 2])
    def test_invalid_knot_override_falls_back(self, fake_algorithm, make_interaction, n_knots: int) -> None:
        splines = XSecSplineList(n_knots=12)
        spline = splines.create(fake_algorithm, make_interaction(), n_knots=n_knots)
        assert spline.n_knots == 12

    def test_negative_energy_overrides_fall_back(self, fake_algorithm, make_interaction) -> None:
        splines = XSecSplineList(n_knots=12, e_min=0.2, e_max=8.0)
        spline = splines.create(fake_algorithm, make_interaction(), e_min=-5.0, e_max=-1.0)
        assert spline.x_min == 0.2
        assert spline.x_max == 8.0

    def test_invalid_range_is_fatal(self, spline_list, fake_algorithm, make_interaction) -> None:
        with pytest.raises(InvalidEnergyRangeError):
            spline_list.create(fake_algorithm, make_interaction(), e_min=5.0, e_max=1.0)
        assert len(spline_list) == 0

    def test_override_against_default_range_is_checked(self, fake_algorithm, make_interaction) -> None:
        splines = XSecSplineList(e_min=0.01, e_max=10.0)
        with pytest.raises(InvalidEnergyRangeError):
            splines.create(fake_algorithm, make_interaction(), e_min=50.0)

    def test_missing_inputs_are_recoverable(self, spline_list, fake_algorithm, make_interaction, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            assert spline_list.create(None, make_interaction()) is None
            assert spline_list.create(fake_algorithm, None) is None
        assert len(spline_list) == 0
        assert fake_algorithm.calls == []

    def test_values_follow_algorithm(self, spline_list, fake_algorithm, make_interaction) -> None:
        spline = spline_list.create(fake_algorithm, make_interaction(threshold=1.0), n_knots=20)
        expected = [fake_algorithm.expected(e, 1.0) for e in spline.x]
        np.testing.assert_allclose(spline.y, expected)

    def test_documented_scenario(self, spline_list, fake_algorithm, make_interaction) -> None:
        spline_list.set_min_energy(0.01)
        spline_list.set_max_energy(10.0)
        spline_list.set_n_knots(20)
        spline = spline_list.create(fake_algorithm, make_interaction(threshold=1.0))

        assert spline.n_knots == 20
        assert np.count_nonzero(spline.x < 1.0) == 5
        assert spline.x[5] == 1.0
        assert spline.x_min == 0.01
        assert spline.x_max == 10.0
        assert np.all(np.diff(spline.x) > 0)

    def test_recreate_replaces_entry(self, spline_list, fake_algorithm, make_interaction) -> None:
        interaction = make_interaction(threshold=1.0)
        first = spline_list.create(fake_algorithm, interaction, n_knots=20)
        second = spline_list.create(fake_algorithm, interaction, n_knots=20)

        assert len(spline_list) == 1
        key = spline_list.build_key(fake_algorithm, interaction)
        assert spline_list.get(key) is second
        assert second is not first
        assert second.is_close(first)

    def test_defaults_do_not_alter_stored_splines(self, spline_list, fake_algorithm, make_interaction) -> None:
        spline = spline_list.create(fake_algorithm, make_interaction(), n_knots=20)
        spline_list.set_n_knots(50)
        spline_list.set_use_log_energy(False)
        assert spline_list.keys() and spline_list.get(spline_list.keys()[0]).n_knots == 20
        assert spline.n_knots == 20


class TestInitialSet:
    """Tests for the initial-set bookkeeping."""

    def test_insert_marks_initial_on_request(self, spline_list) -> None:
        spline_list.insert("a/b/c;", Spline([1.0, 2.0], [1.0, 2.0]), initial=True)
        spline_list.insert("a/b/d;", Spline([1.0, 2.0], [1.0, 2.0]))
        assert spline_list.is_initial("a/b/c;")
        assert not spline_list.is_initial("a/b/d;")
        assert spline_list.initial_keys() == ["a/b/c;"]

    def test_create_clears_initial_mark(self, spline_list, fake_algorithm, make_interaction) -> None:
        interaction = make_interaction()
        key = spline_list.build_key(fake_algorithm, interaction)
        spline_list.insert(key, Spline([1.0, 2.0], [1.0, 2.0]), initial=True)

        spline_list.create(fake_algorithm, interaction, n_knots=20)
        assert not spline_list.is_initial(key)
        assert spline_list.get(key).n_knots == 20

    def test_insert_rejects_empty_key(self, spline_list) -> None:
        with pytest.raises(ValueError, match="non-empty"):
            spline_list.insert("", Spline([1.0, 2.0], [1.0, 2.0]))

    def test_clear(self, spline_list) -> None:
        spline_list.insert("a/b/c;", Spline([1.0, 2.0], [1.0, 2.0]), initial=True)
        spline_list.clear()
        assert len(spline_list) == 0
        assert spline_list.initial_keys() == []


class TestProcessInstance:
    """Tests for the process-wide spline list accessor."""

    def test_instance_is_shared(self) -> None:
        assert instance() is instance()

    def test_instance_has_defaults(self) -> None:
        splines = instance()
        assert splines.use_log_energy is True
        assert splines.n_knots == 100
        assert splines.e_min == 0.01
        assert splines.e_max == 100.0

    def test_reset_instance(self) -> None:
        first = instance()
        first.insert("a/b/c;", Spline([1.0, 2.0], [1.0, 2.0]))
        reset_instance()
        second = instance()
        assert second is not first
        assert len(second) == 0

    def test_str_lists_keys(self, populated_spline_list) -> None:
        text = str(populated_spline_list)
        for key in populated_spline_list.keys():
            assert key in text

    def test_repr(self, populated_spline_list) -> None:
        assert "n_splines=3" in repr(populated_spline_list)
