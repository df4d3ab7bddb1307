import numpy as np
import pytest

from oceansurf.optics import (
    SCATTER_COEF_LAMBDA0,
    WATER_TYPES_COEFFS_ACCURATE,
    WATER_TYPES_COEFFS_APPROX,
    WS_RESOLUTIONS,
    LabeledValues,
    backscattering_coefficient,
    pigment_backscattering_coefficient,
    scattering_coefficient,
)


def test_resolution_index_and_label():
    i = WS_RESOLUTIONS.index(512)
    assert WS_RESOLUTIONS[i] == 512
    assert WS_RESOLUTIONS.labels[i] == "512"


def test_index_of_missing_value_raises():
    with pytest.raises(ValueError):
        WS_RESOLUTIONS.index(100)


def test_index_of_vector_value():
    target = np.array([0.510, 0.120, 0.250])
    i = WATER_TYPES_COEFFS_ACCURATE.index(target)
    assert WATER_TYPES_COEFFS_ACCURATE.labels[i] == "1: Clearest coastal waters"


def test_table_values_from_source():
    assert WATER_TYPES_COEFFS_ACCURATE.index(np.array([0.420, 0.063, 0.019])) == 0
    last = len(WATER_TYPES_COEFFS_APPROX) - 1
    assert WATER_TYPES_COEFFS_APPROX.index(np.array([0.956, 0.630, 1.720])) == last
    harbor = scattering_coefficient(SCATTER_COEF_LAMBDA0[2])
    assert np.allclose(harbor, 1.824 * scattering_coefficient(1.0))
    assert SCATTER_COEF_LAMBDA0.labels[2] == "9: Turbid harbor"


def test_tables_have_matching_lengths():
    assert len(WATER_TYPES_COEFFS_ACCURATE) == len(WATER_TYPES_COEFFS_APPROX)
    assert len(list(WS_RESOLUTIONS.items())) == len(WS_RESOLUTIONS)


def test_mismatched_labels_rejected():
    with pytest.raises(ValueError):
        LabeledValues((1, 2), ("one",))


def test_table_vectors_are_read_only():
    i = WATER_TYPES_COEFFS_ACCURATE.index(np.array([0.420, 0.063, 0.019]))
    vector = WATER_TYPES_COEFFS_ACCURATE[i]
    with pytest.raises(ValueError):
        vector[0] = 1.0
    assert WATER_TYPES_COEFFS_ACCURATE.index(np.array([0.420, 0.063, 0.019])) == 0


def test_scattering_is_linear_in_base_value():
    one = scattering_coefficient(1.0)
    assert np.allclose(scattering_coefficient(0.219), 0.219 * one)
    assert np.allclose(scattering_coefficient(0.0), 0.0)


def test_scattering_grows_towards_blue():
    red, green, blue = scattering_coefficient(0.037)
    assert red < green < blue


def test_backscattering_offset_and_slope():
    assert np.allclose(backscattering_coefficient(np.zeros(3)), 0.00006)
    b = np.array([0.1, 0.2, 0.3])
    diff = backscattering_coefficient(2 * b) - backscattering_coefficient(b)
    assert np.allclose(diff, 0.01829 * b)


def test_pigment_backscattering_rejects_non_positive():
    with pytest.raises(ValueError):
        pigment_backscattering_coefficient(0.0)
    with pytest.raises(ValueError):
        pigment_backscattering_coefficient(-1.0)


def test_pigment_backscattering_exceeds_pure_water():
    pure = 0.5 * np.array([0.0007, 0.00173, 0.005])
    for c in (0.001, 0.5, 1.0, 3.0):
        excess = pigment_backscattering_coefficient(c) - pure
        assert float(np.min(excess)) > 0.0


def test_pigment_backscattering_increases_with_concentration():
    values = [pigment_backscattering_coefficient(c) for c in (0.001, 0.1, 1.0, 3.0)]
    for lower, higher in zip(values, values[1:]):
        assert float(np.min(higher - lower)) > 0.0