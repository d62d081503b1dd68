#!/usr/bin/env python3
"""
Tests for droplet stamping and the mass conservator.

Verifies:
1. Stamped disks cover exactly the cells within the radius
2. Stamping saturates at 1 and reports the mass actually added
3. Off-grid disks are clipped without error
4. Mass correction restores the target on unsaturated fields
5. Clamping keeps every cell in [0, 1], accepting drift on saturated fields
"""

import math
import numpy as np
import pytest

from droplet_coalescence.conservation import conserve_mass, mass_drift
from droplet_coalescence.stamper import disk_area, disk_mask, stamp_droplet


def test_radius_one_stamp_is_a_plus():
    print("Testing radius-1 stamp...")
    field = np.zeros((5, 5))
    added = stamp_droplet(field, 2, 2, 1)

    expected = np.zeros((5, 5))
    for x, y in ((2, 2), (1, 2), (3, 2), (2, 1), (2, 3)):
        expected[x, y] = 1.0
    assert np.array_equal(field, expected), f"Expected plus shape, got\n{field}"
    assert added == 5.0, f"Five cells of oil should be added, got {added}"
    print("  ✓ Centre and 4-neighbours filled, diagonals untouched")


def test_disk_mask_matches_distance_rule():
    mask = disk_mask(11, 5, 5, 3)
    for x in range(11):
        for y in range(11):
            inside = math.sqrt((x - 5) ** 2 + (y - 5) ** 2) <= 3
            assert mask[x, y] == inside, f"Cell ({x}, {y}) misclassified"


def test_stamp_saturates_full_field():
    print("Testing saturating stamp...")
    field = np.ones((9, 9))
    added = stamp_droplet(field, 4, 4, 2)
    assert np.all(field == 1.0), "Cells already at 1 must stay exactly 1"
    assert added == 0.0, f"Nothing fits into a full field, got {added}"
    print("  ✓ No overflow above 1")


def test_stamp_partially_filled_cells_receive_what_fits():
    field = np.zeros((5, 5))
    field[2, 2] = 0.7
    field[1, 2] = 0.2
    added = stamp_droplet(field, 2, 2, 1)
    assert field[2, 2] == 1.0
    assert field[1, 2] == 1.0
    assert added == pytest.approx(5.0 - 0.7 - 0.2)


def test_stamp_with_fractional_value():
    field = np.full((5, 5), 0.5)
    stamp_droplet(field, 2, 2, 0, value=0.25)
    assert field[2, 2] == 0.75, "Radius 0 stamps the centre cell only"
    assert field.sum() == pytest.approx(0.5 * 25 + 0.25)


def test_off_grid_stamps_are_clipped():
    print("Testing off-grid stamps...")
    field = np.zeros((6, 6))
    added = stamp_droplet(field, 0, 0, 1)
    assert added == 3.0, f"Corner stamp keeps 3 on-grid cells, got {added}"
    assert field[0, 0] == field[1, 0] == field[0, 1] == 1.0

    field = np.zeros((6, 6))
    added = stamp_droplet(field, -10, 20, 2)
    assert added == 0.0 and not field.any(), "Fully off-grid stamp is a no-op"

    field = np.zeros((6, 6))
    stamp_droplet(field, 7, 3, 2)
    assert field[5, 3] == 1.0, "Disk centred off-grid still reaches the edge"
    assert field.sum() == 1.0
    print("  ✓ Off-grid cells skipped silently")


def test_disk_area():
    assert disk_area(1) == pytest.approx(math.pi)
    assert disk_area(2) == pytest.approx(4 * math.pi)


def test_conservation_restores_target_mass():
    print("Testing mass correction...")
    rng = np.random.default_rng(3)
    field = 0.2 + 0.6 * rng.random((20, 20))
    target = float(field.sum()) + 4.0
    correction = conserve_mass(field, target)
    assert correction == pytest.approx(4.0 / 400)
    assert field.sum() == pytest.approx(target, rel=1e-12)
    assert abs(mass_drift(field, target)) < 1e-9
    print("  ✓ Unsaturated field corrected to the target")


def test_conservation_clamps_to_unit_interval():
    field = np.array([[-0.2, 0.5], [1.3, 0.9]])
    conserve_mass(field, float(field.sum()))
    assert field.min() >= 0.0 and field.max() <= 1.0, f"Not clamped: {field}"
    assert field[0, 0] == 0.0 and field[1, 0] == 1.0


def test_saturated_field_drift_is_accepted():
    print("Testing correction on a saturated field...")
    field = np.ones((4, 4))
    conserve_mass(field, 26.0)
    assert np.all(field == 1.0), "Cells cannot exceed pure oil"
    assert mass_drift(field, 26.0) == pytest.approx(-10.0), "Excess target is lost to clamping"
    print("  ✓ Clamping wins over the correction")


if __name__ == "__main__":
    print("\n=== Testing Stamping and Mass Conservation ===\n")

    test_radius_one_stamp_is_a_plus()
    test_disk_mask_matches_distance_rule()
    test_stamp_saturates_full_field()
    test_stamp_partially_filled_cells_receive_what_fits()
    test_stamp_with_fractional_value()
    test_off_grid_stamps_are_clipped()
    test_disk_area()
    test_conservation_restores_target_mass()
    test_conservation_clamps_to_unit_interval()
    test_saturated_field_drift_is_accepted()

    print("\n✓ All tests passed!\n")
