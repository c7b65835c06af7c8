import unittest

from coach.domain.errors import ValidationError
from coach.logic.reporting.portions import scale_portion, scale_servings
from coach.utilities.constants import PRESET_QUANTITIES

CHICKEN = {
    'calories_per_100g': 165,
    'protein_per_100g': 31,
    'carbs_per_100g': 0,
    'fat_per_100g': 3.6,
}


class TestPortions(unittest.TestCase):

    def test_base_quantity_returns_base_values(self):
        scaled = scale_portion(CHICKEN, 100)
        self.assertEqual(scaled['calories'], 165)
        self.assertEqual(scaled['protein'], 31)
        self.assertEqual(scaled['fats'], 3.6)
        self.assertEqual(scaled['quantity'], 100)

    def test_scaling_and_rounding(self):
        scaled = scale_portion(CHICKEN, 150)
        self.assertEqual(scaled['calories'], 248)  # 247.5 rounds half to even
        self.assertEqual(scaled['protein'], 46.5)
        self.assertEqual(scaled['fats'], 5.4)

    def test_presets_use_same_function(self):
        for quantity in PRESET_QUANTITIES:
            self.assertEqual(scale_portion(CHICKEN, quantity)['calories'],
                             int(round(165 * quantity / 100)))

    def test_missing_fields_are_zero(self):
        scaled = scale_portion({'calories': 50}, 200)
        self.assertEqual(scaled['calories'], 100)
        self.assertEqual(scaled['carbs'], 0)

    def test_zero_quantity(self):
        self.assertEqual(scale_portion(CHICKEN, 0)['calories'], 0)

    def test_rejects_bad_quantities(self):
        with self.assertRaises(ValidationError):
            scale_portion(CHICKEN, -10)
        with self.assertRaises(ValidationError):
            scale_portion(CHICKEN, 100, base_quantity=0)

    def test_servings(self):
        scaled = scale_servings({'calories_per_serving': 420, 'protein_per_serving': 25}, 2)
        self.assertEqual(scaled['calories'], 840)
        self.assertEqual(scaled['protein'], 50)
        self.assertEqual(scaled['servings'], 2)


if __name__ == '__main__':
    unittest.main()
