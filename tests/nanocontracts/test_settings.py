import unittest

from pydantic import ValidationError

from ivo.conf.get_settings import get_global_settings, load_settings
from ivo.conf.ivo_sale import ONE_TOKEN, SETTINGS
from ivo.conf.settings import IvoSettings


class SettingsTestCase(unittest.TestCase):

    def test_default_settings(self):
        settings = get_global_settings()
        self.assertIs(settings, get_global_settings())
        self.assertEqual(settings.ROUNDS, 3)
        self.assertEqual(settings.HARD_CAP, 52_500_000 * ONE_TOKEN)
        self.assertEqual(settings.INITIAL_SUPPLY, 47_500_000 * ONE_TOKEN)

    def test_load_settings(self):
        self.assertIs(load_settings('ivo.conf.ivo_sale'), SETTINGS)
        with self.assertRaises(TypeError):
            load_settings('ivo.conf.settings')

    def test_settings_are_frozen(self):
        with self.assertRaises(ValidationError):
            SETTINGS.HARD_CAP = 1

    def test_round_caps_must_increase(self):
        data = SETTINGS.model_dump()
        data['ROUND_CAPS'] = (30, 10, data['HARD_CAP'])
        with self.assertRaises(ValidationError):
            IvoSettings(**data)

    def test_last_round_cap_is_hard_cap(self):
        data = SETTINGS.model_dump()
        data['ROUND_CAPS'] = (1, 2, 3)
        with self.assertRaises(ValidationError):
            IvoSettings(**data)

    def test_rounds_and_discounts_match(self):
        data = SETTINGS.model_dump()
        data['ROUND_DISCOUNTS'] = (70, 100)
        with self.assertRaises(ValidationError):
            IvoSettings(**data)

    def test_allocations_fit_in_supply_cap(self):
        data = SETTINGS.model_dump()
        data['TOTAL_SUPPLY_CAP'] = data['HARD_CAP']
        with self.assertRaises(ValidationError):
            IvoSettings(**data)
