"""Tests for oui_master.classify: device-type heuristics and country extraction."""

import re
import unittest


class TestClassifyDeviceType(unittest.TestCase):
    def test_cisco_is_router(self):
        from oui_master.classify import classify_device_type
        self.assertEqual(classify_device_type("Cisco Systems, Inc"), "Router")

    def test_case_insensitive(self):
        from oui_master.classify import classify_device_type
        self.assertEqual(classify_device_type("ESPRESSIF INC."), "IoT")

    def test_short_name_considered(self):
        from oui_master.classify import classify_device_type
        self.assertEqual(classify_device_type("Qqq Zzz Holdings", "Synology"), "Storage")

    def test_first_category_wins(self):
        from oui_master.classify import classify_device_type
        # "cisco.*phone" is a VoIP pattern but Router comes first
        self.assertEqual(classify_device_type("Cisco IP Phone"), "Router")

    def test_no_match(self):
        from oui_master.classify import classify_device_type
        self.assertIsNone(classify_device_type("Qqq Zzz Holdings"))

    def test_empty_manufacturer(self):
        from oui_master.classify import classify_device_type
        self.assertIsNone(classify_device_type(""))
        self.assertIsNone(classify_device_type(None, "Synology"))

    def test_deterministic(self):
        from oui_master.classify import classify_device_type
        results = {classify_device_type("Apple, Inc.") for _ in range(5)}
        self.assertEqual(results, {"Phone"})

    def test_custom_table(self):
        from oui_master.classify import classify_device_type
        table = (("Widget", (re.compile("acme", re.I),)),)
        self.assertEqual(classify_device_type("ACME Corp", patterns=table), "Widget")
        self.assertIsNone(classify_device_type("Cisco", patterns=table))


class TestExtractCountry(unittest.TestCase):
    def test_us_with_zip(self):
        from oui_master.classify import extract_country
        self.assertEqual(extract_country("1 Example St US 12345"), "US")

    def test_usa_alias(self):
        from oui_master.classify import extract_country
        self.assertEqual(extract_country("170 West Tasman Dr San Jose CA USA"), "US")

    def test_two_letter_code_with_postal(self):
        from oui_master.classify import extract_country
        self.assertEqual(extract_country("Shenzhen  Guangdong  CN 518000"), "CN")
        self.assertEqual(extract_country("Berlin  DE 10115"), "DE")

    def test_spelled_out_name(self):
        from oui_master.classify import extract_country
        self.assertEqual(extract_country("Hsinchu Science Park Taiwan 300"), "TW")

    def test_trailing_code_fallback(self):
        from oui_master.classify import extract_country
        self.assertEqual(extract_country("Some Street Somewhere XY"), "XY")

    def test_no_country(self):
        from oui_master.classify import extract_country
        self.assertIsNone(extract_country("private"))

    def test_empty(self):
        from oui_master.classify import extract_country
        self.assertIsNone(extract_country(""))
        self.assertIsNone(extract_country(None))


if __name__ == "__main__":
    unittest.main()
