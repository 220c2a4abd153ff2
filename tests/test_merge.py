"""Tests for oui_master.merge: record folding, precedence and history dates."""

import unittest


def _raw(key, manufacturer, **kwargs):
    from oui_master.sources import RawRecord
    return RawRecord(key=key, manufacturer=manufacturer, **kwargs)


class TestHistoricalDateIndex(unittest.TestCase):
    def test_first_pair_wins(self):
        from oui_master.merge import HistoricalDateIndex
        idx = HistoricalDateIndex([("00:11:22", "2001-01-01"), ("00:11:22", "2009-09-09")])
        self.assertEqual(idx.get("00:11:22"), "2001-01-01")
        self.assertEqual(len(idx), 1)
        self.assertIn("00:11:22", idx)

    def test_missing(self):
        from oui_master.merge import HistoricalDateIndex
        self.assertIsNone(HistoricalDateIndex().get("AA:BB:CC"))


class TestRecord(unittest.TestCase):
    def test_sources_are_an_ordered_set(self):
        from oui_master.merge import Record
        rec = Record("00:11:22", "Example", sources=["IEEE", "IEEE"])
        self.assertEqual(rec.sources, ["IEEE"])
        self.assertTrue(rec.add_source("Nmap"))
        self.assertFalse(rec.add_source("IEEE"))
        self.assertEqual(rec.sources, ["IEEE", "Nmap"])

    def test_to_dict_keys(self):
        from oui_master.merge import Record
        d = Record("00:11:22", "Example").to_dict()
        self.assertEqual(
            list(d),
            ["manufacturer", "registry", "short_name", "device_type",
             "registered_date", "address", "country", "sources"],
        )
        self.assertEqual(d["registry"], "MA-L")


class TestMasterDatabase(unittest.TestCase):
    def test_new_record(self):
        from oui_master.merge import MasterDatabase
        db = MasterDatabase()
        rec = db.fold(_raw("00:11:22", "Example Inc", registry="MA-L",
                           address="1 Example St US 12345"), "IEEE")
        self.assertEqual(rec.sources, ["IEEE"])
        self.assertEqual(rec.country, "US")
        self.assertEqual(len(db), 1)
        self.assertEqual(db.stats.unique, 1)
        self.assertEqual(db.stats.merged, 0)

    def test_registry_defaults_to_mal(self):
        from oui_master.merge import MasterDatabase
        db = MasterDatabase()
        rec = db.fold(_raw("00:11:22", "Example", short_name="EXI"), "Wireshark")
        self.assertEqual(rec.registry, "MA-L")

    def test_long_name_overrides_manufacturer(self):
        from oui_master.merge import MasterDatabase
        db = MasterDatabase()
        db.fold(_raw("00:11:22", "Acme Corp", registry="MA-L"), "IEEE")
        rec = db.fold(_raw("00:11:22", "Acme Corporation International",
                           short_name="Acme", long_name=True), "Wireshark")
        self.assertEqual(rec.manufacturer, "Acme Corporation International")
        self.assertEqual(rec.short_name, "Acme")
        self.assertEqual(rec.sources, ["IEEE", "Wireshark"])

    def test_short_only_name_does_not_override(self):
        from oui_master.merge import MasterDatabase
        db = MasterDatabase()
        db.fold(_raw("00:11:22", "Acme Corp"), "IEEE")
        rec = db.fold(_raw("00:11:22", "Acme", short_name="Acme"), "Wireshark")
        self.assertEqual(rec.manufacturer, "Acme Corp")

    def test_prefix_table_never_overrides(self):
        from oui_master.merge import MasterDatabase
        db = MasterDatabase()
        db.fold(_raw("00:11:22", "Acme Corp"), "IEEE")
        rec = db.fold(_raw("00:11:22", "Something Else"), "Nmap")
        self.assertEqual(rec.manufacturer, "Acme Corp")
        self.assertEqual(rec.sources, ["IEEE", "Nmap"])

    def test_first_writer_keeps_fields(self):
        from oui_master.merge import MasterDatabase
        db = MasterDatabase()
        db.fold(_raw("00:11:22", "Acme Corp", registry="MA-L", short_name="ACME",
                     address="1 Example St US 12345"), "IEEE")
        rec = db.fold(_raw("00:11:22", "Acme Corp", registry="MA-M", short_name="Other",
                           address="Berlin DE 10115"), "IEEE")
        self.assertEqual(rec.registry, "MA-L")
        self.assertEqual(rec.short_name, "ACME")
        self.assertEqual(rec.address, "1 Example St US 12345")
        self.assertEqual(rec.country, "US")
        self.assertEqual(rec.sources, ["IEEE"])

    def test_address_filled_when_absent(self):
        from oui_master.merge import MasterDatabase
        db = MasterDatabase()
        db.fold(_raw("00:11:22", "Acme Corp"), "Nmap")
        rec = db.fold(_raw("00:11:22", "Acme Corp", address="Berlin  DE 10115"), "IEEE")
        self.assertEqual(rec.address, "Berlin  DE 10115")
        self.assertEqual(rec.country, "DE")

    def test_device_type_filled_when_absent(self):
        from oui_master.merge import MasterDatabase
        db = MasterDatabase()
        rec = db.fold(_raw("00:11:22", "Qqq Zzz Holdings"), "IEEE")
        self.assertIsNone(rec.device_type)
        db.fold(_raw("00:11:22", "Qqq Zzz Holdings", short_name="Synology"), "Wireshark")
        self.assertEqual(rec.device_type, "Storage")

    def test_merged_counter(self):
        from oui_master.merge import MasterDatabase
        db = MasterDatabase()
        db.fold(_raw("00:11:22", "A"), "IEEE")
        db.fold(_raw("00:11:22", "A"), "Wireshark")
        db.fold(_raw("00:11:22", "A"), "Nmap")
        db.fold(_raw("AA:BB:CC", "B"), "Nmap")
        self.assertEqual(db.stats.merged, 2)
        self.assertEqual(len(db), 2)

    def test_idempotent_source_fold(self):
        from oui_master.merge import MasterDatabase
        rows = [_raw("00:11:22", "Acme Corp", address="1 Example St US 12345"),
                _raw("AA:BB:CC", "Other Co")]
        once = MasterDatabase()
        once.fold_all(rows, "IEEE")
        twice = MasterDatabase()
        twice.fold_all(rows, "IEEE")
        twice.fold_all(rows, "IEEE")
        self.assertEqual(once.to_dict(), twice.to_dict())

    def test_history_date_applied(self):
        from oui_master.merge import HistoricalDateIndex, MasterDatabase
        history = HistoricalDateIndex([("00:11:22", "1998-04-01")])
        db = MasterDatabase(history)
        self.assertEqual(db.stats.mac_tracker, 1)
        rec = db.fold(_raw("00:11:22", "Acme Corp", registered_date="2020-01-01"), "IEEE")
        self.assertEqual(rec.registered_date, "1998-04-01")
        other = db.fold(_raw("AA:BB:CC", "Other"), "IEEE")
        self.assertIsNone(other.registered_date)

    def test_registered_date_never_overwritten(self):
        from oui_master.merge import MasterDatabase
        db = MasterDatabase()
        db.fold(_raw("00:11:22", "Acme Corp"), "IEEE")
        rec = db.fold(_raw("00:11:22", "Acme Corp", registered_date="2020-01-01"), "Nmap")
        self.assertIsNone(rec.registered_date)

    def test_fold_all_counts(self):
        from oui_master.merge import MasterDatabase
        db = MasterDatabase()
        n = db.fold_all([_raw("00:11:22", "A"), _raw("AA:BB:CC", "B")], "IEEE", "ieee_mal")
        self.assertEqual(n, 2)
        self.assertEqual(db.stats.get("ieee_mal"), 2)
        db.fold_all([_raw("DD:EE:FF", "C")], "Nmap")
        self.assertEqual(db.stats.get("nmap"), 1)

    def test_frozen_rejects_fold(self):
        from oui_master.merge import MasterDatabase
        db = MasterDatabase()
        db.fold(_raw("00:11:22", "A"), "IEEE")
        db.freeze()
        self.assertTrue(db.frozen)
        with self.assertRaises(RuntimeError):
            db.fold(_raw("AA:BB:CC", "B"), "IEEE")
        self.assertEqual(len(db), 1)

    def test_insertion_order(self):
        from oui_master.merge import MasterDatabase
        db = MasterDatabase()
        for key in ("CC:CC:CC", "AA:AA:AA", "BB:BB:BB"):
            db.fold(_raw(key, "X"), "Nmap")
        self.assertEqual(list(db), ["CC:CC:CC", "AA:AA:AA", "BB:BB:BB"])

    def test_stats_as_dict(self):
        from oui_master.merge import MasterDatabase
        db = MasterDatabase()
        db.fold_all([_raw("00:11:22", "A")], "IEEE", "ieee_mal")
        db.freeze()
        d = db.stats.as_dict()
        self.assertEqual(d["ieee_mal"], 1)
        self.assertEqual(d["unique"], 1)
        self.assertEqual(d["merged"], 0)
        self.assertEqual(d["mac_tracker"], 0)


if __name__ == "__main__":
    unittest.main()
