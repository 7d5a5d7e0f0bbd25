import csv
import io
import unittest
from artist_networth.exports.writers import SCHEMAS, write_csv, write_networth
from artist_networth.networth.formatting import ResolvedNetWorth
from artist_networth.networth.pipeline import ResolutionState


class TestExports(unittest.TestCase):
    def test_write_networth(self):
        results = [
            ("Drake", ResolutionState(status="resolved", data=ResolvedNetWorth(
                amount=250000000.0, currency_code="USD", symbol="$", as_of="2022", entity_id="Q33240"))),
            ("Zzzznotaname", ResolutionState(status="not_found", error='No Wikidata item found for "Zzzznotaname".')),
        ]
        out = write_networth(results)
        header = out.splitlines()[0].split(",")
        self.assertEqual(header, SCHEMAS["networth"])
        rows = list(csv.DictReader(io.StringIO(out)))
        self.assertEqual(rows[0]["text"], "$250,000,000")
        self.assertEqual(rows[0]["as_of"], "2022")
        self.assertEqual(rows[1]["status"], "not_found")
        self.assertEqual(rows[1]["amount"], "")
        self.assertIn("Zzzznotaname", rows[1]["error"])

    def test_write_csv_ignores_extra_keys(self):
        out = write_csv([{"a": 1, "zzz": 2}], ["a", "b"])
        self.assertEqual(out.splitlines(), ["a,b", "1,"])

if __name__ == "__main__":
    unittest.main()
