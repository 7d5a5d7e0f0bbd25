import unittest
from artist_networth.ingestion.wikidata_client import NetWorthClaim, extract_claims
from artist_networth.networth.claims import as_of_date, parse_amount, pick_best_claim, unit_entity_id
from wikidata_fixtures import statement


class TestBestClaim(unittest.TestCase):
    def test_preferred_rank_wins_regardless_of_date(self):
        claims = [
            NetWorthClaim(amount="+100", rank="normal", point_in_time="2020-00-00"),
            NetWorthClaim(amount="+200", rank="preferred", point_in_time="2010-00-00"),
        ]
        self.assertEqual(pick_best_claim(claims).amount, "+200")

    def test_latest_date_breaks_rank_tie(self):
        claims = [
            NetWorthClaim(amount="+1", point_in_time="+2015-00-00T00:00:00Z"),
            NetWorthClaim(amount="+2", point_in_time="+2021-06-00T00:00:00Z"),
            NetWorthClaim(amount="+3", point_in_time="+2021-00-00T00:00:00Z"),
        ]
        self.assertEqual(pick_best_claim(claims).amount, "+2")

    def test_undated_loses_tie(self):
        claims = [
            NetWorthClaim(amount="+1"),
            NetWorthClaim(amount="+2", point_in_time="+1990-00-00T00:00:00Z"),
        ]
        self.assertEqual(pick_best_claim(claims).amount, "+2")

    def test_deprecated_ranks_last(self):
        claims = [
            NetWorthClaim(amount="+1", rank="deprecated", point_in_time="+2024-01-01T00:00:00Z"),
            NetWorthClaim(amount="+2", rank="normal"),
        ]
        self.assertEqual(pick_best_claim(claims).amount, "+2")

    def test_empty(self):
        self.assertIsNone(pick_best_claim([]))
        self.assertIsNone(pick_best_claim([NetWorthClaim(amount="")]))


class TestClaimParts(unittest.TestCase):
    def test_as_of_precision(self):
        self.assertEqual(as_of_date("+2019-00-00T00:00:00Z"), "2019")
        self.assertEqual(as_of_date("+2019-05-00T00:00:00Z"), "2019-05")
        self.assertEqual(as_of_date("+2019-05-12T00:00:00Z"), "2019-05-12")
        self.assertEqual(as_of_date("2019-05-12"), "2019-05-12")
        self.assertIsNone(as_of_date(None))
        self.assertIsNone(as_of_date("sometime"))

    def test_parse_amount(self):
        self.assertEqual(parse_amount("+150000000"), 150000000.0)
        self.assertEqual(parse_amount("-12.5"), -12.5)

    def test_unit_entity_id(self):
        self.assertEqual(unit_entity_id("http://www.wikidata.org/entity/Q4917"), "Q4917")
        self.assertEqual(unit_entity_id("1"), "1")
        self.assertEqual(unit_entity_id(None), "")

    def test_extract_claims_skips_missing_amounts(self):
        payload = {
            "entities": {
                "Q1": {
                    "claims": {
                        "P2218": [
                            statement("+5", "preferred", "+2020-00-00T00:00:00Z"),
                            statement(None),
                            statement(""),
                            statement("lots"),
                            {"mainsnak": {"snaktype": "novalue"}, "rank": "normal"},
                        ],
                        "P569": [{"mainsnak": {}}],
                    }
                }
            }
        }
        claims = extract_claims(payload, "Q1", "P2218")
        self.assertEqual(len(claims), 1)
        self.assertEqual(claims[0].rank, "preferred")
        self.assertEqual(claims[0].point_in_time, "+2020-00-00T00:00:00Z")
        self.assertEqual(extract_claims(payload, "Q2", "P2218"), [])

    def test_extract_claims_rejects_non_decimal_amounts(self):
        amounts = ["nan", "+inf", "-Infinity", "1_000", "1e9", "+12.50", "-3"]
        payload = {"entities": {"Q1": {"claims": {"P2218": [statement(a) for a in amounts]}}}}
        kept = [c.amount for c in extract_claims(payload, "Q1", "P2218")]
        self.assertEqual(kept, ["+12.50", "-3"])

    def test_extract_claims_tolerates_malformed_shapes(self):
        bad_qualifier = statement("+5")
        bad_qualifier["qualifiers"] = {"P585": ["x"]}
        payload = {"entities": {"Q1": {"claims": {"P2218": [bad_qualifier, "junk", {"mainsnak": "junk"}]}}}}
        claims = extract_claims(payload, "Q1", "P2218")
        self.assertEqual(len(claims), 1)
        self.assertIsNone(claims[0].point_in_time)
        self.assertEqual(extract_claims({"entities": {"Q1": {"claims": {"P2218": {}}}}}, "Q1", "P2218"), [])
        self.assertEqual(extract_claims({"entities": []}, "Q1", "P2218"), [])

if __name__ == "__main__":
    unittest.main()
