"""Tests for sanctions screening and name matchers."""

from amlscreen.models import AMLConfig, AMLFlag, SanctionLists
from amlscreen.screening.rules.sanctions import (
    ExactNameMatcher,
    FuzzyNameMatcher,
    SanctionScreener,
    _normalize_name,
    build_name_matcher,
)
from tests.conftest import make_customer, make_transaction


class TestNormalizeName:
    def test_uppercase(self):
        assert _normalize_name("john doe") == "JOHN DOE"

    def test_collapse_and_strip(self):
        assert _normalize_name("  john   doe  ") == "JOHN DOE"


class TestSanctionLists:
    def test_names_uppercased(self):
        lists = SanctionLists(individuals=["Viktor Petrov"], entities=["Acme Ltd"], countries=["ir"])
        assert "VIKTOR PETROV" in lists.individuals
        assert "ACME LTD" in lists.entities
        assert "IR" in lists.countries


class TestExactNameMatcher:
    def test_case_insensitive_match(self):
        assert ExactNameMatcher().match("sanctioned_person_1", {"SANCTIONED_PERSON_1"}) == "SANCTIONED_PERSON_1"

    def test_no_partial_match(self):
        assert ExactNameMatcher().match("SANCTIONED_PERSON", {"SANCTIONED_PERSON_1"}) is None

    def test_whitespace_not_normalised(self):
        """Exact matching does not strip or collapse whitespace."""
        assert ExactNameMatcher().match(" SANCTIONED_PERSON_1", {"SANCTIONED_PERSON_1"}) is None


class TestFuzzyNameMatcher:
    def test_transliteration_variant(self):
        matcher = FuzzyNameMatcher(threshold=85)
        assert matcher.match("Victor Petrov", {"VIKTOR PETROV"}) == "VIKTOR PETROV"

    def test_token_reorder(self):
        matcher = FuzzyNameMatcher(threshold=85)
        assert matcher.match("Petrov Viktor", {"VIKTOR PETROV"}) == "VIKTOR PETROV"

    def test_unrelated_name(self):
        assert FuzzyNameMatcher(threshold=85).match("Maria Garcia", {"VIKTOR PETROV"}) is None

    def test_threshold_100_requires_exact(self):
        matcher = FuzzyNameMatcher(threshold=100)
        assert matcher.match("Victor Petrov", {"VIKTOR PETROV"}) is None
        assert matcher.match("viktor petrov", {"VIKTOR PETROV"}) == "VIKTOR PETROV"


class TestBuildNameMatcher:
    def test_exact_by_default(self):
        assert isinstance(build_name_matcher(AMLConfig()), ExactNameMatcher)

    def test_fuzzy_when_configured(self):
        matcher = build_name_matcher(AMLConfig(name_matching="fuzzy", fuzzy_match_threshold=90))
        assert isinstance(matcher, FuzzyNameMatcher)
        assert matcher.threshold == 90


class TestSanctionScreener:
    def test_clean_customer(self, sanction_lists):
        result = SanctionScreener(sanction_lists).screen(make_transaction(), make_customer())
        assert result.hit is False
        assert result.flags == []
        assert result.screened_at is not None

    def test_screened_at_from_injected_clock(self, sanction_lists, clock):
        result = SanctionScreener(sanction_lists, clock=clock).screen(make_transaction(), make_customer())
        assert result.screened_at == clock()

    def test_customer_name_hit(self, sanction_lists):
        customer = make_customer(first_name="Viktor", last_name="Petrov")
        result = SanctionScreener(sanction_lists).screen(make_transaction(), customer)
        assert result.hit is True
        assert result.flags == [AMLFlag.SANCTION_HIT]

    def test_counterparty_individual_hit(self, sanction_lists):
        transaction = make_transaction(counterparty="SANCTIONED_PERSON_1")
        result = SanctionScreener(sanction_lists).screen(transaction, make_customer())
        assert result.hit is True
        assert AMLFlag.SANCTION_HIT in result.flags

    def test_counterparty_entity_hit_lowercase(self, sanction_lists):
        transaction = make_transaction(counterparty="sanctioned_company_2")
        result = SanctionScreener(sanction_lists).screen(transaction, make_customer())
        assert AMLFlag.SANCTION_HIT in result.flags

    def test_customer_name_not_checked_against_entities(self):
        lists = SanctionLists(entities=["JOHN DOE"])
        result = SanctionScreener(lists).screen(make_transaction(), make_customer())
        assert result.hit is False

    def test_sanction_hit_not_duplicated(self, sanction_lists):
        customer = make_customer(first_name="Viktor", last_name="Petrov")
        transaction = make_transaction(counterparty="SANCTIONED_PERSON_1")
        result = SanctionScreener(sanction_lists).screen(transaction, customer)
        assert result.flags.count(AMLFlag.SANCTION_HIT) == 1

    def test_high_risk_nationality(self, sanction_lists):
        result = SanctionScreener(sanction_lists).screen(make_transaction(), make_customer(nationality="IR"))
        assert result.hit is True
        assert result.flags == [AMLFlag.HIGH_RISK_COUNTRY]

    def test_name_and_country_together(self, sanction_lists):
        transaction = make_transaction(counterparty="SANCTIONED_PERSON_2")
        result = SanctionScreener(sanction_lists).screen(transaction, make_customer(nationality="KP"))
        assert result.flags == [AMLFlag.SANCTION_HIT, AMLFlag.HIGH_RISK_COUNTRY]

    def test_counterparty_without_name(self, sanction_lists):
        transaction = make_transaction()
        transaction.counterparty = None
        result = SanctionScreener(sanction_lists).screen(transaction, make_customer())
        assert result.hit is False

    def test_empty_lists(self):
        screener = SanctionScreener(SanctionLists())
        customer = make_customer(nationality="IR")
        result = screener.screen(make_transaction(counterparty="SANCTIONED_PERSON_1"), customer)
        assert result.hit is False

    def test_fuzzy_matcher_substitution(self, sanction_lists):
        """A stricter matcher plugs in without changing the screener."""
        screener = SanctionScreener(sanction_lists, matcher=FuzzyNameMatcher(threshold=85))
        customer = make_customer(first_name="Victor", last_name="Petrov")
        result = screener.screen(make_transaction(), customer)
        assert AMLFlag.SANCTION_HIT in result.flags
