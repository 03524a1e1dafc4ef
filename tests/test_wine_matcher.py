"""
Tests for wine entity resolution.
"""

import pytest

from cellar.models.wine import WineDescriptor
from cellar.services.wine_matcher import NO_MATCH, MatchResult, NoMatch, WineEntityResolver


class TestWineEntityResolver:
    """Tests for resolving observed wines against catalog candidates."""

    @pytest.fixture
    def resolver(self):
        return WineEntityResolver()

    def test_exact_match(self, resolver, make_wine):
        candidate = make_wine(id=7, name="Barolo", producer_name="Gaja", vintage=2018)
        result = resolver.resolve(WineDescriptor("Barolo", "Gaja", 2018), [candidate])
        assert isinstance(result, MatchResult)
        assert result.wine is candidate
        assert result.score == 1.0

    def test_typo_still_matches(self, resolver, make_wine):
        candidate = make_wine(name="Chateau Margaux", producer_name="Chateau Margaux")
        result = resolver.resolve(WineDescriptor("Chateu Margaux", "Chateau Margaux"), [candidate])
        assert result
        assert result.score > 0.95

    def test_empty_candidates(self, resolver):
        assert resolver.resolve(WineDescriptor("Barolo", "Gaja"), []) is NO_MATCH

    def test_no_match_is_sentinel_not_none(self, resolver, make_wine):
        result = resolver.resolve(WineDescriptor("Opus One", "Opus One Winery"),
                                  [make_wine(name="Yellow Tail Shiraz", producer_name="Casella")])
        assert result is NO_MATCH
        assert result is not None
        assert isinstance(result, NoMatch)
        assert not result
        assert repr(result) == "NO_MATCH"

    def test_vintage_mismatch_rejected(self, resolver, make_wine):
        candidate = make_wine(name="Barolo", producer_name="Gaja", vintage=2015)
        assert resolver.resolve(WineDescriptor("Barolo", "Gaja", 2018), [candidate]) is NO_MATCH

    def test_vintage_filter_picks_matching_year(self, resolver, make_wine):
        older = make_wine(id=1, name="Barolo", producer_name="Gaja", vintage=2015)
        target_year = make_wine(id=2, name="Barolo", producer_name="Gaja", vintage=2018)
        result = resolver.resolve(WineDescriptor("Barolo", "Gaja", 2018), [older, target_year])
        assert result.wine.id == 2

    def test_target_without_vintage_matches_any_vintage(self, resolver, make_wine):
        candidate = make_wine(name="Barolo", producer_name="Gaja", vintage=2015)
        assert resolver.resolve(WineDescriptor("Barolo", "Gaja"), [candidate])

    def test_candidate_without_vintage_rejected_when_target_has_one(self, resolver, make_wine):
        candidate = make_wine(name="Barolo", producer_name="Gaja", vintage=None)
        assert resolver.resolve(WineDescriptor("Barolo", "Gaja", 2018), [candidate]) is NO_MATCH

    def test_score_equal_to_threshold_rejected(self, resolver, make_wine):
        # name 1.0, producer 0.7 -> combined exactly 0.85
        candidate = make_wine(name="Barolo", producer_name="abcdefgxyz")
        assert resolver.resolve(WineDescriptor("Barolo", "abcdefghij"), [candidate]) is NO_MATCH

    def test_score_just_above_threshold_accepted(self, resolver, make_wine):
        # name 1.0, producer 351/500 = 0.702 -> combined 0.851
        candidate = make_wine(name="Barolo", producer_name="a" * 351 + "b" * 149)
        result = resolver.resolve(WineDescriptor("Barolo", "a" * 500), [candidate])
        assert result
        assert result.score == pytest.approx(0.851)

    def test_best_candidate_wins(self, resolver, make_wine):
        close = make_wine(id=1, name="Tignanelo", producer_name="Antinori")
        exact = make_wine(id=2, name="Tignanello", producer_name="Antinori")
        result = resolver.resolve(WineDescriptor("Tignanello", "Antinori"), [close, exact])
        assert result.wine.id == 2

    def test_tie_keeps_first_candidate(self, resolver, make_wine):
        first = make_wine(id=10, name="Sassicaia", producer_name="Tenuta San Guido")
        second = make_wine(id=3, name="Sassicaia", producer_name="Tenuta San Guido")
        result = resolver.resolve(WineDescriptor("Sassicaia", "Tenuta San Guido"), [first, second])
        assert result.wine.id == 10

    def test_threshold_override(self, make_wine):
        candidate = make_wine(name="Barolo", producer_name="abcdefgxyz")
        target = WineDescriptor("Barolo", "abcdefghij")
        assert WineEntityResolver(threshold=0.8).resolve(target, [candidate])
        assert WineEntityResolver().resolve(target, [candidate], threshold=0.8)

    def test_empty_names_are_scored(self, resolver, make_wine):
        candidate = make_wine(name="", producer_name="")
        result = resolver.resolve(WineDescriptor("", ""), [candidate])
        assert result.score == 1.0

    def test_accent_folding_is_opt_in(self, make_wine):
        candidate = make_wine(name="Chateau Latour", producer_name="Chateau Latour")
        target = WineDescriptor("Château Latour", "Château Latour")
        assert WineEntityResolver(fold_accents=True).resolve(target, [candidate]).score == 1.0
        assert WineEntityResolver().resolve(target, [candidate]).score < 1.0

    def test_inputs_not_mutated(self, resolver, make_wine):
        candidates = [make_wine(id=2, name="B"), make_wine(id=1, name="A")]
        snapshot = list(candidates)
        resolver.resolve(WineDescriptor("A", "Test Producer"), candidates)
        assert candidates == snapshot


class TestResolveWithDebug:
    @pytest.fixture
    def resolver(self):
        return WineEntityResolver()

    def test_no_candidates_reason(self, resolver):
        result = resolver.resolve_with_debug(WineDescriptor("Barolo", "Gaja"), [])
        assert result.match is NO_MATCH
        assert result.rejection_reason == "no_candidates"
        assert result.candidates_count == 0

    def test_vintage_mismatch_reason(self, resolver, make_wine):
        candidate = make_wine(name="Barolo", producer_name="Gaja", vintage=2015)
        result = resolver.resolve_with_debug(WineDescriptor("Barolo", "Gaja", 2018), [candidate])
        assert result.match is NO_MATCH
        assert result.rejection_reason == "vintage_mismatch"
        assert result.near_misses[0].rejection_reason == "vintage_mismatch"

    def test_below_threshold_reason(self, resolver, make_wine):
        candidate = make_wine(name="Rioja Reserva", producer_name="Muga")
        result = resolver.resolve_with_debug(WineDescriptor("Barolo", "Gaja"), [candidate])
        assert result.rejection_reason == "below_threshold"
        assert result.near_misses[0].rejection_reason == "below_threshold"

    def test_match_excluded_from_near_misses(self, resolver, make_wine):
        winner = make_wine(id=1, name="Tignanello", producer_name="Antinori")
        runner_up = make_wine(id=2, name="Tignanelo", producer_name="Antinori")
        result = resolver.resolve_with_debug(WineDescriptor("Tignanello", "Antinori"), [winner, runner_up])
        assert result.match.wine is winner
        assert result.rejection_reason is None
        assert [nm.rejection_reason for nm in result.near_misses] == ["not_best"]

    def test_decision_matches_resolve(self, resolver, make_wine):
        candidates = [
            make_wine(id=1, name="Barolo", producer_name="Gaja", vintage=2015),
            make_wine(id=2, name="Barolo", producer_name="Gaja", vintage=2018),
        ]
        target = WineDescriptor("Barolo", "Gaja", 2018)
        assert resolver.resolve_with_debug(target, candidates).match == resolver.resolve(target, candidates)

    def test_near_misses_capped_and_sorted(self, resolver, make_wine):
        candidates = [make_wine(id=i, name="x" * i, producer_name="p") for i in range(1, 9)]
        result = resolver.resolve_with_debug(WineDescriptor("xxxxxxxxxxxxxxxx", "q"), candidates)
        assert len(result.near_misses) == 5
        scores = [nm.score for nm in result.near_misses]
        assert scores == sorted(scores, reverse=True)
