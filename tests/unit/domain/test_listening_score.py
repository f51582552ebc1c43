"""Tests for listening scores, the artist match index and event matching."""

import pytest

from ticketalert.domain.value_objects import (
    ArtistMatch,
    ArtistMatchIndex,
    TopArtist,
    build_match_index,
    calculate_listening_score,
    match_event,
)


def artists(*names: str) -> list[TopArtist]:
    return [TopArtist(id=f"id-{name}", name=name) for name in names]


class TestCalculateListeningScore:
    def test_first_position_scores_100(self) -> None:
        assert calculate_listening_score(0, 50) == 100
        assert calculate_listening_score(0, 1) == 100

    def test_last_position(self) -> None:
        assert calculate_listening_score(49, 50) == 2
        assert calculate_listening_score(3, 4) == 25

    def test_rounds_half_up(self) -> None:
        # (8 - 7) / 8 * 100 = 12.5 -> 13, not banker's 12
        assert calculate_listening_score(7, 8) == 13

    @pytest.mark.parametrize("total", [1, 2, 7, 50])
    def test_monotone_non_increasing_and_in_range(self, total: int) -> None:
        scores = [calculate_listening_score(p, total) for p in range(total)]
        assert scores == sorted(scores, reverse=True)
        assert all(1 <= score <= 100 for score in scores)

    @pytest.mark.parametrize(("position", "total"), [(0, 0), (-1, 5), (5, 5)])
    def test_rejects_invalid_input(self, position: int, total: int) -> None:
        with pytest.raises(ValueError):
            calculate_listening_score(position, total)


class TestBuildMatchIndex:
    def test_window_score_ranges(self) -> None:
        index = build_match_index(
            short_term=artists("Sigrid", "Kygo"),
            medium_term=artists("Aurora", "Girl in Red"),
            long_term=artists("a-ha", "Röyksopp"),
        )
        assert index.get("sigrid") == ArtistMatch(100, "Sigrid")
        assert index.get("kygo").score == 75
        assert index.get("aurora").score == 75
        assert index.get("girl in red").score == 50
        assert index.get("aha").score == 50
        assert index.get("royksopp").score == 25

    def test_first_occurrence_wins(self) -> None:
        index = build_match_index(
            short_term=artists("A", "B", "C", "D"),
            long_term=artists("D"),
        )
        # D keeps its short-term score: round(50 + 1/4 * 50) = 63, not long-term 50
        assert index.get("d").score == 63
        assert len(index) == 4

    def test_dedup_by_spotify_id_even_if_renamed(self) -> None:
        index = build_match_index(
            short_term=[TopArtist(id="x1", name="Sigrid")],
            medium_term=[TopArtist(id="x1", name="SIGRID (live)")],
        )
        assert list(index) == ["sigrid"]

    def test_empty_names_are_not_indexed(self) -> None:
        index = build_match_index(short_term=artists("!!!", "Kygo"))
        assert "" not in index
        assert list(index) == ["kygo"]

    def test_keys_and_ranked_ordered_by_score(self) -> None:
        index = build_match_index(
            short_term=artists("Short"),
            medium_term=artists("Medium1", "Medium2"),
            long_term=artists("Long"),
        )
        scores = [index.get(key).score for key in index]
        assert scores == sorted(scores, reverse=True)
        assert [artist.name for artist in index.ranked][0] == "Short"

    def test_all_windows_empty(self) -> None:
        index = build_match_index()
        assert index.is_empty
        assert index.to_match_map() == {}

    def test_match_map_shape(self) -> None:
        index = build_match_index(short_term=artists("Beyoncé"))
        assert index.to_match_map() == {"beyonce": {"score": 100, "originalName": "Beyoncé"}}


class TestFromRanking:
    def test_scores_by_rank(self) -> None:
        index = ArtistMatchIndex.from_ranking(artists("A", "B", "C", "D"))
        assert [index.get(k).score for k in index] == [100, 75, 50, 25]


class TestMatchEvent:
    def test_exact_match_returns_indexed_score(self) -> None:
        index = ArtistMatchIndex(entries={"sigrid": ArtistMatch(90, "Sigrid")})
        for name in ("Sigrid", "SIGRID", "sigrid"):
            result = match_event(name, index)
            assert result.score == 90
            assert result.matched_artist == "Sigrid"
            assert result.is_match

    def test_substring_match_both_directions(self) -> None:
        index = ArtistMatchIndex(entries={"kygo": ArtistMatch(80, "Kygo")})
        assert match_event("Kygo - Palm Trees Tour", index).score == 80

        long_key = ArtistMatchIndex(entries={"girl in red": ArtistMatch(60, "girl in red")})
        assert match_event("Girl in", long_key).score == 60

    def test_substring_tie_break_is_insertion_order(self) -> None:
        index = ArtistMatchIndex(
            entries={
                "aurora": ArtistMatch(70, "Aurora"),
                "kygo": ArtistMatch(95, "Kygo"),
            }
        )
        result = match_event("Kygo og Aurora", index)
        assert result.matched_artist == "Aurora"
        assert result.score == 70

    def test_empty_index_scores_zero(self) -> None:
        result = match_event("Anything", ArtistMatchIndex())
        assert result.score == 0
        assert result.matched_artist is None

    def test_empty_name_scores_zero(self) -> None:
        index = ArtistMatchIndex(entries={"kygo": ArtistMatch(80, "Kygo")})
        assert match_event("", index).score == 0
        assert match_event("!!!", index).score == 0

    def test_no_match(self) -> None:
        index = ArtistMatchIndex(entries={"kygo": ArtistMatch(80, "Kygo")})
        assert not match_event("Sigrid", index).is_match
