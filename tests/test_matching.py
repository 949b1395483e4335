"""Tests for shape matching."""

import pytest

from pathmorph.config import ReorientPolicy
from pathmorph.corners import fix_corners
from pathmorph.errors import InvariantViolation, UnsupportedCommandKind
from pathmorph.matching import MatchedShapes, add_commands, endpoint_distances, match_shapes
from pathmorph.types import CubicCommand, Path, Point, QuadraticCommand, line, vertex_marker


def assert_balanced(matched: MatchedShapes) -> None:
    assert len(matched.from_pieces) == len(matched.to_pieces)
    for a, b in zip(matched.from_pieces, matched.to_pieces, strict=True):
        assert len(a) == len(b)
        assert all(isinstance(c, QuadraticCommand) for c in a.commands + b.commands)


class TestAddCommands:
    def test_already_long_enough(self) -> None:
        commands = [line(0, 0, 1, 0).to_quadratic()]
        assert add_commands(commands, 1) == commands

    def test_splits_longest_first(self) -> None:
        commands = [line(0, 0, 10, 0).to_quadratic(), line(10, 0, 11, 0).to_quadratic()]
        result = add_commands(commands, 3)
        assert len(result) == 3
        assert result[2] == commands[1]
        assert result[0].length() == pytest.approx(5)

    def test_counts_splits_already_assigned(self) -> None:
        # 9 split three ways beats 4 split once
        commands = [line(0, 0, 9, 0).to_quadratic(), line(9, 0, 13, 0).to_quadratic()]
        result = add_commands(commands, 4)
        assert [c.length() for c in result] == pytest.approx([3, 3, 3, 4])

    def test_never_splits_vertex_markers(self) -> None:
        commands = [
            line(0, 0, 10, 0).to_quadratic(),
            vertex_marker(Point(x=10, y=0)),
            line(10, 0, 10, 3).to_quadratic(),
            line(10, 3, 15, 3).to_quadratic(),
        ]
        result = add_commands(commands, 5)
        assert len(result) == 5
        assert [c.is_vertex for c in result] == [False, True, False, False, False]

    def test_corner_neighbors_weighted_down(self) -> None:
        commands = [
            line(0, 0, 10, 0).to_quadratic(),
            vertex_marker(Point(x=10, y=0)),
            line(10, 0, 10, 3).to_quadratic(),
            line(10, 3, 15, 3).to_quadratic(),
        ]
        # 10 * 0.1 < 5: the free command is split
        result = add_commands(commands, 5)
        assert result[0] == commands[0]
        assert result[3].length() == pytest.approx(2.5)

        # At full weight the command beside the corner wins
        result = add_commands(commands, 5, neighbor_weight=1.0)
        assert result[0].length() == pytest.approx(5)
        assert result[2].is_vertex

    def test_only_markers_raises(self) -> None:
        with pytest.raises(InvariantViolation):
            add_commands([vertex_marker(Point(x=0, y=0))], 2)

    def test_preserves_length(self) -> None:
        commands = [line(0, 0, 3, 4).to_quadratic(), line(3, 4, 3, 10).to_quadratic()]
        result = add_commands(commands, 7)
        assert sum(c.length() for c in result) == pytest.approx(11)


class TestEndpointDistances:
    def test_same_direction(self) -> None:
        a = [line(0, 0, 10, 0).to_quadratic()]
        b = [line(100, 100, 110, 100).to_quadratic()]
        current, reversed_ = endpoint_distances(a, b)
        assert current == pytest.approx(0)
        assert reversed_ == pytest.approx(20)

    def test_opposite_direction(self) -> None:
        a = [line(0, 0, 10, 0).to_quadratic()]
        b = [line(10, 0, 0, 0).to_quadratic()]
        current, reversed_ = endpoint_distances(a, b)
        assert current == pytest.approx(20)
        assert reversed_ == pytest.approx(0)


class TestMatchShapes:
    def test_grows_shorter_piece(self) -> None:
        four = Path.of(line(0, 0, 1, 0), line(1, 0, 2, 0), line(2, 0, 3, 0), line(3, 0, 4, 0))
        two = Path.of(line(0, 0, 0, 2), line(0, 2, 2, 2))
        matched = match_shapes(four, two)
        assert_balanced(matched)
        assert matched.piece_count == 1
        assert len(matched.to_pieces[0]) == 4
        assert matched.to_path.length() == pytest.approx(two.length())
        assert matched.from_path.commands == tuple(c.to_quadratic() for c in four.commands)

    def test_inputs_untouched(self) -> None:
        a = Path.of(line(0, 0, 1, 0), line(1, 0, 2, 0))
        b = Path.of(line(0, 0, 5, 5))
        match_shapes(a, b)
        assert len(a) == 2
        assert len(b) == 1

    def test_breaks_at_corner_first(self) -> None:
        two_pieces = Path.of(line(0, 0, 10, 0), line(0, 5, 10, 5))
        corner = fix_corners(Path.of(line(0, 0, 10, 0), line(10, 0, 10, 10)))
        matched = match_shapes(two_pieces, corner)
        assert_balanced(matched)
        assert matched.piece_count == 2
        assert [len(p) for p in matched.to_pieces] == [1, 1]
        assert matched.to_path.vertex_indices() == []
        assert matched.to_pieces[1].start == Point(x=10, y=0)

    def test_breaks_into_runs(self) -> None:
        two_pieces = Path.of(line(0, 0, 10, 0), line(0, 5, 10, 5))
        three = Path.of(line(0, 0, 1, 0), line(1, 0, 2, 0), line(2, 0, 3, 0))
        matched = match_shapes(two_pieces, three)
        assert_balanced(matched)
        assert matched.piece_count == 2
        # Runs of round(3 / 2) == 2 then 1
        assert matched.to_pieces[0].end == Point(x=2, y=0)
        assert [len(p) for p in matched.from_pieces] == [2, 1]

    def test_splits_commands_when_pieces_run_out(self) -> None:
        three_pieces = Path.of(line(0, 0, 1, 0), line(0, 5, 1, 5), line(0, 9, 1, 9))
        single = Path.of(line(0, 0, 9, 0))
        matched = match_shapes(three_pieces, single)
        assert_balanced(matched)
        assert matched.piece_count == 3
        assert matched.to_path.length() == pytest.approx(9)
        for piece in matched.to_pieces:
            assert piece.length() == pytest.approx(3)

    def test_more_pieces_on_second_side(self) -> None:
        single = Path.of(line(0, 0, 1, 0), line(1, 0, 2, 0))
        two_pieces = Path.of(line(0, 0, 10, 0), line(0, 5, 10, 5))
        matched = match_shapes(single, two_pieces)
        assert_balanced(matched)
        assert matched.piece_count == 2

    def test_drops_shared_corners(self) -> None:
        a = fix_corners(Path.of(line(0, 0, 10, 0), line(10, 0, 10, 10)))
        b = fix_corners(Path.of(line(0, 0, 0, 10), line(0, 10, 10, 10)))
        matched = match_shapes(a, b)
        assert_balanced(matched)
        assert len(matched.from_pieces[0]) == 2
        assert matched.from_path.vertex_indices() == []
        assert matched.to_path.vertex_indices() == []

    def test_keeps_unshared_corner(self) -> None:
        a = fix_corners(Path.of(line(0, 0, 10, 0), line(10, 0, 10, 10)))
        b = Path.of(line(0, 0, 10, 0), line(10, 0, 20, 0))
        matched = match_shapes(a, b)
        assert_balanced(matched)
        assert matched.from_path.vertex_indices() == [1]

    def test_keep_orientation_by_default(self) -> None:
        a = Path.of(line(0, 0, 10, 0))
        b = Path.of(line(10, 0, 0, 0))
        matched = match_shapes(a, b)
        assert matched.to_path.start == Point(x=10, y=0)

    def test_nearest_orientation_reverses(self) -> None:
        a = Path.of(line(0, 0, 10, 0))
        b = Path.of(line(10, 0, 0, 0))
        matched = match_shapes(a, b, reorient=ReorientPolicy.NEAREST)
        assert matched.to_path.start == Point(x=0, y=0)
        assert matched.to_path.end == Point(x=10, y=0)

    def test_both_empty(self) -> None:
        matched = match_shapes(Path(), Path())
        assert matched.piece_count == 0
        assert matched.from_path.is_empty()

    def test_one_side_empty_raises(self) -> None:
        with pytest.raises(InvariantViolation):
            match_shapes(Path(), Path.of(line(0, 0, 1, 0)))
        with pytest.raises(InvariantViolation):
            match_shapes(Path.of(line(0, 0, 1, 0)), Path())

    def test_cubic_raises(self) -> None:
        cubic = CubicCommand(
            start=Point(x=0, y=0),
            control1=Point(x=1, y=1),
            control2=Point(x=2, y=1),
            end=Point(x=3, y=0),
        )
        with pytest.raises(UnsupportedCommandKind):
            match_shapes(Path.of(cubic), Path.of(line(0, 0, 1, 0)))
