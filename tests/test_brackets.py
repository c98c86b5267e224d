"""Tests for bracket bout lookups."""

from __future__ import annotations

import unittest

from fightrecords.brackets.utils import (
    bye_entrant,
    final_blue_corner_bout,
    final_red_corner_bout,
    find_bracket_bout_number,
    has_final_bout,
    is_bout_finished,
    is_bracket_bout,
    resolve_bout_number,
    semifinal_winner_text,
)


def _bout(num, red, blue, **fields):
    bout = {
        "boutNum": num,
        "red": {"fighter_id": red} if red else None,
        "blue": {"fighter_id": blue} if blue else None,
    }
    bout.update(fields)
    return bout


class FourEntrantTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.slots = ["A", "B", "C", "D"]
        self.bouts = [
            _bout(3, "A", "B", bracket_bout_type="semifinal"),
            _bout(4, "D", "C", bracket_bout_type="semifinal"),
        ]

    def test_semifinals_resolve(self) -> None:
        self.assertEqual(resolve_bout_number(self.slots, self.bouts, 0, 1), "3")
        self.assertEqual(resolve_bout_number(self.slots, self.bouts, 2, 3), "4")

    def test_final_is_tbd_without_a_final_bout(self) -> None:
        self.assertEqual(resolve_bout_number(self.slots, self.bouts, 0, 2), "TBD")
        self.assertFalse(has_final_bout(self.bouts))

    def test_corner_order_does_not_matter(self) -> None:
        self.assertEqual(resolve_bout_number(self.slots, self.bouts, 1, 0), "3")

    def test_final_corner_sources(self) -> None:
        self.assertEqual(final_red_corner_bout(self.slots, self.bouts), "3")
        self.assertEqual(final_blue_corner_bout(self.slots, self.bouts), "4")
        self.assertEqual(semifinal_winner_text(self.slots, self.bouts, 1), "Bout 3")
        self.assertEqual(semifinal_winner_text(self.slots, [], 2), "SF2")

    def test_slots_may_be_corner_dicts(self) -> None:
        slots = [{"fighter_id": s} for s in self.slots]
        self.assertEqual(resolve_bout_number(slots, self.bouts, 2, 3), "4")


class ThreeEntrantTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.slots = ["A", "B", "Z"]
        self.bouts = [_bout(1, "A", "B", bracket_bout_type="semifinal")]

    def test_semifinal_resolves(self) -> None:
        self.assertEqual(resolve_bout_number(self.slots, self.bouts, 0, 1), "1")
        self.assertEqual(final_red_corner_bout(self.slots, self.bouts), "1")

    def test_bye_side_needs_no_lookup(self) -> None:
        self.assertIsNone(final_blue_corner_bout(self.slots, self.bouts))
        self.assertEqual(bye_entrant(self.slots), "Z")
        self.assertIsNone(find_bracket_bout_number(self.slots, self.bouts, 1))


class EdgeCaseTestCase(unittest.TestCase):
    def test_unassigned_or_out_of_range_slot(self) -> None:
        bouts = [_bout(7, "A", "B")]
        self.assertEqual(resolve_bout_number(["A", None], bouts, 0, 1), "TBD")
        self.assertEqual(resolve_bout_number(["A", {"fighter_id": ""}], bouts, 0, 1), "TBD")
        self.assertEqual(resolve_bout_number(["A", "B"], bouts, 0, 5), "TBD")
        self.assertEqual(resolve_bout_number([], bouts, 0, 1), "TBD")

    def test_bouts_with_empty_corners_are_ignored(self) -> None:
        bouts = [_bout(2, "A", None), _bout(5, "B", "A")]
        self.assertEqual(resolve_bout_number(["A", "B"], bouts, 0, 1), "5")

    def test_eight_entrant_quarterfinals(self) -> None:
        slots = [f"F{i}" for i in range(8)]
        bouts = [_bout(10 + i, slots[2 * i], slots[2 * i + 1]) for i in range(4)]
        self.assertEqual(find_bracket_bout_number(slots, bouts, 3), "12")
        self.assertIsNone(find_bracket_bout_number(slots, bouts, 5))

    def test_bout_flags(self) -> None:
        final = _bout(9, "A", "C", bracket_bout_type="final")
        self.assertTrue(is_bracket_bout(final))
        self.assertFalse(is_bracket_bout(_bout(1, "A", "B")))
        self.assertTrue(has_final_bout([final]))

        self.assertFalse(is_bout_finished(final))
        final["red"]["result"] = "W"
        self.assertTrue(is_bout_finished(final))
        self.assertFalse(is_bout_finished(_bout(1, "A", None)))


if __name__ == "__main__":
    unittest.main()
