import time
import unittest
from dataclasses import replace

from lifebingo_core.board import DEFAULT_START_YEAR, Profile, new_board
from lifebingo_core.boards import (
    auto_layout_board,
    board_stats,
    edit_board_cell,
    find_board,
    next_board,
    resolve_active,
    sort_for_listing,
    toggle_board_cell,
    toggle_board_sub_goal,
    update_profile,
)


class TestNewBoard(unittest.TestCase):
    def test_given_year_when_creating_then_25_empty_cells_in_position_order(self):
        b = new_board(2027)
        self.assertEqual(len(b.items), 25)
        self.assertEqual([c.position for c in b.items], list(range(25)))
        self.assertTrue(all(c.text == "" and c.difficulty == 1 and not c.achieved for c in b.items))
        self.assertEqual(len({c.id for c in b.items}), 25)
        self.assertEqual(b.profile, Profile(year=2027, month=None, theme="pink"))
        self.assertEqual(b.created_at, b.updated_at)

    def test_given_cell_when_reading_row_and_col_then_derived_from_position(self):
        cell = new_board(2026).cell_at(13)
        self.assertEqual((cell.row, cell.col), (2, 3))
        self.assertIsNone(new_board(2026).cell_at(25))

    def test_given_board_when_pretty_then_marks_achieved_and_empty(self):
        b = new_board(2026)
        b = edit_board_cell(b, b.items[0].id, text="Read 20 books")
        b = toggle_board_cell(b, b.items[0].id)
        b = edit_board_cell(b, b.items[6].id, text="Swim")
        txt = b.pretty()
        lines = txt.splitlines()
        self.assertEqual(len(lines), 5)
        self.assertTrue(lines[0].startswith("*Read 20 b~"))
        self.assertIn(" Swim", lines[1])
        self.assertIn(".", lines[4])


class TestBoardMutations(unittest.TestCase):
    def setUp(self):
        self.board = replace(new_board(2026), updated_at=0)
        self.cell_id = self.board.items[0].id

    def test_given_edit_when_applied_then_updated_at_refreshed(self):
        b = edit_board_cell(self.board, self.cell_id, text="Learn Spanish", difficulty=4)
        self.assertGreater(b.updated_at, 0)
        self.assertEqual(b.items[0].text, "Learn Spanish")
        self.assertEqual(b.created_at, self.board.created_at)

    def test_given_toggle_then_blank_when_stats_then_achievement_cleared(self):
        b = edit_board_cell(self.board, self.cell_id, text="Learn Spanish")
        b = toggle_board_cell(b, self.cell_id)
        self.assertEqual(board_stats(b)["achieved"], 1)
        b = edit_board_cell(b, self.cell_id, text="")
        self.assertEqual(board_stats(b), {"achieved": 0, "bingo": 0, "progress": 0, "lines": []})

    def test_given_unknown_ids_when_mutating_then_items_unchanged(self):
        self.assertEqual(toggle_board_cell(self.board, "x").items, self.board.items)
        self.assertEqual(toggle_board_sub_goal(self.board, self.cell_id, "x").items, self.board.items)

    def test_given_row_stamped_when_stats_then_one_bingo_and_20_percent(self):
        b = self.board
        for cell in b.items[:5]:
            b = edit_board_cell(b, cell.id, text="goal")
            b = toggle_board_cell(b, cell.id)
        stats = board_stats(b)
        self.assertEqual(stats["bingo"], 1)
        self.assertEqual(stats["progress"], 20)
        self.assertEqual(stats["lines"], ["row-0"])

    def test_given_board_when_auto_layout_then_permutation_and_refreshed(self):
        b = edit_board_cell(self.board, self.board.items[24].id, text="easy", difficulty=1)
        for cell in b.items[:24]:
            b = edit_board_cell(b, cell.id, difficulty=3)
        b = replace(b, updated_at=0)
        out = auto_layout_board(b)
        self.assertGreater(out.updated_at, 0)
        self.assertEqual(out.cell_at(12).text, "easy")
        self.assertEqual(sorted(c.position for c in out.items), list(range(25)))


class TestProfile(unittest.TestCase):
    def setUp(self):
        self.board = new_board(2026, month=3, theme="blue")

    def test_given_new_values_when_updating_then_profile_changes(self):
        b = update_profile(self.board, year=2030, theme="green")
        self.assertEqual(b.profile, Profile(year=2030, month=3, theme="green"))

    def test_given_month_none_when_updating_then_month_cleared(self):
        b = update_profile(self.board, month=None)
        self.assertIsNone(b.profile.month)
        self.assertEqual(b.profile.label(), "2026")

    def test_given_month_omitted_when_updating_then_month_kept(self):
        b = update_profile(self.board, theme="orange")
        self.assertEqual(b.profile.month, 3)
        self.assertEqual(b.profile.label(), "2026-03")

    def test_given_invalid_values_when_updating_then_value_error(self):
        with self.assertRaises(ValueError):
            update_profile(self.board, month=13)
        with self.assertRaises(ValueError):
            update_profile(self.board, month=0)
        with self.assertRaises(ValueError):
            update_profile(self.board, theme="teal")
        with self.assertRaises(ValueError):
            update_profile(self.board, year="2027")


class TestCollection(unittest.TestCase):
    def test_given_no_boards_when_next_then_default_start_year(self):
        self.assertEqual(next_board([]).profile.year, DEFAULT_START_YEAR)

    def test_given_boards_when_next_then_year_after_latest(self):
        boards = [new_board(2026), new_board(2029), new_board(2027)]
        self.assertEqual(next_board(boards).profile.year, 2030)

    def test_given_mixed_periods_when_sorting_then_newest_first(self):
        a = new_board(2026)
        b = new_board(2026, month=5)
        c = new_board(2027, month=1)
        d = new_board(2025, month=12)
        ordered = sort_for_listing([a, b, c, d])
        self.assertEqual([x.id for x in ordered], [c.id, b.id, a.id, d.id])

    def test_given_active_id_when_resolving_then_match_or_first(self):
        a, b = new_board(2026), new_board(2027)
        self.assertIs(resolve_active([a, b], b.id), b)
        self.assertIs(resolve_active([a, b], "gone"), a)
        self.assertIs(resolve_active([a, b], None), a)
        self.assertIsNone(resolve_active([], "x"))
        self.assertIs(find_board([a, b], b.id), b)
        self.assertIsNone(find_board([a, b], "gone"))

    def test_given_mutation_when_applied_then_updated_at_not_before_created_at(self):
        b = new_board(2026)
        time.sleep(0.002)
        b2 = toggle_board_cell(b, b.items[0].id)
        self.assertGreaterEqual(b2.updated_at, b.created_at)


if __name__ == "__main__":
    unittest.main(verbosity=2)
