"""Navigation engine behavior: block stack, jump history, and undo laws."""

from __future__ import annotations

import unittest

from irexplorer.model import Block, Instruction, InstructionKind, LiteralKind, ReferenceKind, Span
from irexplorer.navigation import (
    AtRoot,
    EnteredNestedBlock,
    IndexOutOfRange,
    InvalidGotoInput,
    LocalGoto,
    Navigator,
    NavigationError,
    NoHistory,
    NoTarget,
    NothingSelected,
    ResolutionFailed,
    parse_goto_index,
)
from irexplorer.resolvers import ResolutionError


class FakeResolver:
    def __init__(self, blocks: dict[object, Block] | None = None) -> None:
        self.blocks = dict(blocks or {})
        self.calls: list[tuple[object, ReferenceKind]] = []

    def resolve(self, identifier: object, kind: ReferenceKind) -> Block:
        self.calls.append((identifier, kind))
        try:
            return self.blocks[identifier]
        except KeyError:
            raise ResolutionError(f"unknown {kind.value} {identifier!r}") from None


def _other(text: str = "noop") -> Instruction:
    return Instruction(kind=InstructionKind.OTHER, text=text)


def _block(block_id: object, instructions: list[Instruction], source: str = "x = 1\n") -> Block:
    return Block(
        block_id=block_id,
        span=Span(0, len(source.encode("utf-8"))),
        instructions=tuple(instructions),
        source=source,
    )


def _entry_with_call() -> tuple[Block, FakeResolver]:
    callee = _block("callee", [_other("a"), _other("b")])
    entry = _block(
        "entry",
        [
            _other("load"),
            Instruction(kind=InstructionKind.CALL, text="call callee", target="callee"),
            _other("return"),
        ],
    )
    return entry, FakeResolver({"callee": callee})


class NavigatorForwardJumpTests(unittest.TestCase):
    def test_call_pushes_resolved_definition_and_records_history(self) -> None:
        entry, resolver = _entry_with_call()
        navigator = Navigator(entry, resolver)
        entry.selected = 1

        navigator.jump_forward()

        self.assertEqual(navigator.depth, 2)
        self.assertEqual(navigator.current.block_id, "callee")
        self.assertEqual(navigator.history, [EnteredNestedBlock()])
        self.assertEqual(resolver.calls, [("callee", ReferenceKind.DEFINITION)])

    def test_nested_literal_resolves_as_block_reference(self) -> None:
        nested = _block(7, [_other()])
        entry = _block(
            "entry",
            [
                Instruction(
                    kind=InstructionKind.LOAD_LITERAL,
                    text="load-literal closure(7)",
                    literal_kind=LiteralKind.CLOSURE,
                    target=7,
                )
            ],
        )
        resolver = FakeResolver({7: nested})
        navigator = Navigator(entry, resolver)

        navigator.jump_forward()

        self.assertIs(navigator.current, nested)
        self.assertEqual(resolver.calls, [(7, ReferenceKind.BLOCK)])

    def test_branch_moves_selection_within_block(self) -> None:
        entry = _block(
            "entry",
            [
                Instruction(kind=InstructionKind.BRANCH, text="jump 2", branch_target=2),
                _other(),
                _other(),
            ],
        )
        navigator = Navigator(entry, FakeResolver())

        navigator.jump_forward()

        self.assertEqual(navigator.depth, 1)
        self.assertEqual(entry.selected, 2)
        self.assertEqual(navigator.history, [LocalGoto(previous_index=0)])

    def test_branch_target_outside_block_is_no_target(self) -> None:
        entry = _block("entry", [Instruction(kind=InstructionKind.BRANCH, text="jump 9", branch_target=9)])
        navigator = Navigator(entry, FakeResolver())

        with self.assertRaises(NoTarget):
            navigator.jump_forward()

        self.assertEqual(entry.selected, 0)
        self.assertEqual(navigator.history, [])

    def test_plain_instruction_has_no_target(self) -> None:
        navigator = Navigator(_block("entry", [_other()]), FakeResolver())

        with self.assertRaises(NoTarget):
            navigator.jump_forward()
        self.assertEqual(navigator.history, [])

    def test_plain_literal_has_no_target(self) -> None:
        literal = Instruction(kind=InstructionKind.LOAD_LITERAL, text="load 1", literal_kind=LiteralKind.PLAIN)
        navigator = Navigator(_block("entry", [literal]), FakeResolver())

        with self.assertRaises(NoTarget):
            navigator.jump_forward()

    def test_empty_block_reports_nothing_selected(self) -> None:
        navigator = Navigator(_block("entry", []), FakeResolver())

        with self.assertRaises(NothingSelected):
            navigator.jump_forward()

    def test_stale_selection_reports_nothing_selected(self) -> None:
        entry = _block("entry", [_other()])
        entry.selected = 5
        navigator = Navigator(entry, FakeResolver())

        with self.assertRaises(NothingSelected):
            navigator.jump_forward()

    def test_resolution_failure_leaves_state_unchanged(self) -> None:
        entry = _block(
            "entry",
            [Instruction(kind=InstructionKind.CALL, text="call missing", target="missing")],
        )
        navigator = Navigator(entry, FakeResolver())

        with self.assertRaises(ResolutionFailed) as caught:
            navigator.jump_forward()

        self.assertIn("missing", caught.exception.reason)
        self.assertTrue(str(caught.exception).startswith("can't resolve block: "))
        self.assertEqual(navigator.depth, 1)
        self.assertEqual(navigator.history, [])

    def test_call_without_target_is_no_target(self) -> None:
        entry = _block("entry", [Instruction(kind=InstructionKind.CALL, text="call ?")])
        resolver = FakeResolver()
        navigator = Navigator(entry, resolver)

        with self.assertRaises(NoTarget):
            navigator.jump_forward()
        self.assertEqual(resolver.calls, [])


class NavigatorUndoTests(unittest.TestCase):
    def test_call_round_trip_restores_depth_history_and_selection(self) -> None:
        entry, resolver = _entry_with_call()
        navigator = Navigator(entry, resolver)
        navigator.goto(1)
        history_before = len(navigator.history)

        navigator.jump_forward()
        self.assertEqual(navigator.depth, 2)
        self.assertEqual(len(navigator.history), history_before + 1)

        navigator.jump_backward()
        self.assertEqual(navigator.depth, 1)
        self.assertEqual(len(navigator.history), history_before)
        self.assertEqual(navigator.current.selected, 1)

    def test_entry_scenario_with_three_instructions(self) -> None:
        entry, resolver = _entry_with_call()
        entry.selected = 1
        navigator = Navigator(entry, resolver)

        navigator.jump_forward()
        self.assertEqual((navigator.depth, len(navigator.history)), (2, 1))

        navigator.jump_backward()
        self.assertEqual((navigator.depth, len(navigator.history)), (1, 0))
        self.assertEqual(navigator.current.selected, 1)

    def test_nested_block_keeps_its_own_cursor(self) -> None:
        entry, resolver = _entry_with_call()
        entry.selected = 1
        navigator = Navigator(entry, resolver)

        navigator.jump_forward()
        navigator.move_selection(1)
        self.assertEqual(navigator.current.selected, 1)
        navigator.jump_backward()

        self.assertEqual(entry.selected, 1)
        self.assertEqual(resolver.blocks["callee"].selected, 1)

    def test_branch_round_trip_restores_selection(self) -> None:
        entry = _block(
            "entry",
            [
                _other(),
                Instruction(kind=InstructionKind.BRANCH, text="jump 0", branch_target=0),
                _other(),
            ],
        )
        entry.selected = 1
        navigator = Navigator(entry, FakeResolver())

        navigator.jump_forward()
        self.assertEqual(entry.selected, 0)
        navigator.jump_backward()

        self.assertEqual(entry.selected, 1)
        self.assertEqual(navigator.history, [])

    def test_goto_then_backward_restores_selection_for_every_index(self) -> None:
        entry = _block("entry", [_other() for _ in range(4)])
        navigator = Navigator(entry, FakeResolver())
        for start in range(4):
            for target in range(4):
                entry.selected = start
                navigator.goto(target)
                self.assertEqual(entry.selected, target)
                navigator.jump_backward()
                self.assertEqual(entry.selected, start)
                self.assertEqual(navigator.history, [])

    def test_backward_with_empty_history_changes_nothing(self) -> None:
        entry, resolver = _entry_with_call()
        entry.selected = 2
        navigator = Navigator(entry, resolver)

        with self.assertRaises(NoHistory):
            navigator.jump_backward()

        self.assertEqual(navigator.depth, 1)
        self.assertEqual(navigator.history, [])
        self.assertEqual(entry.selected, 2)

    def test_entered_record_at_root_is_consumed_and_reports_at_root(self) -> None:
        navigator = Navigator(_block("entry", [_other()]), FakeResolver())
        navigator.history.append(EnteredNestedBlock())

        with self.assertRaises(AtRoot):
            navigator.jump_backward()

        self.assertEqual(navigator.history, [])
        self.assertEqual(navigator.depth, 1)

    def test_mixed_history_unwinds_in_reverse_order(self) -> None:
        entry, resolver = _entry_with_call()
        navigator = Navigator(entry, resolver)
        navigator.goto(1)
        navigator.jump_forward()
        navigator.goto(1)

        navigator.jump_backward()
        self.assertEqual((navigator.depth, navigator.current.selected), (2, 0))
        navigator.jump_backward()
        self.assertEqual((navigator.depth, navigator.current.selected), (1, 1))
        navigator.jump_backward()
        self.assertEqual((navigator.depth, navigator.current.selected), (1, 0))
        with self.assertRaises(NoHistory):
            navigator.jump_backward()


class NavigatorGotoAndMoveTests(unittest.TestCase):
    def test_goto_out_of_range_changes_nothing(self) -> None:
        entry, resolver = _entry_with_call()
        entry.selected = 2
        navigator = Navigator(entry, resolver)

        for index in (99, 3, -1):
            with self.assertRaises(IndexOutOfRange):
                navigator.goto(index)

        self.assertEqual(navigator.depth, 1)
        self.assertEqual(navigator.history, [])
        self.assertEqual(entry.selected, 2)

    def test_goto_without_prior_selection_is_not_recorded(self) -> None:
        entry = _block("entry", [_other(), _other()])
        entry.selected = None
        navigator = Navigator(entry, FakeResolver())

        navigator.goto(1)

        self.assertEqual(entry.selected, 1)
        self.assertEqual(navigator.history, [])

    def test_move_selection_saturates_and_is_never_recorded(self) -> None:
        entry = _block("entry", [_other() for _ in range(3)])
        navigator = Navigator(entry, FakeResolver())

        for delta in (1, 1, 1, 1, 5, -1, -1, -1, -10, 2, -3):
            navigator.move_selection(delta)
            self.assertGreaterEqual(entry.selected, 0)
            self.assertLessEqual(entry.selected, 2)
            self.assertEqual(navigator.history, [])

        navigator.move_selection(10)
        self.assertEqual(entry.selected, 2)
        navigator.move_selection(-10)
        self.assertEqual(entry.selected, 0)

    def test_move_selection_on_empty_block_is_noop(self) -> None:
        entry = _block("entry", [])
        navigator = Navigator(entry, FakeResolver())

        navigator.move_selection(1)

        self.assertIsNone(entry.selected)

    def test_move_selection_without_selection_picks_an_end(self) -> None:
        entry = _block("entry", [_other() for _ in range(3)])
        navigator = Navigator(entry, FakeResolver())

        entry.selected = None
        navigator.move_selection(1)
        self.assertEqual(entry.selected, 0)

        entry.selected = None
        navigator.move_selection(-1)
        self.assertEqual(entry.selected, 2)


class GotoInputParsingTests(unittest.TestCase):
    def test_parses_non_negative_integers_with_surrounding_space(self) -> None:
        self.assertEqual(parse_goto_index("0"), 0)
        self.assertEqual(parse_goto_index(" 42 "), 42)

    def test_rejects_everything_else(self) -> None:
        for text in ("", "  ", "-1", "+1", "1.5", "abc", "٣"):
            with self.subTest(text=text):
                with self.assertRaises(InvalidGotoInput):
                    parse_goto_index(text)

    def test_navigation_errors_share_a_base_class(self) -> None:
        for error in (NothingSelected(), NoTarget(), AtRoot(), NoHistory(), IndexOutOfRange(), InvalidGotoInput()):
            self.assertIsInstance(error, NavigationError)
            self.assertTrue(str(error))


if __name__ == "__main__":
    unittest.main()
