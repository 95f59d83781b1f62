import dataclasses
import unittest
from typing import List, Optional

from bfnasm import CodeGenerator, PatternSet, default_patterns
from bfnasm.patterns import (
    ArithmeticRun,
    Loop,
    Pattern,
    PointerShiftRun,
    PrintRun,
    ReadRun,
    is_read_gap,
    net_delta,
    split_fragments,
)


class FixedLengthPattern(Pattern):
    def __init__(self, name: str, length: int) -> None:
        self.name = name
        self.length = length

    def match(self, sequence: str, start: int = 0) -> Optional[str]:
        return sequence[start : start + self.length] or None

    def translate(self, slice: str, context) -> List[str]:
        return [f"{self.name} {slice}"]


class RecognizerTests(unittest.TestCase):
    def test_print_run_is_anchored_by_output_operators(self) -> None:
        self.assertEqual(PrintRun().match(".+>.-<"), ".+>.")
        self.assertEqual(PrintRun().match(".+>"), ".")
        self.assertEqual(PrintRun().match("..,."), "..")
        self.assertIsNone(PrintRun().match("+."))

    def test_read_run_is_anchored_by_input_operators(self) -> None:
        self.assertEqual(ReadRun().match(",>,.,"), ",>,")
        self.assertEqual(ReadRun().match(",<+"), ",")
        self.assertIsNone(ReadRun().match(">,"))

    def test_read_run_stops_before_unqualified_gap(self) -> None:
        self.assertEqual(ReadRun().match(",>+,>><,"), ",>+,>><,")
        self.assertEqual(ReadRun().match(",>,<<,>,"), ",>,")
        self.assertEqual(ReadRun().match(",+>,"), ",")
        self.assertEqual(ReadRun().match(",,"), ",")
        self.assertEqual(ReadRun().match(",<,>,", 2), ",>,")

    def test_arithmetic_and_shift_runs(self) -> None:
        self.assertEqual(ArithmeticRun().match("++--->"), "++---")
        self.assertEqual(PointerShiftRun().match("><<+"), "><<")
        self.assertIsNone(ArithmeticRun().match(">+"))
        self.assertIsNone(PointerShiftRun().match(""))

    def test_loop_finds_matching_bracket(self) -> None:
        self.assertEqual(Loop().match("[[-]>[+]]+[-]"), "[[-]>[+]]")
        self.assertEqual(Loop().match("+[-]>", 1), "[-]")
        self.assertIsNone(Loop().match("[+"))
        self.assertIsNone(Loop().match("+[]"))

    def test_match_respects_start_offset(self) -> None:
        self.assertEqual(ArithmeticRun().match(">>++<", 2), "++")
        self.assertEqual(PrintRun().match("+..", 1), "..")


class HelperTests(unittest.TestCase):
    def test_split_fragments_isolates_operator(self) -> None:
        self.assertEqual(split_fragments("..+>.", "."), [".", ".", "+>", "."])
        self.assertEqual(split_fragments(",<>,", ","), [",", "<>", ","])

    def test_net_delta(self) -> None:
        self.assertEqual(net_delta("++-+", "+", "-"), 2)
        self.assertEqual(net_delta("<<>", ">", "<"), -1)
        self.assertEqual(net_delta("", ">", "<"), 0)

    def test_read_gap_requires_single_right_shift(self) -> None:
        self.assertTrue(is_read_gap(">"))
        self.assertTrue(is_read_gap(">><"))
        self.assertTrue(is_read_gap(">+-"))
        self.assertFalse(is_read_gap("+>"))
        self.assertFalse(is_read_gap("<"))
        self.assertFalse(is_read_gap(">>"))
        self.assertFalse(is_read_gap(""))


class SelectionTests(unittest.TestCase):
    def test_default_registration_order(self) -> None:
        self.assertEqual(default_patterns().names(), ["print", "read", "arithmetic", "shift", "loop"])

    def test_pattern_set_is_frozen(self) -> None:
        patterns = default_patterns()
        with self.assertRaises(dataclasses.FrozenInstanceError):
            patterns.patterns = ()  # type: ignore[misc]

    def test_longest_match_wins(self) -> None:
        generator = CodeGenerator(PatternSet((FixedLengthPattern("short", 1), FixedLengthPattern("long", 3))))
        match = generator.select("abcd")
        self.assertEqual(match.pattern.name, "long")
        self.assertEqual(match.text, "abc")

    def test_first_registered_wins_ties(self) -> None:
        generator = CodeGenerator(PatternSet((FixedLengthPattern("first", 2), FixedLengthPattern("second", 2))))
        self.assertEqual(generator.select("abcd").pattern.name, "first")

    def test_select_with_default_patterns(self) -> None:
        generator = CodeGenerator()
        self.assertEqual(generator.select("+++>").pattern.name, "arithmetic")
        self.assertEqual(generator.select("[-]+").text, "[-]")
        self.assertEqual(generator.select(".>.").pattern.name, "print")
        self.assertIsNone(generator.select("]"))

    def test_generate_uses_selected_translations_in_order(self) -> None:
        generator = CodeGenerator(PatternSet((FixedLengthPattern("pair", 2),)))
        self.assertEqual(generator.generate("abcde"), ["pair ab", "pair cd", "pair e"])


if __name__ == "__main__":
    unittest.main()
