import unittest

from bfnasm import UnclosedBracket, UnknownOperator, UnopenedBracket, ValidationError, validate
from bfnasm.validator import find_error, is_valid


class ValidatorAcceptsTests(unittest.TestCase):
    def test_empty_program(self) -> None:
        self.assertIsNone(validate(""))

    def test_every_operator(self) -> None:
        self.assertIsNone(validate("><+-.,[]"))

    def test_nested_and_neighbouring_loops(self) -> None:
        self.assertTrue(is_valid("+[>[-]<[[,.]]-][]"))


class ValidatorRejectsTests(unittest.TestCase):
    def test_unknown_operator_at_start(self) -> None:
        with self.assertRaises(UnknownOperator) as ctx:
            validate("x")
        self.assertEqual(ctx.exception.character, "x")
        self.assertEqual(ctx.exception.index, 0)

    def test_unknown_operator_reports_its_own_index(self) -> None:
        with self.assertRaises(UnknownOperator) as ctx:
            validate("++[-]a+")
        self.assertEqual(ctx.exception.index, 5)
        self.assertEqual(ctx.exception.character, "a")

    def test_unknown_operator_fails_before_bracket_checks(self) -> None:
        with self.assertRaises(UnknownOperator) as ctx:
            validate("[ ")
        self.assertEqual(ctx.exception.index, 1)

    def test_unopened_bracket(self) -> None:
        with self.assertRaises(UnopenedBracket) as ctx:
            validate("+]")
        self.assertEqual(ctx.exception.index, 1)

    def test_unopened_bracket_after_balanced_pair(self) -> None:
        with self.assertRaises(UnopenedBracket) as ctx:
            validate("[]]")
        self.assertEqual(ctx.exception.index, 2)

    def test_unclosed_bracket(self) -> None:
        with self.assertRaises(UnclosedBracket) as ctx:
            validate("[[+]")
        self.assertEqual(ctx.exception.index, 0)

    def test_unclosed_reports_most_recent_open_bracket(self) -> None:
        with self.assertRaises(UnclosedBracket) as ctx:
            validate("[+[-")
        self.assertEqual(ctx.exception.index, 2)

    def test_errors_share_base_class(self) -> None:
        for program in ("?", "]", "["):
            with self.subTest(program=program):
                with self.assertRaises(ValidationError):
                    validate(program)


class FindErrorTests(unittest.TestCase):
    def test_returns_none_for_valid_program(self) -> None:
        self.assertIsNone(find_error("+[-]"))

    def test_returns_structured_error(self) -> None:
        error = find_error("+]")
        self.assertIsInstance(error, UnopenedBracket)
        self.assertEqual(
            error.as_dict(),
            {
                "kind": "unopened_bracket",
                "index": 1,
                "character": "]",
                "message": "Bracket at index 1 is not opened",
            },
        )


if __name__ == "__main__":
    unittest.main()
