import unittest

from arrowcalc.pure.lexical import parse
from arrowcalc.pure.term import Abstraction, Application, Reference


class LambdaTermTestCase(unittest.TestCase):

    def test_str(self):
        cases = {
            "candy": "candy",
            ("a", "=>", "a"): "[a => a]",
            ("f", "x"): "[f x]",
            ("a", "=>", "b", "=>", "a", "b"): "[a => [b => [a b]]]",
            (("a", "=>", "a"), "candy"): "[[a => a] candy]",
            ("a", "b", "c", "d"): "[[a b] [c d]]",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, str(parse(case)), case)

    def test_repr(self):
        self.assertEqual("Abstraction('[a => a]')", repr(parse(["a", "=>", "a"])))
        self.assertEqual("Reference('a')", repr(Reference("a")))

    def test_display(self):
        expected = ("Application(expr='[[a => a] b]', nodes=[\n"
                    "    Abstraction(expr='[a => a]', nodes=[\n"
                    "        Reference(expr='a')\n"
                    "    ]),\n"
                    "    Reference(expr='b')\n"
                    "])")
        self.assertEqual(expected, parse([["a", "=>", "a"], "b"]).display())

    def test_init(self):
        should_raise = [
            lambda: Reference("=>"),
            lambda: Abstraction("", Reference("a")),
            lambda: Abstraction("=>", Reference("a")),
        ]
        for case in should_raise:
            self.assertRaises(ValueError, case)

        term = Abstraction("a", Reference("a"))
        with self.assertRaises(AttributeError):
            term.param = "b"

    def test_eq(self):
        should_pass = [
            (parse(["a", "=>", "a"]), Abstraction("a", Reference("a"))),
            (parse(["f", "x"]), Application(Reference("f"), Reference("x"))),
        ]
        for term, other in should_pass:
            self.assertEqual(term, other)
            self.assertEqual(hash(term), hash(other))

        should_fail = [
            (parse(["a", "=>", "a"]), parse(["b", "=>", "b"])),
            (parse(["f", "x"]), parse(["x", "f"])),
            (Reference("a"), Abstraction("a", Reference("a"))),
            (Reference("a"), "a"),
        ]
        for term, other in should_fail:
            self.assertNotEqual(term, other)

    def test_deep_tree(self):
        term, other = Reference("x"), Reference("x")
        for __ in range(5_000):
            term = Abstraction("x", Application(term, Reference("y")))
            other = Abstraction("x", Application(other, Reference("y")))

        self.assertEqual(term, other)
        self.assertTrue(term.alpha_equals(other))
        self.assertEqual({"y"}, term.free_variables())
        self.assertTrue(str(term).startswith("[x => [[x => "))

    def test_free_variables(self):
        cases = {
            "a": {"a"},
            ("a", "=>", "a"): set(),
            ("a", "=>", "a", "b"): {"b"},
            (("a", "=>", "a"), "a"): {"a"},
            ("f", "=>", ("x", "=>", "f", "x", "y"), "z"): {"y", "z"},
        }
        for case, expected in cases.items():
            self.assertEqual(expected, parse(case).free_variables(), case)

    def test_names(self):
        self.assertEqual({"a", "b", "c"}, parse(["a", "=>", "b", "c"]).names())

    def test_alpha_equals(self):
        should_pass = [
            (["a", "=>", "a"], ["b", "=>", "b"]),
            (["a", "=>", "b", "=>", "a", "b"], ["x", "=>", "y", "=>", "x", "y"]),
            (["a", "=>", "a", "free"], ["b", "=>", "b", "free"]),
            (["a", "=>", "a", "=>", "a"], ["x", "=>", "y", "=>", "y"]),
            ("free", "free"),
        ]
        for case, other in should_pass:
            self.assertTrue(parse(case).alpha_equals(parse(other)), case)

        should_fail = [
            (["a", "=>", "b", "=>", "a"], ["x", "=>", "y", "=>", "y"]),
            (["a", "=>", "a", "free"], ["b", "=>", "b", "other"]),
            (["a", "=>", "b"], ["b", "=>", "b"]),
            (["a", "=>", "a"], "a"),
            ("free", "other"),
        ]
        for case, other in should_fail:
            self.assertFalse(parse(case).alpha_equals(parse(other)), case)


if __name__ == '__main__':
    unittest.main()
