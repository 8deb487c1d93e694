import json
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest import mock

from pylexa import dfa as dfa_module
from pylexa import labels
from pylexa.analysis import Analyzer, analyze, default_analyzer
from pylexa.dfa import DFA, subset_construction
from pylexa.labels import Label
from pylexa.lexer import tokenize
from pylexa.nfa import NFA
from pylexa.tokens import TOKEN_PATTERNS, Token, TokenKind, build_token_nfa
from pylexa._private import util
from pylexa._private.exceptions import AutomatonError, LexicalError


def fragment_accepts(nfa, fragment, word):
    """Simulate the NFA directly: is fragment.accept reachable on word?"""
    current = nfa.epsilon_closure([fragment.start])
    for c in word:
        current = nfa.epsilon_closure(nfa.move(current, c))
    return fragment.accept in current


class TestLabels(unittest.TestCase):
    """Test the transition label predicates"""
    def test_literal(self):
        self.assertTrue(Label.literal('+').matches('+'))
        self.assertFalse(Label.literal('+').matches('-'))
        with self.assertRaises(ValueError):
            Label.literal('ab')

    def test_classes(self):
        self.assertTrue(labels.DIGIT.matches('7'))
        self.assertFalse(labels.DIGIT.matches('a'))
        self.assertTrue(labels.LETTER.matches('Q'))
        self.assertFalse(labels.LETTER.matches('é'))
        self.assertFalse(labels.LETTER.matches('_'))
        self.assertTrue(labels.ALNUM_UNDERSCORE.matches('_'))
        self.assertTrue(labels.ALNUM_UNDERSCORE.matches('9'))
        self.assertFalse(labels.ALNUM_UNDERSCORE.matches('-'))

    def test_epsilon(self):
        self.assertTrue(labels.EPSILON.is_epsilon)
        self.assertFalse(labels.EPSILON.matches('a'))
        self.assertFalse(labels.EPSILON.matches(''))


class TestNFA(unittest.TestCase):
    """Test the Thompson combinators"""
    def test_atomic(self):
        nfa = NFA()
        f = nfa.atomic(Label.literal('a'))
        self.assertNotEqual(f.start, f.accept)
        self.assertEqual(len(nfa), 2)
        self.assertEqual(len(list(nfa.all_transitions())), 1)
        self.assertTrue(fragment_accepts(nfa, f, "a"))
        self.assertFalse(fragment_accepts(nfa, f, ""))
        self.assertFalse(fragment_accepts(nfa, f, "aa"))

    def test_concat(self):
        nfa = NFA()
        f = nfa.concat(nfa.atomic(Label.literal('a')), nfa.atomic(Label.literal('b')))
        self.assertEqual(len(nfa), 4)
        self.assertTrue(fragment_accepts(nfa, f, "ab"))
        self.assertFalse(fragment_accepts(nfa, f, "a"))
        self.assertFalse(fragment_accepts(nfa, f, "ba"))

    def test_union(self):
        nfa = NFA()
        f = nfa.union(nfa.atomic(Label.literal('a')), nfa.atomic(Label.literal('b')))
        self.assertEqual(len(nfa), 6)
        epsilons = [t for _, t in nfa.all_transitions() if t.label.is_epsilon]
        self.assertEqual(len(epsilons), 4)
        self.assertTrue(fragment_accepts(nfa, f, "a"))
        self.assertTrue(fragment_accepts(nfa, f, "b"))
        self.assertFalse(fragment_accepts(nfa, f, "ab"))

    def test_star(self):
        nfa = NFA()
        f = nfa.star(nfa.atomic(Label.literal('a')))
        for word in ("", "a", "aaaa"):
            self.assertTrue(fragment_accepts(nfa, f, word))
        self.assertFalse(fragment_accepts(nfa, f, "ab"))

    def test_optional(self):
        nfa = NFA()
        f = nfa.optional(nfa.atomic(Label.literal('a')))
        self.assertTrue(fragment_accepts(nfa, f, ""))
        self.assertTrue(fragment_accepts(nfa, f, "a"))
        self.assertFalse(fragment_accepts(nfa, f, "aa"))

    def test_plus(self):
        nfa = NFA()
        f = nfa.plus(nfa.atomic(labels.DIGIT))
        self.assertFalse(fragment_accepts(nfa, f, ""))
        self.assertTrue(fragment_accepts(nfa, f, "1"))
        self.assertTrue(fragment_accepts(nfa, f, "2024"))
        self.assertFalse(fragment_accepts(nfa, f, "20a"))

    def test_combinators_do_not_change_fragments(self):
        nfa = NFA()
        a = nfa.atomic(Label.literal('a'))
        nfa.union(a, nfa.atomic(Label.literal('b')))
        self.assertTrue(fragment_accepts(nfa, a, "a"))
        self.assertFalse(fragment_accepts(nfa, a, "b"))

    def test_literal(self):
        nfa = NFA()
        f = nfa.literal("let")
        self.assertTrue(fragment_accepts(nfa, f, "let"))
        self.assertFalse(fragment_accepts(nfa, f, "le"))
        with self.assertRaises(ValueError):
            nfa.literal("")

    def test_token_nfa(self):
        nfa = build_token_nfa()
        self.assertEqual(nfa.start, 0)
        self.assertEqual(set(nfa.accept_tokens.values()), set(TokenKind) - {TokenKind.EOF})
        self.assertFalse(set(nfa.accept_tokens) & nfa.epsilon_closure([nfa.start]))
        nfa.verify()

    def test_verify(self):
        nfa = build_token_nfa()
        nfa.add_transition(0, len(nfa) + 10)
        with self.assertRaises(AutomatonError):
            nfa.verify()
        with self.assertRaises(AutomatonError):
            subset_construction(nfa)
        with self.assertRaises(AutomatonError):
            NFA().verify()

    def test_export(self):
        nfa = build_token_nfa()
        d = nfa.todict()
        self.assertEqual(d["states"], len(nfa))
        self.assertIn("ID", d["accept"].values())
        json.dumps(d)
        self.assertIn("@0@", str(nfa))


class TestDFA(unittest.TestCase):
    """Test the subset construction"""
    @classmethod
    def setUpClass(cls):
        cls.dfa = subset_construction(build_token_nfa())

    def test_start_not_accepting(self):
        self.assertFalse(self.dfa.start_is_accepting)
        self.assertIsNone(self.dfa.accepts(""))

    def test_accepts(self):
        self.assertEqual(self.dfa.accepts("abc_1"), TokenKind.ID)
        self.assertEqual(self.dfa.accepts("42"), TokenKind.NUMBER)
        self.assertEqual(self.dfa.accepts("123.45"), TokenKind.NUMBER)
        self.assertEqual(self.dfa.accepts(" \t "), TokenKind.WS)
        self.assertEqual(self.dfa.accepts("/"), TokenKind.SLASH)
        self.assertIsNone(self.dfa.accepts("123."))
        self.assertIsNone(self.dfa.accepts("_a"))
        self.assertIsNone(self.dfa.accepts("++"))

    def test_deterministic(self):
        other = subset_construction(build_token_nfa())
        self.assertEqual(len(self.dfa), len(other))
        self.assertEqual(self.dfa.signature(), other.signature())
        self.assertEqual(self.dfa.accept_states, other.accept_states)

    def test_unique_subsets(self):
        subsets = [s.nfa_states for s in self.dfa.states]
        self.assertEqual(len(subsets), len(set(subsets)))
        for s in subsets:
            self.assertEqual(list(s), sorted(s))

    def test_accepting_iff_tokens(self):
        for s in self.dfa.states:
            self.assertEqual(s.accept, len(s.tokens) > 0)

    def test_bounded_alphabet(self):
        self.assertEqual(len(self.dfa.alphabet), 128)
        for s in self.dfa.states:
            self.assertTrue(all(ord(c) < 128 for c in s.transitions))
        small = DFA.from_nfa(build_token_nfa(), alphabet="0123456789")
        self.assertEqual(small.accepts("12"), TokenKind.NUMBER)
        self.assertIsNone(small.accepts("1.2"))

    def test_lowest_ordinal_wins(self):
        # 'x' is both an identifier and (here) a PLUS; ID is declared first in TokenKind
        patterns = {TokenKind.PLUS: lambda nfa: nfa.atomic(Label.literal('x')),
                    TokenKind.ID: TOKEN_PATTERNS[TokenKind.ID]}
        dfa = subset_construction(build_token_nfa(patterns))
        state = dfa.transition(dfa.start, 'x')
        self.assertEqual(set(dfa.states[state].tokens), {TokenKind.ID, TokenKind.PLUS})
        self.assertEqual(dfa.accepts("x"), TokenKind.ID)
        self.assertEqual([t.kind for t in tokenize(dfa, "x")], [TokenKind.ID, TokenKind.EOF])

    def test_empty_pattern_anomaly(self):
        patterns = {TokenKind.WS: lambda nfa: nfa.star(nfa.atomic(Label.literal(' ')))}
        with self.assertLogs(dfa_module.logger, level="WARNING"):
            dfa = subset_construction(build_token_nfa(patterns))
        self.assertTrue(dfa.start_is_accepting)

    def test_export(self):
        d = self.dfa.todict()
        self.assertEqual(d["start"], 0)
        self.assertEqual(d["states"], len(self.dfa))
        self.assertEqual(set(d["accept"]), set(self.dfa.accept_states))
        json.dumps(d)
        self.assertTrue(str(self.dfa).startswith("0\t"))


class TestLexer(unittest.TestCase):
    """Test maximal-munch tokenization"""
    @classmethod
    def setUpClass(cls):
        cls.dfa = subset_construction(build_token_nfa())

    def test_expression(self):
        tokens = tokenize(self.dfa, "a + b*2")
        self.assertEqual([t.kind for t in tokens],
                         [TokenKind.ID, TokenKind.PLUS, TokenKind.ID, TokenKind.STAR,
                          TokenKind.NUMBER, TokenKind.EOF])
        self.assertEqual([t.lexeme for t in tokens], ["a", "+", "b", "*", "2", "$"])
        self.assertEqual([t.offset for t in tokens], [0, 2, 4, 5, 6, 7])

    def test_maximal_munch(self):
        tokens = tokenize(self.dfa, "123.45")
        self.assertEqual(tokens, [Token(TokenKind.NUMBER, "123.45", 0), Token(TokenKind.EOF, "$", 6)])
        tokens = tokenize(self.dfa, "count_2")
        self.assertEqual(len(tokens), 2)
        self.assertEqual(tokens[0].lexeme, "count_2")

    def test_adjacent_tokens(self):
        tokens = tokenize(self.dfa, "12ab")
        self.assertEqual([str(t) for t in tokens], ["NUMBER(12)", "ID(ab)", "EOF"])

    def test_empty(self):
        self.assertEqual(tokenize(self.dfa, ""), [Token(TokenKind.EOF, "$", 0)])

    def test_whitespace(self):
        self.assertEqual([t.kind for t in tokenize(self.dfa, " \t ")], [TokenKind.EOF])
        tokens = tokenize(self.dfa, "a b", keep_whitespace=True)
        self.assertEqual([t.kind for t in tokens], [TokenKind.ID, TokenKind.WS, TokenKind.ID, TokenKind.EOF])

    def test_lexical_error(self):
        with self.assertRaises(LexicalError) as cm:
            tokenize(self.dfa, "@")
        self.assertEqual(cm.exception.offset, 0)
        self.assertEqual(cm.exception.character, "@")
        with self.assertRaises(LexicalError) as cm:
            tokenize(self.dfa, "a + @")
        self.assertEqual(cm.exception.offset, 4)

    def test_dangling_dot(self):
        # "123" is the longest match; nothing starts with '.'
        with self.assertRaises(LexicalError) as cm:
            tokenize(self.dfa, "123.")
        self.assertEqual(cm.exception.offset, 3)

    def test_outside_alphabet(self):
        with self.assertRaises(LexicalError):
            tokenize(self.dfa, "é")
        with self.assertRaises(LexicalError):
            tokenize(self.dfa, "a\nb")


class TestAnalysis(unittest.TestCase):
    """Test the tokenize / validate / parse pipeline"""
    def test_accepted(self):
        for text in ("a+b", "12*(x-3)", "a + b*2", "(-3)", "x / (y + 2.5)"):
            result = analyze(text)
            self.assertTrue(result.ok, text)

    def test_end_to_end(self):
        result = analyze("a + b*2")
        self.assertEqual([str(t) for t in result.tokens],
                         ["ID(a)", "PLUS", "ID(b)", "STAR", "NUMBER(2)", "EOF"])
        self.assertTrue(result.validation.valid)
        self.assertTrue(result.parse_accepted)
        self.assertIsNone(result.parse_error)
        self.assertEqual(result.steps[-1].describe(), "accept")

    def test_unary_divergence(self):
        result = analyze("-3")
        self.assertFalse(result.validation.valid)
        self.assertTrue(result.parse_accepted)
        self.assertFalse(result.ok)

    def test_unmatched_paren(self):
        result = analyze("(a+b")
        self.assertFalse(result.validation.valid)
        self.assertIn("opening parenthesis", result.validation.message)
        self.assertFalse(result.parse_accepted)
        self.assertIsNotNone(result.parse_error)

    def test_lexical_failure(self):
        result = analyze("a @ b")
        self.assertFalse(result.tokenized)
        self.assertEqual(result.tokens, [])
        self.assertIsNone(result.validation)
        self.assertFalse(result.ok)

    def test_shared_automata(self):
        self.assertIs(default_analyzer(), default_analyzer())
        analyzer = Analyzer(dfa=default_analyzer().dfa)
        self.assertIs(analyzer.dfa, default_analyzer().dfa)
        parser = analyzer.parser(analyzer.tokenize("a*b"))
        self.assertTrue(parser.parse_all())


class TestRendering(unittest.TestCase):
    """Test graphviz diagrams and their helpers"""
    def test_char_ranges(self):
        self.assertEqual(util.char_ranges(set("0123456789")), "0-9")
        self.assertEqual(util.char_ranges({"a", "b"}), "a, b")
        self.assertEqual(util.char_ranges(set("abc_")), "_, a-c")
        self.assertEqual(util.printable(" "), "' '")
        self.assertEqual(util.printable("\t"), "\\t")

    @unittest.skipUnless(util.check_graphviz_installed(), "graphviz executable not installed")
    def test_view(self):
        analyzer = default_analyzer()
        g = analyzer.dfa.view(show_nfa_states=True)
        self.assertIn("doublecircle", g.source)
        self.assertIn("NUMBER", g.source)
        g = analyzer.nfa.view(show_alphabet=True)
        self.assertIn("ϵ", g.source)
        self.assertEqual(g.source.count("rankdir"), 1)

    @unittest.skipUnless(util.check_graphviz_installed(), "graphviz executable not installed")
    def test_render(self):
        """Render the DFA to a file without opening a viewer."""
        with TemporaryDirectory() as tempdir:
            path = Path(tempdir)
            out = default_analyzer().dfa.render(view=False, filename=str(path / "dfa"), format="svg")
            self.assertEqual(Path(out), path / "dfa.svg")
            self.assertTrue((path / "dfa.svg").exists())
            self.assertFalse((path / "dfa").exists())

    @unittest.skipUnless(util.check_graphviz_installed(), "graphviz executable not installed")
    def test_show(self):
        with mock.patch("IPython.display.display") as display:
            default_analyzer().nfa.show(show_alphabet=True)
        display.assert_called_once()
        self.assertIn("labels:", display.call_args[0][0].source)


if __name__ == "__main__":
    unittest.main()
