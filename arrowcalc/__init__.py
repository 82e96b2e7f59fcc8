"""Untyped lambda calculus evaluator for bracketed-token (JSON) programs.

For reference:
- "pure": surface syntax, expression trees and reduction (`arrowcalc.pure`)
- "lang": arrowcalc files, sessions, the shell and error reporting (`arrowcalc.lang`)

Basic program flow:
    1. Translator: checks the program value is nested lists of strings and builds a token tree
    2. Desugarer: resolves arrows and application order into a curried lambda calculus tree
    3. Reduction: one pass per `reduce` call, repeated while `has_pending_work` reports a redex
"""

from arrowcalc.lang.error import (ArrowAtStart, DepthLimitExceeded, DesugarError, EmptyExpression, GenericException,
                                  LimitExceeded, MalformedInput, NonIdentifierParameter, StepLimitExceeded)
from arrowcalc.pure import (ARROW, Abstraction, Application, LambdaTerm, Reducer, Reference, Sequence, Token, decode,
                            desugar, has_pending_work, loads, parse, parse_json, reduce, substitute, translate)
