"""Bracketed-token surface syntax: token tree generation and desugaring into lambda calculus.

The `pure` directory contains pure lambda calculus parsing and reduction- not sufficient for arrowcalc files, which are
handled by `lang`.

A program is a nested list of strings, usually written as JSON. Loosely, the grammar encoded in that shape is

```
<expr> ::= <name>                       ; any string except "=>"
         | "[" <expr> "]"               ; grouping, no semantic effect
         | "[" <name> "=>" <expr>+ "]"  ; "abstraction"
                                        ; - body is greedy: ["a", "=>", "b", "=>", "a", "b"] = λa.λb.(a b)
         | "[" <expr> <expr>+ "]"       ; "application"
                                        ; - the first two elements pair up and the rest is desugared on its own:
                                        ;   ["a", "b", "c", "d"] = ((a b) (c d))
                                        ; - an abstraction in the tail is never split apart:
                                        ;   ["a", "b", "c", "d", "=>", "d", "d"] = ((a b) (c λd.(d d)))
```

Note that the application rule is not plain left association. Fully bracketed programs read the same either way, and
the tail rule above is a fixed property of the syntax.
"""

import json
from dataclasses import dataclass

from arrowcalc.lang.error import ArrowAtStart, EmptyExpression, MalformedInput, NonIdentifierParameter
from arrowcalc.pure.term import ARROW, Abstraction, Application, Reference

# instructions of the translate/desugar work stacks
_VISIT = "visit"
_SEQUENCE = "sequence"
_FOLD = "fold"


@dataclass(frozen=True)
class Token:
    """A single string of the input: a name or the arrow."""
    text: str

    @property
    def is_arrow(self):
        return self.text == ARROW

    def to_value(self):
        return self.text

    def __str__(self):
        return json.dumps(self.text, ensure_ascii=False)


@dataclass(frozen=True)
class Sequence:
    """A bracketed list of token trees."""
    items: tuple

    is_arrow = False

    def to_value(self):
        """Inverse of translate."""
        return [item.to_value() for item in self.items]

    def __str__(self):
        return json.dumps(self.to_value(), ensure_ascii=False)


def translate(value):
    """Converts a nested list/tuple of strings to a token tree. Raises MalformedInput on any other value type."""
    results = []
    stack = [(_VISIT, value)]
    while stack:
        op, item = stack.pop()

        if op == _SEQUENCE:
            start = len(results) - item  # item is the number of translated children
            children = tuple(results[start:])
            del results[start:]
            results.append(Sequence(children))
        elif isinstance(item, str):
            results.append(Token(item))
        elif isinstance(item, (list, tuple)):
            stack.append((_SEQUENCE, len(item)))
            stack.extend((_VISIT, child) for child in reversed(item))
        else:
            raise MalformedInput("'{}' is neither a sequence nor a string", repr(item), diagnosis=False)

    return results.pop()


def decode(text):
    """Decodes JSON text without translating it. Raises MalformedInput pointing at the first offending character."""
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedInput("'{}' is not valid JSON (" + exc.msg + ")", text, start=exc.pos, end=exc.pos + 1)


def loads(text):
    """Decodes JSON text and translates it."""
    return translate(decode(text))


def desugar(tree):
    """Converts a token tree to a curried LambdaTerm. Raises a DesugarError if tree has no lambda calculus reading.

    Each bracketed list is first read left to right into a chain of frames (abstractions and applications waiting
    for the rest of the list) plus the operands those frames need, then folded from right to left once every operand
    is desugared. Neither list length nor nesting depth costs native recursion.
    """
    results = []
    stack = [(_VISIT, tree)]
    while stack:
        op, item = stack.pop()

        if op == _FOLD:
            results.append(_fold(item, results))
        elif isinstance(item, Token):
            if item.is_arrow:
                raise ArrowAtStart("'{}' cannot start an expression", ARROW)
            results.append(Reference(item.text))
        else:
            frames, operands = _read_list(item.items)
            stack.append((_FOLD, frames))
            stack.extend((_VISIT, operand) for operand in reversed(operands))

    return results.pop()


def parse(value):
    """Translates and desugars a program value."""
    return desugar(translate(value))


def parse_json(text):
    """Translates and desugars a program written as JSON text."""
    return desugar(loads(text))


def _read_list(items):
    """Returns the frames of items and, in order, the token trees they take as operands. The last operand is the
    innermost term of the chain.
    """
    frames, operands = [], []
    i, n = 0, len(items)
    while True:
        if i == n:
            raise EmptyExpression("empty expression '{}' not allowed", "[]")

        if items[i].is_arrow:
            rest = Sequence(items[i:])
            raise ArrowAtStart("'{}' cannot start an expression", rest, start=1, end=1 + len(str(items[i])))

        if n - i == 1:
            operands.append(items[i])
            return frames, operands

        if items[i + 1].is_arrow:
            param = items[i]
            if not isinstance(param, Token) or not param.text:
                msg = "functions can only take identifiers as arguments, not '{}'"
                raise NonIdentifierParameter(msg, param)
            frames.append((Abstraction, param.text))
            i += 2
            if n - i == 1:
                # a single trailing element is the body as is
                operands.append(items[i])
                return frames, operands
            continue

        if n - i == 2 or items[i + 2].is_arrow:
            # a lambda is coming: keep it whole as the argument
            frames.append((Application, 1))
            operands.append(items[i])
            i += 1
            continue

        frames.append((Application, 2))
        operands.extend(items[i:i + 2])
        i += 2


def _fold(frames, results):
    """Pops the operands of frames off results and builds the term they describe."""
    term = results.pop()
    for kind, value in reversed(frames):
        if kind is Abstraction:
            term = Abstraction(value, term)
        elif value == 1:
            term = Application(results.pop(), term)
        else:
            arg = results.pop()
            term = Application(Application(results.pop(), arg), term)
    return term
