"""Statements of arrowcalc files, a shallow wrapper around the pure surface syntax. Note that this module does not
provide input file parsing, but rather classification of single decoded statements.

All grammar can be loosely defined as follows:

```
<define_stmt> ::= "{" (<name> ":" <program>)+ "}"   ; binds each name to its program, in order
                                                    ; - a definition may use names defined before it
                                                    ; - recursive definitions are not supported
<exec_stmt>   ::= <program>                         ; reduced and outputted when the session is run

<comment>     ::= ";;" <char>*
```

Comments and line continuations are handled in session.py: there is no dedicated Statement class for them.
"""

from abc import ABC, abstractmethod

from arrowcalc.lang.error import GenericException
from arrowcalc.pure.lexical import decode, parse
from arrowcalc.pure.reducer import Reducer, substitute
from arrowcalc.pure.term import ARROW, Abstraction, Application, Reference


class Statement(ABC):
    """Superclass representing any statement in an arrowcalc file."""

    def __init__(self, expr, value):
        """Assumes check_grammar has been run. expr is the statement's source text, value its decoded JSON."""
        self.expr = expr.strip()
        self.value = value
        self._cls = type(self).__name__

    @staticmethod
    @abstractmethod
    def check_grammar(value):
        """This method should return whether or not the decoded value is this kind of statement."""

    @classmethod
    def infer(cls, expr):
        """Decodes expr and returns an object of the matching Statement subclass."""
        value = decode(expr)
        for subclass in cls.__subclasses__():
            if subclass.check_grammar(value):
                return subclass(expr, value)
        raise GenericException("'{}' is not a valid arrowcalc statement", expr)

    def __repr__(self):
        return f"{self._cls}('{self.expr}')"

    def __str__(self):
        return self.expr

    def __eq__(self, other):
        return isinstance(other, type(self)) and other.expr == self.expr

    def __hash__(self):
        return hash(self.expr)


class NamedFunc:
    """A name bound to a lambda term by a DefineStmt."""

    def __init__(self, name, term):
        self.name = name
        self.term = term

    def expand(self, term, hygienic=True):
        """Substitutes self.term for every free reference to self.name in term."""
        return substitute(term, self.name, self.term, hygienic)

    def rsub(self, term, bound=frozenset()):
        """Reverse-substitutes any subterm of term that is alpha-equivalent to self.term for self.name. Subterms where
        self.name, or a free name of self.term, is bound are left alone.
        """
        if isinstance(self.term, Reference) or self.name in bound:
            return term
        if not bound & self.term.free_variables() and term.alpha_equals(self.term):
            return Reference(self.name)

        if isinstance(term, Abstraction):
            body = self.rsub(term.body, bound | {term.param})
            return term if body is term.body else Abstraction(term.param, body)
        if isinstance(term, Application):
            func, arg = self.rsub(term.func, bound), self.rsub(term.arg, bound)
            return term if func is term.func and arg is term.arg else Application(func, arg)
        return term

    def __repr__(self):
        return f"{type(self).__name__}(name='{self.name}', term={self.term!r})"

    def __eq__(self, other):
        return isinstance(other, NamedFunc) and (self.name, self.term) == (other.name, other.term)


class DefineStmt(Statement):
    """Definition statement: a JSON object mapping names to programs."""

    def __init__(self, expr, value):
        super().__init__(expr, value)

        self.funcs = []
        for name, program in value.items():
            if not name or name == ARROW:
                raise GenericException("'{}' is not a valid definition name", expr, diagnosis=False)

            term = parse(program)
            if name in term.free_variables():
                raise GenericException("recursive definitions not supported: '{}'", name, diagnosis=False)
            self.funcs.append(NamedFunc(name, term))

    @staticmethod
    def check_grammar(value):
        return isinstance(value, dict)

    def register_namespace(self, namespace, hygienic=True):
        """Expands each definition with namespace (and the definitions before it), then adds them all to namespace.
        If any definition is rejected, namespace is left untouched.
        """
        scope = dict(namespace)
        expanded = []
        for func in self.funcs:
            term = expand(func.term, scope, hygienic)
            if func.name in term.free_variables():
                msg = "recursive definitions not supported: '{}' refers to itself through other definitions"
                raise GenericException(msg, func.name, diagnosis=False)
            scope[func.name] = NamedFunc(func.name, term)
            expanded.append(term)

        for func, term in zip(self.funcs, expanded):
            func.term = term
            namespace[func.name] = func


class ExecStmt(Statement):
    """A thin wrapper around Reducer, which provides functionality for directly executing programs."""

    def __init__(self, expr, value):
        super().__init__(expr, value)

        self.term = parse(value)
        self.reducer = None
        self.result = None  # reduced (and possibly resugared) term, once executed

    @staticmethod
    def check_grammar(value):
        return not isinstance(value, dict)

    def execute(self, error_handler, namespace=None, resugar=False, **options):
        """Running an ExecStmt is equivalent to expanding named funcs in its term and reducing it. If resugar, this
        method will reverse substitute names of NamedFuncs back into the result. options are passed on to Reducer.
        """
        namespace = namespace or {}
        hygienic = options.get("hygienic", True)

        self.reducer = Reducer(expand(self.term, namespace, hygienic), **options)
        result = self.reducer.run(error_handler)

        if resugar:
            for func in namespace.values():
                result = func.rsub(result)

        self.result = result
        return result


def expand(term, namespace, hygienic=True):
    """Substitutes every named func of namespace that term references freely, until none is left. Each definition was
    checked to not reach itself, so this ends after at most len(namespace) rounds.
    """
    for __ in range(len(namespace) + 1):
        used = [namespace[name] for name in sorted(term.free_variables()) if name in namespace]
        if not used:
            break
        for func in used:
            term = func.expand(term, hygienic)
    return term
