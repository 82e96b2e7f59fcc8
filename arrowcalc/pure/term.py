"""Lambda calculus expression trees.

Formally, the trees built here are

```
<λ-term> ::= <name>                     ; "reference"
                                        ; - any string except the reserved arrow "=>"
           | <name> "=>" <λ-term>       ; "abstraction"
                                        ; - one parameter; multi-parameter functions are nested abstractions
           | <λ-term> <λ-term>          ; "application"
```

and render as `[<param> => <body>]`, `[<func> <arg>]` and `<name>` respectively. Trees are immutable: every operation
in `pure.reducer` builds a new tree, reusing any subtree it did not have to change.

Equality (`==`) is structural and compares names literally, so `[a => a]` != `[b => b]`. Use `alpha_equals` to compare
up to renaming of bound parameters. Both comparisons, `str` and `free_variables` walk the tree with an explicit stack,
so they work on trees deeper than the interpreter's recursion limit.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

ARROW = "=>"


class LambdaTerm(ABC):
    """Superclass of the three expression tree node types."""

    @property
    @abstractmethod
    def nodes(self):
        """Child terms, left to right."""

    @property
    @abstractmethod
    def label(self):
        """The name carried by this node (None for applications). Used by structural comparison."""

    def free_variables(self):
        """Names referenced in self but not bound by an enclosing abstraction within self."""
        free = set()
        stack = [(self, frozenset())]
        while stack:
            term, bound = stack.pop()
            if isinstance(term, Reference):
                if term.name not in bound:
                    free.add(term.name)
            elif isinstance(term, Abstraction):
                stack.append((term.body, bound | {term.param}))
            else:
                stack.extend((node, bound) for node in term.nodes)
        return free

    def names(self):
        """Every name that appears in self, bound parameters included."""
        names = set()
        stack = [self]
        while stack:
            term = stack.pop()
            if term.label is not None:
                names.add(term.label)
            stack.extend(term.nodes)
        return names

    def alpha_equals(self, other):
        """Whether or not two LambdaTerms are equal up to consistent renaming of bound parameters. Bound references
        are compared by the depth of their binder, free references by name.
        """
        if not isinstance(other, LambdaTerm):
            return False

        stack = [(self, other, {}, {}, 0)]
        while stack:
            term, other_term, mapping, other_mapping, depth = stack.pop()
            if type(term) is not type(other_term):
                return False

            if isinstance(term, Reference):
                if term.name in mapping or other_term.name in other_mapping:
                    if mapping.get(term.name) != other_mapping.get(other_term.name):
                        return False
                elif term.name != other_term.name:
                    return False

            elif isinstance(term, Abstraction):
                mapping = {**mapping, term.param: depth}
                other_mapping = {**other_mapping, other_term.param: depth}
                stack.append((term.body, other_term.body, mapping, other_mapping, depth + 1))

            else:
                for node, other_node in zip(term.nodes, other_term.nodes):
                    stack.append((node, other_node, mapping, other_mapping, depth))
        return True

    def display(self, indents=0):
        """Recursively displays LambdaTerm tree with readable format.

        Format:
        <LambdaTerm>(expr='<expr>', nodes=[
            <LambdaTerm>(expr='<expr>', nodes=[
                ...
                <LambdaTerm>(expr='<expr>')  # <-- if nodes is empty
            ])
        ])
        """
        result = f"{'    ' * indents}{type(self).__name__}(expr='{self}'"
        if self.nodes:
            result += ", nodes=["
            for node in self.nodes:
                result += "\n" + node.display(indents + 1) + ","
            result = result[:-1] + f"\n{'    ' * indents}]"
        return result + ")"

    def __str__(self):
        parts = []
        stack = [self]
        while stack:
            item = stack.pop()
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, Abstraction):
                stack.extend(["]", item.body, f"[{item.param} {ARROW} "])
            elif isinstance(item, Application):
                stack.extend(["]", item.arg, " ", item.func, "["])
            else:
                parts.append(item.name)
        return "".join(parts)

    def __repr__(self):
        return f"{type(self).__name__}('{self}')"

    def __eq__(self, other):
        if not isinstance(other, LambdaTerm):
            return NotImplemented

        pairs = [(self, other)]
        while pairs:
            term, other_term = pairs.pop()
            if term is other_term:
                continue
            if type(term) is not type(other_term) or term.label != other_term.label:
                return False
            pairs.extend(zip(term.nodes, other_term.nodes))
        return True

    def __hash__(self):
        return hash(str(self))


@dataclass(frozen=True, eq=False, repr=False)
class Reference(LambdaTerm):
    """A name, bound by the nearest enclosing abstraction with the same parameter, otherwise free."""
    name: str

    def __post_init__(self):
        if not isinstance(self.name, str) or self.name == ARROW:
            raise ValueError(f"{self.name!r} is not a valid reference name")

    @property
    def nodes(self):
        return ()

    @property
    def label(self):
        return self.name


@dataclass(frozen=True, eq=False, repr=False)
class Abstraction(LambdaTerm):
    """Single-parameter function."""
    param: str
    body: LambdaTerm

    def __post_init__(self):
        if not isinstance(self.param, str) or not self.param or self.param == ARROW:
            raise ValueError(f"{self.param!r} is not a valid parameter name")

    @property
    def nodes(self):
        return (self.body,)

    @property
    def label(self):
        return self.param


@dataclass(frozen=True, eq=False, repr=False)
class Application(LambdaTerm):
    """Application of func to arg. A redex if func is an Abstraction."""
    func: LambdaTerm
    arg: LambdaTerm

    @property
    def nodes(self):
        return (self.func, self.arg)

    @property
    def label(self):
        return None

    @property
    def is_redex(self):
        return isinstance(self.func, Abstraction)
