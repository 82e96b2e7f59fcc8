"""Substitution, single-pass beta reduction and the reducibility check for `pure.term` trees.

One call to `reduce` is one pass:

```
reduce(x)             = x                                  ; references are irreducible
reduce(λx.M)          = λx.M                               ; bodies are opaque until applied
reduce(M N)           = M' N'           if M' is not an abstraction (stuck)
                      = reduce(B)[x := N']  if M' = λx.B
    where M' = reduce(M), N' = reduce(N)                   ; arguments are always reduced eagerly
```

A pass does not normalize: its result may still hold redexes, so callers iterate `reduce` while `has_pending_work`
says so (see `Reducer`). Some terms never stop: `[[a => [a a]] [a => [a a]]]` reduces to itself.

Substitution is hygienic by default: when a parameter inside the body would capture a free name of the replacement, the
parameter is renamed first (x -> x₀, x₁, ...). With hygienic=False no parameter is ever renamed and capture can happen.

Nothing here uses native recursion: every walk keeps its own stack, and `reduce` raises DepthLimitExceeded once that
stack outgrows max_depth.
"""

from arrowcalc.lang.error import DepthLimitExceeded, StepLimitExceeded
from arrowcalc.pure.term import Abstraction, Application, Reference

DEPTH_LIMIT = 100_000
SUBS = ["₀", "₁", "₂", "₃", "₄", "₅", "₆", "₇", "₈", "₉"]

# work stack instructions
_VISIT = "visit"
_ABSTRACTION = "abstraction"
_APPLICATION = "application"
_SUBSTITUTE = "substitute"


def split(name):
    """Splits name into base and subscript (-1 if there is none)."""
    subscript = []
    while name and name[-1] in SUBS:
        subscript.insert(0, str(SUBS.index(name[-1])))
        name = name[:-1]
    return name, int("".join(subscript)) if subscript else -1


def subscript(name, num):
    """Returns name with subscript of num."""
    return name + "".join(SUBS[int(digit)] for digit in str(num))


def fresh_name(name, used):
    """Returns the lowest subscripted variant of name that isn't in used."""
    base, __ = split(name)
    if not base:
        base = name
    num = 0
    while subscript(base, num) in used:
        num += 1
    return subscript(base, num)


def alpha_convert(abstraction, used):
    """Renames abstraction's parameter to a name not in used, along with every reference it binds."""
    new_param = fresh_name(abstraction.param, used | abstraction.body.names())
    # new_param occurs nowhere in the body, so the renaming itself cannot capture anything
    body = substitute(abstraction.body, abstraction.param, Reference(new_param), hygienic=False)
    return Abstraction(new_param, body)


def substitute(term, name, replacement, hygienic=True):
    """Returns term with every free reference to name replaced by replacement. Subtrees without such references are
    shared with term rather than copied.

    With hygienic (the default), an abstraction whose parameter is free in replacement, and which would capture it,
    is renamed to a fresh subscripted parameter first: [x => y => x y] applied to y gives [y₀ => [y y₀]]. Pass
    hygienic=False for plain name replacement, which never renames and gives [y => [y y]] for the same program.
    """
    incoming = replacement.free_variables() if hygienic else set()

    results = []
    stack = [(_VISIT, term)]
    while stack:
        op, item = stack.pop()

        if op == _VISIT:
            if isinstance(item, Reference):
                results.append(replacement if item.name == name else item)

            elif isinstance(item, Abstraction):
                if item.param == name:
                    results.append(item)  # name is shadowed from here down
                    continue
                if item.param in incoming and name in item.body.free_variables():
                    item = alpha_convert(item, incoming | {name})
                stack.append((_ABSTRACTION, item))
                stack.append((_VISIT, item.body))

            else:
                stack.append((_APPLICATION, item))
                stack.append((_VISIT, item.arg))
                stack.append((_VISIT, item.func))

        elif op == _ABSTRACTION:
            body = results.pop()
            results.append(item if body is item.body else Abstraction(item.param, body))

        else:
            arg = results.pop()
            func = results.pop()
            if func is item.func and arg is item.arg:
                results.append(item)
            else:
                results.append(Application(func, arg))

    return results.pop()


def reduce(term, hygienic=True, max_depth=DEPTH_LIMIT):
    """Performs one reduction pass over term. Returns term itself if the pass changed nothing. hygienic is passed on to
    substitute.
    """
    results = []
    stack = [(_VISIT, term)]
    while stack:
        if len(stack) > max_depth:
            msg = "reducing '{}' needs more than {} pending steps"
            raise DepthLimitExceeded(msg, [term, max_depth], limit=max_depth)

        op, item = stack.pop()

        if op == _VISIT:
            if isinstance(item, Application):
                stack.append((_APPLICATION, item))
                stack.append((_VISIT, item.arg))
                stack.append((_VISIT, item.func))
            else:
                results.append(item)

        elif op == _APPLICATION:
            arg = results.pop()
            func = results.pop()
            if isinstance(func, Abstraction):
                stack.append((_SUBSTITUTE, (func.param, arg)))
                stack.append((_VISIT, func.body))
            elif func is item.func and arg is item.arg:
                results.append(item)
            else:
                results.append(Application(func, arg))

        else:
            param, arg = item
            body = results.pop()
            results.append(substitute(body, param, arg, hygienic))

    return results.pop()


def has_pending_work(term):
    """Whether or not term contains a redex anywhere, abstraction bodies included."""
    stack = [term]
    while stack:
        item = stack.pop()
        if isinstance(item, Application) and item.is_redex:
            return True
        stack.extend(item.nodes)
    return False


class Reducer:
    """Drives repeated reduction passes over a tree under a step budget."""
    STEP_LIMIT = 100_000
    DEPTH_LIMIT = DEPTH_LIMIT

    def __init__(self, term, max_steps=None, max_depth=None, hygienic=True):
        self.original = term
        self.tree = term

        self.max_steps = Reducer.STEP_LIMIT if max_steps is None else max_steps
        self.max_depth = Reducer.DEPTH_LIMIT if max_depth is None else max_depth
        self.hygienic = hygienic

        self.count = 0          # passes performed so far
        self.reduced = False    # whether run has finished
        self.normal = False     # whether run finished with no redex left
        self.fixed_point = False

    @property
    def pending(self):
        return has_pending_work(self.tree)

    def step(self):
        """Performs one pass. Raises StepLimitExceeded if the budget is already spent."""
        if self.count >= self.max_steps:
            msg = "'{}' was not reduced within {} passes"
            raise StepLimitExceeded(msg, [self.original, self.max_steps], limit=self.max_steps)

        self.tree = reduce(self.tree, self.hygienic, self.max_depth)
        self.count += 1
        return self.tree

    def steps(self):
        """Yields self.tree and then the result of every pass, until there is no pending work or a pass changes
        nothing.
        """
        yield self.tree
        while self.pending:
            previous = self.tree
            if self.step() == previous:
                return
            yield self.tree

    def run(self, error_handler=None):
        """Reduces self.tree until no redex is left. Stops early, with a warning, if a pass reproduces its input.
        error_handler is the current session's error handler.
        """
        while self.pending:
            previous = self.tree
            self.step()
            if error_handler is not None:
                error_handler.register_step("β", self.tree)

            if self.tree is previous:
                self.fixed_point = True
                if error_handler is not None:
                    msg = "'{}' has redexes inside abstraction bodies, which are only reduced once applied"
                    error_handler.warn(msg, str(self.tree), diagnosis=False)
                break

            if self.tree == previous:
                self.fixed_point = True
                if error_handler is not None:
                    error_handler.warn("'{}' does not have a beta-normal form", str(self.original), diagnosis=False)
                break

        self.normal = not self.pending
        self.reduced = True
        return self.tree

    def __repr__(self):
        return f"{type(self).__name__}({self.tree!r})"

    def __str__(self):
        return self.tree.display()
