from arrowcalc.pure.lexical import Sequence, Token, decode, desugar, loads, parse, parse_json, translate
from arrowcalc.pure.reducer import Reducer, has_pending_work, reduce, substitute
from arrowcalc.pure.term import ARROW, Abstraction, Application, LambdaTerm, Reference
