"""Error handling for arrowcalc. Only GenericExceptions should be encountered during running: if another type of error is
raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Exception hierarchy:

```
GenericException
 ├── MalformedInput            ; input is not nested sequences of strings (or not valid JSON)
 ├── DesugarError
 │    ├── EmptyExpression      ; [] or an arrow with nothing after it
 │    ├── ArrowAtStart         ; "=>" starts an expression
 │    └── NonIdentifierParameter
 └── LimitExceeded
      ├── StepLimitExceeded    ; Reducer ran out of passes
      └── DepthLimitExceeded   ; a single pass needed more pending work than allowed
```
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error/warning message so that it can be used to throw an arrowcalc error/warning."""

    def __init__(self, msg, exprs=None, start=0, end=-1, diagnosis=True, internal=False):
        """Parses args for GenericException or warning."""
        if exprs is None:
            exprs = ""
        if isinstance(exprs, str):
            exprs = [exprs]
        exprs = [str(expr) for expr in exprs]

        self.msg = msg.format(*(colored(expr, attrs=["bold"]) for expr in exprs))  # color expr snippets
        self.plain = msg.format(*exprs)
        self.expr = exprs[0] if exprs else ""  # exprs[0] should be the offending expr that caused the error
        self.end = end if end != -1 else len(self.expr)  # needed for error display

        self.start = start
        self.diagnosis = diagnosis
        self.internal = internal

        super().__init__(self.plain)


class MalformedInput(GenericException):
    """Raised when a program value is not, recursively, a sequence or a string."""


class DesugarError(GenericException):
    """Raised when a token tree has no lambda calculus reading."""


class EmptyExpression(DesugarError):
    pass


class ArrowAtStart(DesugarError):
    pass


class NonIdentifierParameter(DesugarError):
    pass


class LimitExceeded(GenericException):
    """Raised when a configured budget runs out before reduction finishes."""

    def __init__(self, msg, exprs=None, limit=None, **kwargs):
        super().__init__(msg, exprs, diagnosis=False, **kwargs)
        self.limit = limit


class StepLimitExceeded(LimitExceeded):
    pass


class DepthLimitExceeded(LimitExceeded):
    pass


class ErrorHandler:
    """Context manager that will silently suppress Python errors and raise custom arrowcalc errors/warnings."""
    ERROR = "red"
    WARNING = "magenta"
    STEP = "cyan"

    def __init__(self, fatal=True, trace=False):
        self.fatal = fatal
        self.trace = trace
        self.traceback = {}
        self.errors = []  # every GenericException thrown, most recent last

    def register_file(self, path):
        """Registers path in traceback."""
        self.traceback[path] = (None, None)

    def register_line(self, path, line, line_num):
        """Registers line in traceback given path. Should be called prior to Session add/run."""
        self.traceback[path] = (line, line_num)

    def remove_line(self, path):
        """Removes line from traceback given path. Should be called after successful Session add/run."""
        self.traceback[path] = (None, None)

    def register_step(self, kind, term):
        """Prints a reduction step when tracing."""
        if self.trace:
            print(colored(f"  {kind} ", ErrorHandler.STEP, attrs=["bold"]) + str(term))

    @staticmethod
    def diagnose(error, warning=False):
        """Returns offending part of error.expr highlighted and bolded."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR

        diagnosis = "  " + error.expr[:error.start]

        end = max(error.end, 1)
        diagnosis += colored(error.expr[error.start:end], color, attrs=["bold"])
        diagnosis += error.expr[end:] + "\n"

        diagnosis += "  " + " " * error.start
        diagnosis += colored("^" + "~" * (end - error.start - 1), color, attrs=["bold"])

        return diagnosis

    def _location(self, error):
        """Returns 'file:line:col: ' for the innermost registered line, or '' outside of any file."""
        for file, (line, line_num) in reversed(list(self.traceback.items())):
            if line:
                col = line.find(error.expr) if error.expr else -1
                col = max(col, 0) + error.start
                return f"{file}:{line_num}:{col}: "
        return ""

    def warn(self, *args, **kwargs):
        """Generates and prints runtime warning message based on args."""
        error = GenericException(*args, **kwargs)

        error_msg = colored(self._location(error), attrs=["bold"])
        error_msg += colored("warning: ", ErrorHandler.WARNING, attrs=["bold"]) + error.msg

        print(error_msg)

        if not error.internal and error.expr and error.diagnosis:
            print(ErrorHandler.diagnose(error, warning=True))

    def throw(self, error):
        """Throws error using error and self.traceback. error must be a GenericException, and self.traceback must be a
        dict of file: (line, line_num) representing origination of error.
        """
        self.errors.append(error)

        error_msg = ""
        lines = 0
        for file, (line, line_num) in self.traceback.items():  # assumes dict is insertion-ordered
            if line:
                error_msg += f"  File '{file}', line {line_num}:\n"
                error_msg += f"    {line}\n"
                lines += 1

        if lines > 1:
            error_msg = "Traceback:\n" + error_msg

        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.msg
        print(error_msg)

        if not error.internal and error.expr and error.diagnosis:
            print(ErrorHandler.diagnose(error))

        if self.fatal:
            sys.exit(1)
        self.traceback = {path: (None, None) for path in self.traceback}  # keep files, forget failed lines

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("program nesting exceeds maximum recursion depth", diagnosis=False))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            details = f"{exc_type.__name__}: {exc_val}"
            self.throw(GenericException("unknown error: '{}'", details, diagnosis=False, internal=True))
            do_exit = True

        return not do_exit
