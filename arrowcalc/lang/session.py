"""Session control for arrowcalc. Runs arrowcalc files or command-line input statement by statement.

An arrowcalc file holds one JSON statement per logical line: a statement continues onto the next line while it has more
opening than closing brackets, and everything from ";;" to the end of a line is a comment.
"""

from arrowcalc.lang.error import GenericException
from arrowcalc.lang.lexical import DefineStmt, ExecStmt, Statement


class Session:
    """Governs an arrowcalc session, with control over scope of named funcs."""
    SH_FILE = "<in>"  # command-line interpreter filename
    COMMENT = ";;"

    def __init__(self, error_handler, path, cmd_line, max_steps=None, max_depth=None, hygienic=True, resugar=False):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in command-line mode
        self.resugar = resugar    # whether or not to fold named funcs back into results
        self.options = {"max_steps": max_steps, "max_depth": max_depth, "hygienic": hygienic}

        self.namespace = {}  # dict of name: NamedFuncs that exist in the current session
        self.to_exec = {}    # dict of line num: ExecStmts to execute
        self.results = []    # executed ExecStmts, in order

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            try:
                with open(path, "r", encoding="utf-8") as file:
                    lines = file.readlines()
            except OSError:
                raise GenericException("'{}' could not be opened", path, diagnosis=False)

            for expr, line_num in Session.split_statements(lines):
                self.add(expr, line_num)

        elif not cmd_line:
            raise GenericException("'<in>' is a reserved filename")

    @staticmethod
    def scan(line):
        """Returns line without its comment and the bracket balance of what is left. Brackets and ";;" inside JSON
        strings do not count.
        """
        depth = 0
        in_string = escaped = False
        for idx, char in enumerate(line):
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == "\"":
                    in_string = False
            elif char == "\"":
                in_string = True
            elif line.startswith(Session.COMMENT, idx):
                return line[:idx], depth
            elif char in "[{":
                depth += 1
            elif char in "]}":
                depth -= 1
        return line, depth

    @staticmethod
    def preprocess_line(line, prev=""):
        """Preprocesses a line from a file or command-line. prev is the unfinished statement from previous lines, if any.
        Returns the statement so far and whether or not a line continuation is necessary.
        """
        line, __ = Session.scan(line.rstrip("\n"))
        if prev:
            line = prev + " " + line.strip()

        __, depth = Session.scan(line)
        return line.strip(), depth > 0

    @staticmethod
    def split_statements(lines):
        """Yields (statement, line num of its first line) for every statement in lines."""
        statement, start = "", None
        for line_num, line in enumerate(lines, start=1):
            statement, add_to_prev = Session.preprocess_line(line, statement)
            if not statement:
                continue
            if start is None:
                start = line_num
            if not add_to_prev:
                yield statement, start
                statement, start = "", None

        if statement:
            yield statement, start  # unbalanced at end of file, let decoding report it

    def add(self, expr, line_num):
        """Adds a statement to the current session. Definitions take effect immediately; reduction is delayed until run
        is called. Returns the Statement.
        """
        self.error_handler.register_line(self.path, expr, line_num)  # in case error is raised

        stmt = Statement.infer(expr)
        if isinstance(stmt, DefineStmt):
            stmt.register_namespace(self.namespace, self.options["hygienic"])
        elif isinstance(stmt, ExecStmt):
            self.to_exec[line_num] = stmt

        self.error_handler.remove_line(self.path)  # error was not raised
        return stmt

    def run(self):
        """Runs this session's executable statements by expanding and then reducing them. Will raise any errors that are
        encountered.
        """
        for line_num, exec_stmt in list(self.to_exec.items()):
            self.error_handler.register_line(self.path, str(exec_stmt), line_num)

            try:
                exec_stmt.execute(self.error_handler, self.namespace, self.resugar, **self.options)
                self.results.append(exec_stmt)
            finally:
                del self.to_exec[line_num]

            self.error_handler.remove_line(self.path)

    def pop(self):
        """Removes and returns the most recent result."""
        return self.results.pop().result
