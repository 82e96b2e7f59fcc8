"""Handles interactive/command-line mode for arrowcalc interpreter. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """Lambda calculus interpreter shell."""
    intro = "arrowcalc :: lambda calculus interpreter\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._tmp_line = ""
        self.line_num = 0

    def onecmd(self, line):
        """Only 'help', 'exit' and EOF are commands: everything else is an arrowcalc statement."""
        command = line.strip()
        if not self._tmp_line and command in ("help", "?", "exit", "EOF"):
            return super().onecmd(command)
        return self.default(line)

    def default(self, line):
        """Executes arbitrary arrowcalc statement."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            line, add_to_prev = self.sess.preprocess_line(line, self._tmp_line)

            if add_to_prev:
                self._tmp_line = line
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt
            if not line:
                return

            self.sess.add(line, self.line_num)
            self.sess.run()

            if self.sess.results:
                print(self.sess.pop())

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the arrowcalc interpreter!\n\n"
              "Programs are JSON lists of strings: [\"x\", \"=>\", \"body\"] is a function of x, \n"
              "and [\"f\", \"a\"] applies f to a. Each program is reduced until no redex is left, \n"
              "and the result is printed as [x => body] and [f a].\n\n"
              "Try it out by typing '{\"I\": [\"a\", \"=>\", \"a\"]}'. This will bind the function \n"
              "[a => a] to the name 'I'. Next, try typing '[\"I\", \"candy\"]'. This will apply \n"
              "'I' to 'candy', giving 'candy' as the result.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
