"""Handles interactive/command-line mode for the Lox interpreter. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """Lox interpreter shell. Every line that is not a shell command is Lox source."""
    intro = "Lox interpreter :: Python backend\nType 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations
    COMMANDS = ("help", "exit", "EOF")

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self._tmp_line = ""

    def parseline(self, line):
        """Only bare shell commands are dispatched as commands: `exit;` or `!done` are Lox source."""
        if line.strip() in Shell.COMMANDS:
            return super().parseline(line)
        return None, None, line

    def default(self, line):
        """Executes arbitrary Lox source. Lines are joined while braces are unbalanced."""
        line = self._tmp_line + line + "\n"

        if line.count("{") > line.count("}"):
            self._tmp_line = line
            self.prompt = self.secondary_prompt
            return

        self._tmp_line = ""
        self.prompt = self._tmp_prompt

        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.sess.run(line)
        self.sess.error_handler.reset()

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the Lox interpreter!\n\n"
              "Lox is a small dynamically typed scripting language with C-like syntax, \n"
              "first-class functions and closures. Statements end with ';'. Try \n"
              "'var greeting = \"hi\";' and then 'print greeting;'. Blocks spanning \n"
              "several lines are run once their braces are balanced.\n\n"
              "Type 'exit' or press Ctrl-D to leave.")

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
