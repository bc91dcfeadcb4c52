"""Handles interactive/command-line mode for the Lox interpreter. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """Lox interpreter shell. Every line runs in the same session, so variables persist between lines."""
    intro = "Lox interpreter :: Python backend\nType 'help' for more information, 'exit' or Ctrl-D to leave."
    prompt = "> "

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self.sess.error_handler.fatal = False  # a bad line must not end the shell

    def default(self, line):
        """Executes an arbitrary line of Lox."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.sess.run_line(line)

    def onecmd(self, line):
        """Sends everything except the shell's own commands to default. cmd.Cmd would otherwise treat words like
        'print' as commands and '?' or '!' as help/shell shortcuts.
        """
        command = line.strip()
        if command in ("exit", "help", "EOF"):
            return super().onecmd(command)
        if not command:
            return self.emptyline()
        return self.default(line)

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the Lox interpreter!\n\n"
              "Lox is a small dynamically typed scripting language. This interpreter supports \n"
              "numbers, strings, booleans and nil, variables with block scope, print, if/else, \n"
              "while and for loops.\n\n"
              "Try it out by typing 'var greeting = \"hello\";'. This binds the string \"hello\" \n"
              "to the name 'greeting'. Next, try typing 'greeting + \" world\"'. A line without a \n"
              "trailing ';' is evaluated and its value printed.", file=self.stdout)

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return False

    def do_EOF(self, arg):
        """Exits interpreter."""
        print(file=self.stdout)
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
