"""
Operator-facing output for the start-vm and install-qemu commands.

Status lines carry a colored label ([INFO], [OK], [WARN], [ERROR]); banners
group related values under a heading. Rendering goes through prompt_toolkit,
which drops the styling when the stream is not a terminal.
"""

import sys

from prompt_toolkit import HTML, print_formatted_text, prompt
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.styles import Style

RULE = "═" * 67

REPORT_STYLE = Style.from_dict({
    "info": "#0000aa",
    "ok": "#00aa00",
    "warn": "#aaaa00 bold",
    "error": "#aa0000",
    "heading": "#00aaaa",
    "title": "bold",
})

NEGATIVE_ANSWERS = ("n", "no")


class Reporter:
    """Writes status lines and banners; errors go to the diagnostic stream."""

    def __init__(self, out=None, err=None):
        self.out = out if out is not None else sys.stdout
        self.err = err if err is not None else sys.stderr

    def _line(self, style_class, label, message, file):
        text = FormattedText([(f"class:{style_class}", f"[{label}]"), ("", f" {message}")])
        print_formatted_text(text, style=REPORT_STYLE, file=file)

    def info(self, message):
        self._line("info", "INFO", message, self.out)

    def ok(self, message):
        self._line("ok", "OK", message, self.out)

    def warn(self, message):
        self._line("warn", "WARN", message, self.out)

    def error(self, message):
        self._line("error", "ERROR", message, self.err)

    def text(self, message="", file=None):
        print_formatted_text(message, file=file or self.out)

    def banner(self, title, sections):
        """
        Prints a boxed summary.

        Args:
            title: Heading printed between the rules.
            sections: Sequence of (heading, [(label, value), ...]) pairs. A
                      heading of None prints the rows without one; a row
                      whose label is None is printed verbatim.
        """
        self.text()
        self.text(RULE)
        print_formatted_text(HTML("  <title>{}</title>").format(title), style=REPORT_STYLE, file=self.out)
        self.text(RULE)
        self.text()
        for heading, rows in sections:
            if heading:
                print_formatted_text(HTML("  <heading>{}</heading>").format(heading), style=REPORT_STYLE, file=self.out)
            for label, value in rows:
                if label is None:
                    self.text(f"    {value}")
                else:
                    self.text(f"    {label + ':':<16}{value}")
            self.text()
        self.text(RULE)
        self.text()

    def confirm(self, question):
        """
        Asks a Y/n question; anything but an explicit no counts as yes.

        End of input is treated as a no.
        """
        try:
            answer = prompt(f"  {question} (Y/n): ")
        except EOFError:
            return False
        return answer.strip().lower() not in NEGATIVE_ANSWERS
