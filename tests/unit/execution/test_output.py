import io

from kube_engine.execution.output import LineWriter


class TestLineWriter:
    """Tests for line-buffered stream output."""

    def test_holds_partial_line(self):
        output = io.StringIO()
        writer = LineWriter(output)

        writer.write("compiling")

        assert output.getvalue() == ""

    def test_emits_complete_lines(self):
        output = io.StringIO()
        writer = LineWriter(output)

        writer.write("one\ntwo\nthr")
        writer.write("ee\n")

        assert output.getvalue() == "one\ntwo\nthree\n"
        assert writer.lines == 3

    def test_flush_emits_residual(self):
        output = io.StringIO()
        writer = LineWriter(output)
        writer.write("no newline")

        writer.flush()
        writer.flush()

        assert output.getvalue() == "no newline\n"

    def test_accepts_bytes(self):
        output = io.StringIO()
        writer = LineWriter(output)

        writer.write("café\n".encode("utf-8"))

        assert output.getvalue() == "café\n"

    def test_empty_write(self):
        output = io.StringIO()

        assert LineWriter(output).write("") == 0
