import io
import unittest

from twooter_cli.content import ImageBlob, MessageRecord, encode_formatted
from twooter_cli.layout import Heading, ImageNode, Indent, Line, Padding, Section
from twooter_cli.render import render_feed
from twooter_cli.sink import draw, render_lines


class TestTextSink(unittest.TestCase):
    def test_render_lines_indents_nested_content(self):
        tree = Section((Heading("ada"), Indent(Section((Line("one\ntwo"), Padding())))))
        self.assertEqual(render_lines(tree), ["== ada ==", "  one", "  two", ""])

    def test_image_placeholder_reports_size(self):
        lines = render_lines(Indent(ImageNode(ImageBlob("png", b"12345"))), indent=4)
        self.assertEqual(lines, ["    [image/png 5 bytes]"])

    def test_draw_feed(self):
        records = [
            MessageRecord(author="ada", raw_content="hello"),
            MessageRecord(author="bob", raw_content=encode_formatted(agent="cat", text="meow")),
        ]
        buffer = io.StringIO()

        draw(render_feed(records), buffer)

        self.assertEqual(
            buffer.getvalue(),
            "== ada ==\n  hello\n\n== bob ==\n  meow\n  Agent: cat\n\n",
        )

    def test_unknown_node_rejected(self):
        with self.assertRaises(TypeError):
            render_lines("not a node")


if __name__ == "__main__":
    unittest.main()
