import pytest

from schedule_visualizer.sources import html_to_text, read_source_text

PAGE = """
<html>
  <head><title>Study Load</title><style>td { color: red; }</style></head>
  <body>
    <table>
      <tr><td>CS101</td><td>Intro to CS</td></tr>
    </table>
    <script>var x = 1;</script>
  </body>
</html>
"""


def test_html_to_text():
    assert html_to_text(PAGE) == "CS101\nIntro to CS"


def test_read_html_file(tmp_path):
    path = tmp_path / "load.html"
    path.write_text(PAGE, encoding="utf-8")
    assert read_source_text(path) == "CS101\nIntro to CS"


def test_read_text_file(tmp_path):
    path = tmp_path / "load.txt"
    path.write_text("IT101 Intro\n", encoding="utf-8")
    assert read_source_text(path) == "IT101 Intro\n"


def test_missing_file(tmp_path):
    with pytest.raises(ValueError):
        read_source_text(tmp_path / "nope.txt")


def test_invalid_bytes_are_replaced(tmp_path):
    path = tmp_path / "load.txt"
    path.write_bytes(b"IT101 \xff Intro\n")
    assert read_source_text(path) == "IT101 \ufffd Intro\n"
