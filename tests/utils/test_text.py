from assistant_gate.utils.text import build_fragments, chunk_text, format_hours, normalize_reply, split_paragraphs


def test_two_paragraphs_make_two_fragments() -> None:
    fragments = build_fragments("Uno **negrita** [fuente].\n\nDos [2] **mas**.")
    assert [f.body for f in fragments] == ["Uno *negrita* .", "Dos  *mas*."]


def test_several_blank_lines_are_one_boundary() -> None:
    assert split_paragraphs("a\n\n\n\nb\n \nc") == ["a", "b", "c"]


def test_single_newline_stays_inside_a_paragraph() -> None:
    assert split_paragraphs("linea 1\nlinea 2") == ["linea 1\nlinea 2"]


def test_normalize_keeps_single_emphasis() -> None:
    assert normalize_reply("*ya* **doble**") == "*ya* *doble*"


def test_chunk_text_short_text_untouched() -> None:
    assert chunk_text("hola", limit=10) == ["hola"]


def test_chunk_text_cuts_on_whitespace() -> None:
    assert chunk_text("aaaa bbbb cccc", limit=9) == ["aaaa", "bbbb cccc"]


def test_format_hours() -> None:
    assert format_hours(86400) == "24"
    assert format_hours(5400) == "1.5"
