from pinnotes.editor.widget import EditorHost, TextAreaEditor


def test_render_escapes_markup():
    editor = TextAreaEditor("n1", lambda content: None)
    out = editor.render("<p>hi & bye</p>")
    assert "&lt;p&gt;hi &amp; bye&lt;/p&gt;" in out
    assert 'data-note-id="n1"' in out


def test_on_change_forwards_new_content():
    seen = []
    editor = TextAreaEditor("n1", seen.append)
    editor.render("<p>a</p>")

    editor.on_change("<p>a</p>")
    editor.on_change("<p>b</p>")
    editor.on_change(None)

    assert seen == ["<p>b</p>", ""]


def test_host_swaps_widget_when_note_changes():
    host = EditorHost(lambda note_id: TextAreaEditor(note_id, lambda c: None))

    first = host.widget_for("a")
    assert host.widget_for("a") is first

    second = host.widget_for("b")
    assert second is not first
    assert second.note_id == "b"

    # coming back to a note gets a fresh widget too
    assert host.widget_for("a") is not first
