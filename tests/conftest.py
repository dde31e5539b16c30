"""Shared fixtures for urlreader tests."""

import pytest


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def make_pdf(pages: list[str]) -> bytes:
    """
    Assemble a minimal PDF with one line of Helvetica text per page.

    An empty string produces a page with no text.
    """
    font_id = 3
    objects: dict[int, bytes] = {
        1: b"<< /Type /Catalog /Pages 2 0 R >>",
        font_id: b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    }

    kids = []
    for index, text in enumerate(pages):
        page_id = 4 + index * 2
        content_id = page_id + 1
        kids.append(f"{page_id} 0 R")

        stream = f"BT /F1 24 Tf 72 720 Td ({_escape(text)}) Tj ET".encode("latin-1") if text else b""
        objects[page_id] = (
            f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            f"/Contents {content_id} 0 R /Resources << /Font << /F1 {font_id} 0 R >> >> >>"
        ).encode("latin-1")
        objects[content_id] = b"<< /Length %d >>\nstream\n%s\nendstream" % (len(stream), stream)

    objects[2] = f"<< /Type /Pages /Kids [{' '.join(kids)}] /Count {len(pages)} >>".encode("latin-1")

    out = bytearray(b"%PDF-1.4\n")
    offsets: dict[int, int] = {}
    for obj_id in sorted(objects):
        offsets[obj_id] = len(out)
        out += b"%d 0 obj\n%s\nendobj\n" % (obj_id, objects[obj_id])

    size = max(objects) + 1
    xref_at = len(out)
    out += b"xref\n0 %d\n" % size
    out += b"0000000000 65535 f \n"
    for obj_id in range(1, size):
        out += b"%010d 00000 n \n" % offsets[obj_id]
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (size, xref_at)
    return bytes(out)


@pytest.fixture
def pdf_factory():
    """Build in-memory PDF documents from page texts."""
    return make_pdf


@pytest.fixture
def article_html():
    """A rendered article page with navigation chrome around the body."""
    return """
    <html>
      <head><title>Example article</title><script>var tracking = 1;</script></head>
      <body>
        <nav><a href="/">Home</a> <a href="/about">About</a></nav>
        <article>
          <h1>Understanding Widgets</h1>
          <p>Widgets are small components that appear in many applications and
          are used to compose larger interfaces from reusable pieces.</p>
          <p>This article explains how widgets are assembled, configured and
          tested. See the <a href="/docs/widgets">widget docs</a> for details.</p>
          <pre><code>widget = Widget(name="demo")
    widget.render()</code></pre>
        </article>
        <footer>Copyright Example Corp</footer>
      </body>
    </html>
    """


@pytest.fixture
def sidebar_story_html():
    """A page whose generic ``.content`` block is a link sidebar, not the story."""
    trending = "".join(
        f'<li><a href="/trending/{n}">Trending story number {n} that everyone is reading</a></li>'
        for n in range(1, 9)
    )
    paragraphs = "".join(
        f"<p>Paragraph {n} of the feature reports on the harbour reconstruction, "
        f"quoting engineers, residents and the council about progress so far.</p>"
        for n in range(1, 7)
    )
    return f"""
    <html>
      <body>
        <div class="content"><h3>Trending</h3><ul>{trending}</ul></div>
        <div id="story"><h1>Harbour rebuilt</h1>{paragraphs}</div>
      </body>
    </html>
    """
