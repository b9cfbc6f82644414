from notion_gallery import renderers
from notion_gallery.models import Item, MediaRef
from notion_gallery.renderers import EmbedOptions


def _items():
    return [
        Item(
            id="a",
            title="Beach <day>",
            caption="Sun\nSand",
            media=(MediaRef("https://cdn.example.com/a.jpg"), MediaRef("https://cdn.example.com/b.jpg")),
        ),
        Item(id="c", title="Clip", media=(MediaRef("https://cdn.example.com/clip.webm"),)),
    ]


def test_build_embed_html_renders_tiles():
    html = renderers.build_embed_html(_items(), EmbedOptions(cols=4, gap=2, radius=0))

    assert 'src="https://cdn.example.com/a.jpg"' in html
    assert '<video src="https://cdn.example.com/clip.webm"' in html
    assert "Beach &lt;day&gt;" in html
    assert "Sun<br>Sand" in html
    assert "repeat(4, minmax(0, 1fr))" in html
    assert '<span class="badge">2</span>' in html
    assert "embed-resize" in html


def test_build_embed_html_shows_empty_hint():
    html = renderers.build_embed_html([], database_id="db")
    assert "No posts found" in html


def test_build_embed_html_shows_error_instead_of_hint():
    html = renderers.build_embed_html([], database_id="db", error="Upstream down")
    assert "Upstream down" in html
    assert "No posts found" not in html


def test_embed_options_clamp_query_values():
    options = EmbedOptions.from_query({"cols": "0", "gap": "99", "radius": "x"})
    assert options == EmbedOptions(cols=1, gap=24, radius=8)
    assert EmbedOptions.from_query({}) == EmbedOptions()


def test_reels_view_keeps_only_items_led_by_video():
    html = renderers.build_embed_html(_items(), EmbedOptions(view="reels"))

    assert '<video src="https://cdn.example.com/clip.webm"' in html
    assert "https://cdn.example.com/a.jpg" not in html


def test_embed_options_view_falls_back_to_grid():
    assert EmbedOptions.from_query({"view": "Reels"}).view == "reels"
    assert EmbedOptions.from_query({"view": "stories"}).view == "grid"
