"""Tests for markdown rendering, heading outlines and site rendering."""

from pathlib import Path

import pytest

from blog_publisher.core.models import DocumentContext, PublishItem
from blog_publisher.render.layout import Layout
from blog_publisher.render.markdown import RenderOptions, markdown_renderer, render_markdown
from blog_publisher.render.outline import add_heading_anchors, build_forest, html_text
from blog_publisher.render.site import SiteRenderer, sort_items, stage


def make_item(title, slug, date, html="<p>Body</p>"):
    return PublishItem(
        context=DocumentContext(path=Path(f"{title}.md")),
        title=title,
        date=date,
        slug=slug,
        content="Body",
        html=html,
        excerpt="Body",
        search_text="Body",
    )


class TestRenderMarkdown:

    def test_line_breaks(self):
        html = render_markdown("first\nsecond")
        assert "first<br>" in html

    def test_breaks_disabled(self):
        html = render_markdown("first\nsecond", RenderOptions(breaks=False))
        assert "<br" not in html

    def test_tables_and_fenced_code(self):
        body = "| a | b |\n|---|---|\n| 1 | 2 |\n\n```python\nprint('x')\n```\n"
        html = render_markdown(body)
        assert "<table>" in html
        assert "<code" in html and "print(" in html

    def test_no_state_between_calls(self):
        render = markdown_renderer()
        first = render("Text[^1]\n\n[^1]: note")
        second = render("Plain")
        assert "footnote" in first
        assert "footnote" not in second


class TestOutline:

    def test_forest_nesting(self):
        headings = [
            (1, "Intro", "intro"),
            (2, "Setup", "setup"),
            (3, "Details", "details"),
            (2, "Usage", "usage"),
            (1, "End", "end"),
        ]
        roots = build_forest(headings)

        assert [n.text for n in roots] == ["Intro", "End"]
        assert [n.text for n in roots[0].children] == ["Setup", "Usage"]
        assert [n.text for n in roots[0].children[0].children] == ["Details"]
        assert roots[1].children == []

    def test_forest_starting_deep(self):
        roots = build_forest([(3, "Deep", "deep"), (2, "Shallow", "shallow"), (4, "Deeper", "deeper")])
        assert [n.text for n in roots] == ["Deep", "Shallow"]
        assert [n.text for n in roots[1].children] == ["Deeper"]

    def test_anchors_added_to_html(self):
        html = "<h1>Intro</h1>\n<p>x</p>\n<h2>First <em>Steps</em></h2>"
        rewritten, outline = add_heading_anchors(html)

        assert '<h1 id="intro">Intro</h1>' in rewritten
        assert '<h2 id="first-steps">First <em>Steps</em></h2>' in rewritten
        assert outline[0].children[0].text == "First Steps"
        assert outline[0].children[0].anchor == "first-steps"

    def test_duplicate_headings_get_unique_anchors(self):
        html = "<h2>Notes</h2><h2>Notes</h2><h2>Notes 1</h2><h2>Notes</h2>"
        _, outline = add_heading_anchors(html)
        anchors = [n.anchor for n in outline]
        assert len(set(anchors)) == 4
        assert anchors[:2] == ["notes", "notes-1"]

    def test_chinese_heading(self):
        _, outline = add_heading_anchors("<h2>简介</h2>")
        assert outline[0].anchor == "jian-jie"

    def test_unsluggable_heading_uses_timestamp_fallback(self):
        rewritten, outline = add_heading_anchors("<h2>???</h2><h2>!!!</h2>", timestamp="202401")
        assert [n.anchor for n in outline] == ["section-202401-1", "section-202401-2"]
        assert 'id="section-202401-1"' in rewritten

    def test_existing_id_replaced(self):
        rewritten, _ = add_heading_anchors('<h3 id="old" class="x">Title</h3>')
        assert rewritten == '<h3 id="title" class="x">Title</h3>'

    def test_attribute_values_are_not_heading_text(self):
        rewritten, outline = add_heading_anchors('<h2 title="a>b">Intro</h2>')
        assert outline[0].text == "Intro"
        assert outline[0].anchor == "intro"
        assert 'id="intro"' in rewritten

    def test_nested_markup_text(self):
        assert html_text("<h2>Code <code>x &lt; y</code>\n  here</h2>") == "Code x < y here"

    def test_entities_unescaped_in_text(self):
        _, outline = add_heading_anchors("<h2>Q&amp;A</h2>")
        assert outline[0].text == "Q&A"
        assert outline[0].anchor == "q-a"


class TestSiteRenderer:
    """Tests for SiteRenderer class."""

    def test_sort_is_stable_newest_first(self):
        items = [
            make_item("Old", "old", "2023-05"),
            make_item("Tie A", "tie-a", "2024-01"),
            make_item("New", "new", "2024-02"),
            make_item("Tie B", "tie-b", "2024-01"),
        ]
        assert [i.title for i in sort_items(items)] == ["New", "Tie A", "Tie B", "Old"]

    def test_output_paths(self):
        items = [make_item("First", "first", "2024-01"), make_item("Second", "second", "2024-02")]
        outputs = SiteRenderer().render(items)
        assert [o.path for o in outputs] == ["index.html", "second.html", "first.html"]

    def test_index_orders_and_links_posts(self):
        items = [make_item("First", "first", "2024-01"), make_item("Second", "second", "2024-02")]
        outputs = SiteRenderer(description="方向是比速度更重要的追求").render(items)
        index = outputs[0].content.decode("utf-8")

        assert index.index('href="second.html"') < index.index('href="first.html"')
        assert "方向是比速度更重要的追求" in index
        assert "2024-02" in index

    def test_prev_next_links(self):
        items = [
            make_item("Jan", "jan", "2024-01"),
            make_item("Feb", "feb", "2024-02"),
            make_item("Mar", "mar", "2024-03"),
        ]
        renderer = SiteRenderer()
        ordered = sort_items(items)

        newest = renderer.post_model(ordered[0], prev_item=ordered[1], next_item=None)
        assert newest["prev_post"] == {"title": "Feb", "slug": "feb"}
        assert newest["next_post"] is None

        pages = {o.path: o.content.decode("utf-8") for o in renderer.render(items)}
        middle = pages["feb.html"]
        assert 'class="prev-post" href="jan.html"' in middle
        assert 'class="next-post" href="mar.html"' in middle
        assert "prev-post" not in pages["jan.html"]
        assert "next-post" not in pages["mar.html"]

    def test_post_page_contains_content_and_outline(self):
        item = make_item("Guide", "guide", "2024-01", html="<h2>Setup</h2>\n<p>Do <b>this</b>.</p>")
        page = SiteRenderer().render([item])[1].content.decode("utf-8")

        assert '<h2 id="setup">Setup</h2>' in page
        assert "<p>Do <b>this</b>.</p>" in page
        assert 'href="#setup"' in page
        assert "<title>Guide</title>" in page

    def test_titles_escaped(self):
        item = make_item("<script>", "script", "2024-01")
        outputs = SiteRenderer().render([item])
        assert "<script>" not in outputs[0].content.decode("utf-8")
        assert "&lt;script&gt;" in outputs[1].content.decode("utf-8")

    def test_render_is_deterministic(self):
        items = [make_item("A", "a", "2024-01", html="<h2>!!!</h2>")]
        assert SiteRenderer().render(items) == SiteRenderer().render(items)

    def test_custom_layout(self):
        class PlainLayout(Layout):
            def index(self, model):
                return ",".join(p["slug"] for p in model["posts"])

            def post(self, model):
                return model["title"]

        outputs = SiteRenderer(layout=PlainLayout()).render([make_item("A", "a", "2024-01")])
        assert outputs[0].content == b"a"
        assert outputs[1].content == b"A"


class TestStage:

    def test_writes_files(self, tmp_path):
        outputs = SiteRenderer().render([make_item("A", "a", "2024-01")])
        written = stage(outputs, tmp_path / "public")

        assert [p.name for p in written] == ["index.html", "a.html"]
        assert (tmp_path / "public" / "a.html").read_bytes() == outputs[1].content
