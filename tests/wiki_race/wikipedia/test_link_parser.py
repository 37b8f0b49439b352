import pytest

from wiki_race.wikipedia.link_parser import extract_links, truncate_at_end_sections

pytestmark = pytest.mark.unit


class TestExtractLinks:

    def test_plain_and_piped_links(self):
        text = "The [[cat]] is a [[Felidae|feline]] related to the [[Lion|''lion'']]."
        links = extract_links(text)
        assert [(l.target, l.display_text) for l in links] == [
            ("Cat", "cat"),
            ("Felidae", "feline"),
            ("Lion", "lion"),
        ]

    def test_anchor_and_leading_colon_are_stripped(self):
        links = extract_links("See [[History of France#Middle Ages|medieval France]] and [[:Category:Cats]].")
        assert [l.target for l in links] == ["History of France", "Category:Cats"]
        assert links[0].display_text == "medieval France"

    def test_underscores_and_case_normalized(self):
        links = extract_links("[[notre_Dame  Fighting_Irish]]")
        assert links[0].target == "Notre Dame Fighting Irish"
        assert links[0].display_text == "notre_Dame  Fighting_Irish"

    def test_duplicate_targets_keep_first_anchor(self):
        links = extract_links("[[Paris|the capital]] ... [[Paris]] ... [[paris|again]]")
        assert len(links) == 1
        assert links[0].display_text == "the capital"

    def test_same_page_section_links_are_skipped(self):
        assert extract_links("Jump to [[#History|history]].") == []

    def test_links_after_references_are_ignored(self):
        text = (
            "Intro with [[Alpha]].\n"
            "== History ==\n"
            "More [[Beta]].\n"
            "== See also ==\n"
            "* [[Gamma]]\n"
            "== References ==\n"
            "* [[Delta]]\n"
        )
        assert [l.target for l in extract_links(text)] == ["Alpha", "Beta"]

    def test_empty_text(self):
        assert extract_links("") == []


class TestTruncateAtEndSections:

    def test_no_end_section(self):
        text = "== Early life ==\nBody"
        assert truncate_at_end_sections(text) == text

    def test_heading_level_and_case_ignored(self):
        text = "Body\n=== EXTERNAL LINKS ===\n[[Hidden]]"
        assert truncate_at_end_sections(text) == "Body\n"
