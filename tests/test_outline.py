from __future__ import annotations

from gamslens.analysis.cancellation import CancellationFlag, cancellation_scope
from gamslens.analysis.classifier import classify_lines
from gamslens.analysis.outline import OutlineNode, SourceRange, build_outline
from gamslens.analysis.symbol_kinds import PresentationKind


def _outline(lines: list[str], **kwargs) -> list[OutlineNode]:
    return build_outline(classify_lines(lines), line_count=len(lines), **kwargs)


def test_sections_with_declaration_and_items(scenario_lines) -> None:
    roots = _outline(scenario_lines)
    assert [node.name for node in roots] == ["Header", "Footer"]
    header, footer = roots
    assert header.kind is PresentationKind.NAMESPACE
    assert header.level == 1
    assert header.range == SourceRange(0, 0, 3, len(scenario_lines[3]))
    assert header.selection_range == SourceRange(0, 2, 0, 8)

    (sets,) = header.children
    assert sets.name == "SETS"
    assert sets.detail == "SET"
    assert sets.kind is PresentationKind.ARRAY
    assert sets.range.start_line == 1
    assert sets.range.end_line == 3
    assert sets.selection_range == SourceRange(1, 0, 1, 4)
    assert [item.name for item in sets.children] == ["i", "j"]
    assert sets.children[0].selection_range == SourceRange(2, 2, 2, 3)
    assert sets.children[1].selection_range == SourceRange(3, 2, 3, 3)
    assert all(item.kind is PresentationKind.ARRAY for item in sets.children)

    assert footer.range == SourceRange(4, 0, 4, len(scenario_lines[4]))
    assert footer.children == []


def test_deeper_section_before_any_top_level_section_is_a_root() -> None:
    roots = _outline(["** Sub ---", "Set a;", "* Top ---", "Set b;"])
    assert [(node.name, node.level) for node in roots] == [("Sub", 2), ("Top", 1)]
    assert roots[0].range.end_line == 1
    assert [child.name for child in roots[0].children] == ["Set"]
    assert [child.name for child in roots[1].children] == ["Set"]


def test_unterminated_declaration_closes_at_last_line() -> None:
    lines = ["Parameter p", "  a", "  b"]
    (node,) = _outline(lines)
    assert node.range == SourceRange(0, 0, 2, 3)
    assert [item.name for item in node.children] == ["p", "a", "b"]


def test_nested_sections_are_contained_in_their_parents() -> None:
    lines = [
        "* A ---",
        "** B ---",
        "Set x;",
        "*** C ---",
        "Parameter p;",
        "** D ---",
        "Variable v;",
        "* E ---",
    ]
    roots = _outline(lines)
    assert [node.name for node in roots] == ["A", "E"]
    a_node = roots[0]
    assert [child.name for child in a_node.children] == ["B", "D"]
    b_node = a_node.children[0]
    assert [child.name for child in b_node.children] == ["Set", "C"]
    assert b_node.range.end_line == 4
    assert a_node.range.end_line == 6
    for root in roots:
        for node in root.iter_nodes():
            for child in node.children:
                assert node.range.contains(child.range)


def test_declaration_closed_by_next_declaration() -> None:
    roots = _outline(["Set i", "Parameter p;", "Variable v"])
    assert [(node.name, node.range.start_line, node.range.end_line) for node in roots] == [
        ("Set", 0, 0),
        ("Parameter", 1, 1),
        ("Variable", 2, 2),
    ]


def test_block_comment_hides_its_contents() -> None:
    roots = _outline(["$ontext", "* Hidden ---", "Set s;", "$offtext", "Set t;"])
    assert [node.name for node in roots] == ["Set"]
    assert roots[0].range.start_line == 4


def test_block_comment_inside_open_declaration() -> None:
    lines = ["Set i", "$ontext", "x", "$offtext", "  j;"]
    (node,) = _outline(lines)
    assert node.range.end_line == 4
    assert [item.name for item in node.children] == ["i", "j"]


def test_unmatched_block_comment_end_closes_open_blocks() -> None:
    roots = _outline(["* A ---", "Set i", "  k", "$offtext", "Set j;"])
    assert [node.name for node in roots] == ["A", "Set"]
    section, trailing = roots
    assert section.range.end_line == 2
    (declaration,) = section.children
    assert declaration.range.end_line == 2
    assert [item.name for item in declaration.children] == ["i", "k"]
    assert trailing.range.start_line == 4


def test_unmatched_block_comment_end_on_empty_stack() -> None:
    roots = _outline(["$offtext", "Set i;"])
    assert [node.name for node in roots] == ["Set"]


def test_empty_section_title() -> None:
    (node,) = _outline(["  * ---"])
    assert node.name == "(empty)"
    assert node.selection_range == SourceRange(0, 2, 0, 3)


def test_items_can_be_disabled(scenario_lines) -> None:
    roots = _outline(scenario_lines, extract_items=False)
    assert roots[0].children[0].children == []


def test_item_detail_joins_dimensions_and_description() -> None:
    (node,) = _outline(["Parameters a(i) 'alpha', b 'beta';"])
    assert node.kind is PresentationKind.TYPE_PARAMETER
    assert [(item.name, item.detail) for item in node.children] == [
        ("a", "(i) alpha"),
        ("b", "beta"),
    ]


def test_equation_and_model_kinds() -> None:
    roots = _outline(["Equation cost;", "Model m / all /;"])
    assert [node.kind for node in roots] == [PresentationKind.FUNCTION, PresentationKind.CLASS]


def test_cancelled_outline_is_empty(scenario_lines) -> None:
    assert _outline(scenario_lines, cancel=CancellationFlag(cancelled=True)) == []
    with cancellation_scope(CancellationFlag(cancelled=True)):
        assert _outline(scenario_lines) == []


def test_empty_document_has_no_outline() -> None:
    assert build_outline([]) == []


def test_outline_payload(scenario_lines) -> None:
    payload = _outline(scenario_lines)[0].as_payload()
    assert payload["name"] == "Header"
    assert payload["kind"] == "Namespace"
    assert payload["level"] == 1
    assert payload["range"] == {
        "start": {"line": 0, "character": 0},
        "end": {"line": 3, "character": len(scenario_lines[3])},
    }
    child = payload["children"][0]
    assert "level" not in child
    assert [item["name"] for item in child["children"]] == ["i", "j"]
