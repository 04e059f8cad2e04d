from shoptree.services import build_tree
from tests.conftest import make_category


def test_children_sorted_by_order_key():
    tree = build_tree([
        make_category(1, 10),
        make_category(2, 30, parent_id=1),
        make_category(3, 5, parent_id=1),
        make_category(4, 20, parent_id=1),
    ])

    assert [c.category_id for c in tree.roots()] == [1]
    assert [c.category_id for c in tree.children_of(1)] == [3, 4, 2]


def test_every_child_list_matches_parent_id(nested_categories):
    tree = build_tree(reversed(nested_categories))

    for category in nested_categories:
        expected = sorted(
            (c for c in nested_categories if c.parent_id == category.category_id),
            key=lambda c: c.order_key,
        )
        assert tree.children_of(category.category_id) == expected


def test_dangling_parent_is_treated_as_root():
    tree = build_tree([
        make_category(1, 10),
        make_category(2, 5, parent_id=99),
    ])

    assert [c.category_id for c in tree.roots()] == [2, 1]
    assert tree.effective_parent(2) is None
    assert [c.category_id for c in tree.siblings_of(2)] == [2, 1]


def test_empty_snapshot():
    tree = build_tree([])

    assert len(tree) == 0
    assert tree.roots() == []
    assert tree.as_nested() == []


def test_walk_yields_display_order_with_depth(nested_categories):
    tree = build_tree(nested_categories)

    assert [(depth, c.category_id) for depth, c in tree.walk()] == [
        (0, 1), (1, 2), (2, 4), (1, 3), (0, 5),
    ]


def test_ancestors_and_subtree(nested_categories):
    tree = build_tree(nested_categories)

    assert [c.name for c in tree.ancestors(4)] == ["Electronics", "Phones"]
    assert tree.depth(4) == 2
    assert tree.subtree_ids(1) == {1, 2, 3, 4}
    assert tree.subtree_ids(5) == {5}


def test_find_by_slug_path(nested_categories):
    tree = build_tree(nested_categories)

    assert tree.find_by_slug_path(["electronics", "phones"]).category_id == 2
    assert tree.find_by_slug_path(["phones"]).category_id == 2
    assert tree.find_by_slug_path(["books", "phones"]) is None
    assert tree.find_by_slug_path(["electronics", "phones", "cases"]).category_id == 4
    assert tree.find_by_slug_path([]) is None


def test_as_nested(nested_categories):
    nodes = build_tree(nested_categories).as_nested()

    assert [n.category_id for n in nodes] == [1, 5]
    assert [n.category_id for n in nodes[0].children] == [2, 3]
    assert [n.category_id for n in nodes[0].children[0].children] == [4]
