import numpy as np

from urho_export.scene.node import Node


def _chain(depth):
    root = Node("n0")
    node = root
    for i in range(1, depth):
        node = Node(f"n{i}", parent=node)
    return root, node


def test_find_and_find_path(arm_rig):
    shoulder = arm_rig.find("Shoulder")
    assert shoulder is not None
    assert arm_rig.find("Elbow") is None
    assert arm_rig.find_path("Shoulder/Elbow/Hand").name == "Hand"
    assert arm_rig.find_path("") is arm_rig
    assert arm_rig.find_path("Shoulder/Nope") is None
    assert arm_rig.find_descendant("Hand").name == "Hand"


def test_preorder_keeps_child_order():
    root = Node("root")
    a = Node("a", parent=root)
    Node("a1", parent=a)
    Node("b", parent=root)
    assert [n.name for n in root.iter_preorder()] == ["root", "a", "a1", "b"]


def test_clone_tree_copies_structure_and_transforms(arm_rig):
    shoulder = arm_rig.find("Shoulder")
    clones, by_name = shoulder.clone_tree()

    assert [n.name for n in clones] == ["Shoulder", "Elbow", "Hand"]
    assert clones[0].parent is None
    assert by_name["Hand"].parent is by_name["Elbow"]
    np.testing.assert_allclose(by_name["Hand"].position, [0.0, 0.5, 0.0])
    assert arm_rig.skin is not None and clones[0].skin is None

    by_name["Elbow"].position[1] = 9.0
    assert shoulder.find("Elbow").position[1] == 1.0


def test_clone_of_deep_chain_does_not_recurse():
    root, leaf = _chain(5000)
    clones, by_name = root.clone_tree()
    assert len(clones) == 5000
    assert by_name["n4999"].parent is by_name["n4998"]


def test_destroy_detaches_subtree(arm_rig):
    shoulder = arm_rig.find("Shoulder")
    elbow = shoulder.find("Elbow")
    shoulder.destroy()
    assert arm_rig.children == []
    assert shoulder.destroyed and elbow.destroyed
    assert elbow.parent is None


def test_world_matrix_accumulates_parents(arm_rig):
    hand = arm_rig.find_path("Shoulder/Elbow/Hand")
    np.testing.assert_allclose(hand.get_world_matrix()[:3, 3], [0.0, 1.5, 0.0])
