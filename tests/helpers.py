"""Node lookup helpers shared by the test modules."""

from plugin_parity.frontend.parser import node_text, walk


def find_node(root, node_type: str, name: str):
    """First node of the given type whose `name` field equals name."""
    for node in walk(root):
        if node.type != node_type:
            continue
        name_node = node.child_by_field_name("name")
        if name_node is not None and node_text(name_node) == name:
            return node
    raise AssertionError(f"{node_type} {name} not found")


def alias_value_type(checker, unit, name: str):
    """Resolved type of the right-hand side of `type <name> = ...`."""
    node = find_node(unit.root, "type_alias_declaration", name)
    return checker.get_type_at_node(node.child_by_field_name("value"), unit)
