from typing import Any, Iterator, List, Optional

LEFT = 0  #: Side index of the left child (code bit 0)
RIGHT = 1  #: Side index of the right child (code bit 1)


class BinaryTree:
    """Arena of binary tree nodes addressed by integer ids.

    Each node owns its two child links; the parent link is a plain back
    reference used for upward traversal only. Several disjoint trees may
    live in one arena while they are being merged.

    :ivar values: Payload of each node, indexed by node id.
    :type values: List[Any]
    """

    def __init__(self):
        """Create an empty arena.

        :returns: None
        :rtype: None
        """
        self.values: List[Any] = []
        self._children: List[List[Optional[int]]] = []
        self._parent: List[Optional[int]] = []

    def __len__(self) -> int:
        return len(self.values)

    def add(self, value: Any) -> int:
        """Store ``value`` in a new detached node.

        :param value: Payload for the node.
        :type value: Any
        :returns: Id of the new node.
        :rtype: int
        """
        self.values.append(value)
        self._children.append([None, None])
        self._parent.append(None)
        return len(self.values) - 1

    def attach(self, parent: int, child: int, side: int) -> None:
        """Hang the detached subtree ``child`` under ``parent``.

        :param parent: Id of the node receiving the child.
        :type parent: int
        :param child: Id of the root of the subtree to attach.
        :type child: int
        :param side: :data:`LEFT` or :data:`RIGHT`.
        :type side: int
        :returns: None
        :rtype: None
        :raises ValueError: If ``child`` already has a parent, the slot is
            taken, or the link would close a cycle.
        """
        if side not in (LEFT, RIGHT):
            raise ValueError(f"Invalid side: {side}")
        if self._parent[child] is not None:
            raise ValueError(f"Node {child} is already attached")
        if self._children[parent][side] is not None:
            raise ValueError(f"Node {parent} already has a child on side {side}")
        if self.root_of(parent) == child:
            raise ValueError(f"Attaching {child} under {parent} makes a cycle")
        self._children[parent][side] = child
        self._parent[child] = parent

    def value(self, node: int) -> Any:
        return self.values[node]

    def child(self, node: int, side: int) -> Optional[int]:
        return self._children[node][side]

    def left(self, node: int) -> Optional[int]:
        return self._children[node][LEFT]

    def right(self, node: int) -> Optional[int]:
        return self._children[node][RIGHT]

    def parent(self, node: int) -> Optional[int]:
        return self._parent[node]

    def is_leaf(self, node: int) -> bool:
        return self._children[node] == [None, None]

    def root_of(self, node: int) -> int:
        """Follow parent links up to the root of ``node``'s tree."""
        while self._parent[node] is not None:
            node = self._parent[node]
        return node

    def depth(self, node: int) -> int:
        """Number of edges between ``node`` and its root."""
        depth = 0
        while self._parent[node] is not None:
            node = self._parent[node]
            depth += 1
        return depth

    def leftmost(self, node: int) -> int:
        while self._children[node][LEFT] is not None:
            node = self._children[node][LEFT]
        return node

    def next_in_order(self, node: int, stop: int) -> Optional[int]:
        """Return the in-order successor of ``node`` within ``stop``'s subtree.

        Climbs through parent back references instead of keeping a stack.

        :param node: Current cursor position.
        :type node: int
        :param stop: Root of the subtree being walked; the cursor never
            climbs above it.
        :type stop: int
        :returns: Successor id, or ``None`` once the walk is complete.
        :rtype: Optional[int]
        """
        right = self._children[node][RIGHT]
        if right is not None:
            return self.leftmost(right)
        while node != stop and self._parent[node] is not None:
            parent = self._parent[node]
            if self._children[parent][LEFT] == node:
                return parent
            node = parent
        return None

    def iter_in_order(self, root: int) -> Iterator[int]:
        """Yield node ids of ``root``'s subtree left to right."""
        node: Optional[int] = self.leftmost(root)
        while node is not None:
            yield node
            node = self.next_in_order(node, root)

    def iter_pre_order(self, root: int) -> Iterator[int]:
        """Yield node ids of ``root``'s subtree root first, left before right."""
        stack = [root]
        while stack:
            node = stack.pop()
            yield node
            left, right = self._children[node]
            if right is not None:
                stack.append(right)
            if left is not None:
                stack.append(left)

    def size(self, root: int) -> int:
        """Number of nodes in the subtree rooted at ``root``."""
        return sum(1 for _ in self.iter_pre_order(root))

    def leaves(self, root: int) -> List[int]:
        """Leaf ids of ``root``'s subtree, left to right."""
        return [n for n in self.iter_in_order(root) if self.is_leaf(n)]

    def render(self, root: int) -> List[str]:
        """Render the subtree as text lines, one node per line.

        Each line is prefixed with ``L`` or ``R`` for the side the node
        hangs on and one ``-`` per level below ``root``.

        :param root: Id of the subtree root.
        :type root: int
        :returns: Rendered lines in pre-order.
        :rtype: List[str]
        """
        lines = []
        stack = [(root, 0, "")]
        while stack:
            node, level, prefix = stack.pop()
            lines.append(f"{prefix}{'-' * level}{self.values[node]}")
            left, right = self._children[node]
            if right is not None:
                stack.append((right, level + 1, "R"))
            if left is not None:
                stack.append((left, level + 1, "L"))
        return lines
