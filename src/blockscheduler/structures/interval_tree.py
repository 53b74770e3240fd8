"""Augmented AVL tree keyed by time intervals.

Each node holds one unique interval key and the set of payloads that share
it, so inserting a duplicate interval merges payloads instead of adding a
node. Nodes also track their subtree height (a leaf has height 1) and the
earliest start / latest end found anywhere in their subtree. The bounds let
containment queries skip subtrees that cannot hold a containing key.
"""

from typing import Any, Callable, Generic, Iterable, Iterator, Optional, TypeVar

from blockscheduler.domain.models import Interval

T = TypeVar("T")


class IntervalNode(Generic[T]):
    """A tree node owning one interval key and its payloads."""

    __slots__ = ("interval", "payloads", "height", "min_start", "max_end", "left", "right")

    def __init__(self, interval: Interval):
        self.interval = interval
        # dict as an insertion-ordered set
        self.payloads: dict[T, None] = {}
        self.height = 1
        self.min_start = interval.start
        self.max_end = interval.end
        self.left: Optional["IntervalNode[T]"] = None
        self.right: Optional["IntervalNode[T]"] = None

    def add(self, payload: T) -> None:
        """Merge a payload into this node."""
        self.payloads.setdefault(payload, None)

    def add_all(self, payloads: Iterable[T]) -> None:
        """Merge several payloads into this node."""
        for payload in payloads:
            self.add(payload)

    def contains(self, interval: Interval) -> bool:
        """Check if this node's key contains an interval."""
        return self.interval.contains(interval)

    @property
    def balance_factor(self) -> int:
        """Left subtree height minus right subtree height."""
        return _height(self.left) - _height(self.right)

    def update(self) -> None:
        """Recompute height and bounds from the current children."""
        self.height = 1 + max(_height(self.left), _height(self.right))

        min_start = self.interval.start
        max_end = self.interval.end
        for child in (self.left, self.right):
            if child is not None:
                min_start = min(min_start, child.min_start)
                max_end = max(max_end, child.max_end)
        self.min_start = min_start
        self.max_end = max_end

    def __iter__(self) -> Iterator[T]:
        return iter(self.payloads)

    def __len__(self) -> int:
        return len(self.payloads)

    def __repr__(self) -> str:
        return f"IntervalNode({self.interval}, payloads={len(self.payloads)}, h={self.height})"


def _height(node: Optional[IntervalNode]) -> int:
    return 0 if node is None else node.height


def _rotate_left(node: IntervalNode) -> IntervalNode:
    new_root = node.right
    node.right = new_root.left
    new_root.left = node
    node.update()
    new_root.update()
    return new_root


def _rotate_right(node: IntervalNode) -> IntervalNode:
    new_root = node.left
    node.left = new_root.right
    new_root.right = node
    node.update()
    new_root.update()
    return new_root


def _rebalance(node: IntervalNode) -> IntervalNode:
    balance = node.balance_factor
    if balance > 1:
        if node.left.balance_factor < 0:
            node.left = _rotate_left(node.left)
        return _rotate_right(node)
    if balance < -1:
        if node.right.balance_factor > 0:
            node.right = _rotate_right(node.right)
        return _rotate_left(node)
    return node


class IntervalTree(Generic[T]):
    """Self-balancing interval index with payload merging.

    Example:
        >>> tree = IntervalTree()
        >>> tree.insert(Interval(time(9), time(12)), alice)
        >>> tree.insert(Interval(time(10), time(11)), bob)
        >>> tree.query(Interval(time(9, 30), time(10, 30)))
        [alice]
    """

    def __init__(self):
        self.root: Optional[IntervalNode[T]] = None
        self._count = 0

    def insert(self, interval: Interval, payload: T) -> IntervalNode[T]:
        """Insert a payload under an interval key.

        Returns:
            The node now holding the payload.

        Raises:
            TypeError: If the key is not an Interval.
        """
        return self.insert_many(interval, (payload,))

    def insert_many(self, interval: Interval, payloads: Iterable[T]) -> IntervalNode[T]:
        """Insert several payloads under one interval key."""
        if not isinstance(interval, Interval):
            raise TypeError(f"Interval tree keys must be Interval, got {type(interval).__name__}")

        node = self.find_exact(interval)
        if node is not None:
            node.add_all(payloads)
            return node

        node = IntervalNode(interval)
        node.add_all(payloads)
        self.root = self._insert(self.root, node)
        self._count += 1
        return node

    def _insert(self, head: Optional[IntervalNode[T]], node: IntervalNode[T]) -> IntervalNode[T]:
        if head is None:
            return node
        if node.interval < head.interval:
            head.left = self._insert(head.left, node)
        else:
            head.right = self._insert(head.right, node)
        head.update()
        return _rebalance(head)

    def find_exact(self, interval: Interval) -> Optional[IntervalNode[T]]:
        """Find the node whose key equals an interval, or None."""
        current = self.root
        while current is not None:
            if interval.start == current.interval.start:
                if interval.end == current.interval.end:
                    return current
                current = current.right if interval.end > current.interval.end else current.left
            elif interval.start > current.interval.start:
                current = current.right
            else:
                current = current.left
        return None

    def query(
        self,
        interval: Interval,
        reverse: bool = False,
        key: Optional[Callable[[T], Any]] = None,
    ) -> list[T]:
        """Find payloads whose key interval contains the query interval.

        This is a containment test, not an overlap test: a stored key
        matches only if it starts no later and ends no earlier than the
        query.

        The result behaves like a sorted set: payloads are ordered by their
        own comparison (or ``key``), and payloads that compare equal are
        collapsed to the first one found.

        Args:
            interval: Query interval.
            reverse: Sort descending instead of ascending.
            key: Optional sort key for payloads.

        Returns:
            Matching payloads, sorted.
        """
        found: list[T] = []
        self._collect(self.root, interval, found)

        unique: list[T] = []
        seen_keys: set = set()
        for payload in found:
            sort_key = payload if key is None else key(payload)
            if sort_key in seen_keys:
                continue
            seen_keys.add(sort_key)
            unique.append(payload)

        return sorted(unique, key=key, reverse=reverse)

    def _collect(self, node: Optional[IntervalNode[T]], interval: Interval, found: list[T]) -> None:
        if node is None:
            return
        # No key in this subtree can start early enough or end late enough
        if node.min_start > interval.start or node.max_end < interval.end:
            return

        if node.contains(interval):
            found.extend(node.payloads)
        self._collect(node.left, interval, found)
        self._collect(node.right, interval, found)

    def count(self) -> int:
        """Number of distinct interval keys."""
        return self._count

    @property
    def height(self) -> int:
        """Height of the tree (0 when empty)."""
        return _height(self.root)

    def nodes(self) -> Iterator[IntervalNode[T]]:
        """Iterate nodes in key order."""
        stack: list[IntervalNode[T]] = []
        current = self.root
        while stack or current is not None:
            while current is not None:
                stack.append(current)
                current = current.left
            current = stack.pop()
            yield current
            current = current.right

    def is_balanced(self) -> bool:
        """Check ordering, height, balance and bound invariants on every node."""
        keys = [node.interval for node in self.nodes()]
        if any(a >= b for a, b in zip(keys, keys[1:])):
            return False
        return self._check(self.root) is not None

    def _check(self, node: Optional[IntervalNode[T]]) -> Optional[int]:
        if node is None:
            return 0
        left = self._check(node.left)
        right = self._check(node.right)
        if left is None or right is None:
            return None
        if abs(left - right) > 1 or node.height != 1 + max(left, right):
            return None

        children = [n for n in (node.left, node.right) if n is not None]
        min_start = min([node.interval.start] + [n.min_start for n in children])
        max_end = max([node.interval.end] + [n.max_end for n in children])
        if node.min_start != min_start or node.max_end != max_end:
            return None
        return node.height

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[IntervalNode[T]]:
        return self.nodes()

    def __repr__(self) -> str:
        return f"IntervalTree(count={self._count}, height={self.height})"
