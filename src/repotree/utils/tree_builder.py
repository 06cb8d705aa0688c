"""TreeNode building utilities."""

from typing import Dict, Iterator, List, Optional, Sequence

from ..core.models import FlatRecord, TreeNode
from .path_utils import PathUtils


class FileTreeBuilder:
    """Utilities for building and walking TreeNode forests."""

    @staticmethod
    def build(records: Sequence[FlatRecord]) -> List[TreeNode]:
        """
        Build a nested tree from a flat, ordered record sequence.

        Two passes: every record first gets a node indexed by path, then each
        node is appended to its parent's children in input order. A parent
        of '' means root level; an unset (None) parent is taken from the
        path. A record whose parent is not among the records becomes a root.
        Every record appears exactly once in the result.

        Args:
            records: Flat records, paths unique

        Returns:
            Ordered list of root nodes
        """
        index: Dict[str, TreeNode] = {}
        nodes: List[TreeNode] = []
        for record in records:
            node = TreeNode.from_record(record)
            nodes.append(node)
            # Keep the first node for a repeated path so no record is lost
            index.setdefault(record.path, node)

        roots: List[TreeNode] = []
        for node in nodes:
            # '' means root level; only an unset parent is derived from the path
            parent_path = node.parent
            if parent_path is None:
                parent_path = PathUtils.parent_path(node.path)

            # A parent must be a proper path prefix, which also rules out cycles
            parent = None
            if parent_path and PathUtils.is_descendant(node.path, parent_path):
                parent = index.get(parent_path)
            if parent is not None:
                parent.children.append(node)
            else:
                roots.append(node)

        return roots

    @staticmethod
    def iter_nodes(tree: Sequence[TreeNode]) -> Iterator[TreeNode]:
        """Walk a forest in pre-order without recursion."""
        stack = list(reversed(tree))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    @staticmethod
    def find(tree: Sequence[TreeNode], path: str) -> Optional[TreeNode]:
        """Locate the node with the given path, or None."""
        for node in FileTreeBuilder.iter_nodes(tree):
            if node.path == path:
                return node
        return None

    @staticmethod
    def descendants(node: TreeNode) -> Iterator[TreeNode]:
        """All nodes below `node`, pre-order."""
        return FileTreeBuilder.iter_nodes(node.children)

    @staticmethod
    def count_nodes(tree: Sequence[TreeNode]) -> int:
        """Number of nodes in a forest."""
        return sum(1 for _ in FileTreeBuilder.iter_nodes(tree))

    @staticmethod
    def directory_tokens(node: TreeNode) -> int:
        """Total tokens of the files in a subtree."""
        if node.is_file():
            return node.tokens
        return sum(child.tokens for child in FileTreeBuilder.descendants(node) if child.is_file())
