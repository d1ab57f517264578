"""
Package prefix reduction.

Collapses a set of dotted package names to the shortest prefixes at which
their dot-segment trie terminates or branches, so a component scan can be
declared with as few base packages as possible.
"""

from typing import Dict, Iterable, List, Set


class _TrieNode:
    __slots__ = ("children", "terminal")

    def __init__(self):
        self.children: Dict[str, "_TrieNode"] = {}
        self.terminal = False


class PackagePrefixReducer:
    """
    Dot-segment trie reducer.

    Example:
        >>> PackagePrefixReducer().reduce({"a.b.c", "a.b.d"})
        {'a.b'}
    """

    def reduce(self, packages: Iterable[str]) -> Set[str]:
        root = _TrieNode()
        for package in packages:
            if not package:
                continue
            node = root
            for segment in package.split("."):
                node = node.children.setdefault(segment, _TrieNode())
            node.terminal = True

        result: Set[str] = set()
        # Emission starts below the root: the root itself is not a package.
        stack: List[tuple] = [(child, [segment]) for segment, child in root.children.items()]
        while stack:
            node, path = stack.pop()
            if node.terminal or len(node.children) != 1:
                result.add(".".join(path))
                continue
            (segment, child), = node.children.items()
            stack.append((child, path + [segment]))
        return result


def reduce(packages: Iterable[str]) -> Set[str]:
    """Module-level shortcut for ``PackagePrefixReducer().reduce``."""
    return PackagePrefixReducer().reduce(packages)
