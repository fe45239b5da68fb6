"""
Monkey Runtime - Environments

A scope maps names to values and points outward to its enclosing scope. Links
only ever point outward, so a chain never contains a cycle; a closure keeps
alive exactly the chain it captured.
"""

from typing import Dict, List, Optional

from .objects import Object


class Environment:
    """Lexical scope with a parent chain"""

    def __init__(self, outer: Optional["Environment"] = None):
        self.store: Dict[str, Object] = {}
        self.outer = outer

    def get(self, name: str) -> Optional[Object]:
        """Look name up through the chain, innermost first"""
        env = self
        while env is not None:
            if name in env.store:
                return env.store[name]
            env = env.outer
        return None

    def define(self, name: str, value: Object) -> Object:
        """Bind name in this scope, replacing any binding already here"""
        self.store[name] = value
        return value

    def assign(self, name: str, value: Object) -> bool:
        """
        Rebind an existing name in the nearest scope that holds it

        Args:
            name: Variable name
            value: New value

        Returns:
            False if no scope in the chain binds name
        """
        env = self
        while env is not None:
            if name in env.store:
                env.store[name] = value
                return True
            env = env.outer
        return False

    def contains(self, name: str) -> bool:
        return self.get(name) is not None

    def names(self) -> List[str]:
        """All visible names; inner bindings shadow outer ones"""
        seen: Dict[str, None] = {}
        env = self
        while env is not None:
            for name in env.store:
                seen.setdefault(name, None)
            env = env.outer
        return list(seen)

    def enclosed(self) -> "Environment":
        """Create a child scope of this one"""
        return Environment(outer=self)

    def __repr__(self):
        depth = 0
        env = self.outer
        while env is not None:
            depth += 1
            env = env.outer
        return f"Environment(names={sorted(self.store)}, depth={depth})"
