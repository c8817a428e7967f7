from typing import Any, Dict, List


class HierarchyCycleError(Exception):
    def __init__(self, item_ids: List[Any]):
        self.item_ids = list(item_ids)
        super().__init__(f"Parent cycle detected between items {self.item_ids}")


class HierarchyRules:
    @staticmethod
    def build_forest(items: List[Dict[str, Any]], id_key: str = "id", parent_key: str = "parent_id") -> List[Dict]:
        """
        Turns flat parent-pointer rows into a forest of nodes with ``children``.

        Pass 1 indexes every item by id; pass 2 attaches each item to its
        parent or, when the parent is absent or unknown, makes it a root.
        Children keep input order. Every item ends up in the output exactly
        once; a parent chain that loops raises ``HierarchyCycleError``.
        """
        nodes: Dict[Any, Dict] = {}
        for item in items:
            nodes[item[id_key]] = {**item, "children": []}

        def resolved_parent(node: Dict) -> Any:
            parent_id = node.get(parent_key)
            if parent_id is not None and parent_id in nodes:
                return parent_id
            return None

        # Walk each ancestor chain once; ids already known to reach a root end the walk early.
        rooted = set()
        for item_id, node in nodes.items():
            path: List[Any] = []
            on_path = set()
            current = item_id
            while current is not None and current not in rooted:
                if current in on_path:
                    raise HierarchyCycleError(path[path.index(current):])
                on_path.add(current)
                path.append(current)
                current = resolved_parent(nodes[current])
            rooted.update(path)

        roots: List[Dict] = []
        for node in nodes.values():
            parent_id = resolved_parent(node)
            if parent_id is None:
                roots.append(node)
            else:
                nodes[parent_id]["children"].append(node)
        return roots

    @staticmethod
    def ancestors(items_by_id: Dict[Any, Dict[str, Any]], item_id: Any, parent_key: str = "parent_id") -> List[Dict]:
        """Nearest-first chain of parents above ``item_id``."""
        chain: List[Dict] = []
        seen = {item_id}
        current = items_by_id.get(item_id)
        while current is not None:
            parent_id = current.get(parent_key)
            if parent_id is None or parent_id in seen or parent_id not in items_by_id:
                break
            seen.add(parent_id)
            current = items_by_id[parent_id]
            chain.append(current)
        return chain
