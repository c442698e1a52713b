"""Capability interface of the node store.

The ordering engine and services only talk to a store through these methods,
so they can run against the SQLAlchemy repository or an in-memory fake.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class NodeStore(ABC):
    @abstractmethod
    def find_by_id(self, node_id: str) -> Optional[Any]: ...

    @abstractmethod
    def list_siblings(
        self, parent_id: Optional[str], user_id: Optional[str], exclude_id: Optional[str] = None
    ) -> List[Any]:
        """Nodes under ``parent_id`` visible to ``user_id``, ascending by sort_order.

        Visible means owned by ``user_id`` or shared. An anonymous requester
        (``None``) sees shared nodes only.
        """

    @abstractmethod
    def list_children(self, parent_id: str) -> List[Any]:
        """All direct children of ``parent_id``, regardless of owner."""

    @abstractmethod
    def list_visible(self, user_id: Optional[str]) -> List[Any]:
        """Every node visible to ``user_id``, ascending by sort_order."""

    @abstractmethod
    def update_order_and_parent(
        self, node_id: str, order_key: float, parent_id: Optional[str]
    ) -> Any: ...

    @abstractmethod
    def update_path(self, node_id: str, path: str) -> None: ...

    @abstractmethod
    def cascade_delete(self, root_id: str, owner_id: str) -> int:
        """Delete ``root_id`` and all descendants atomically. Returns rows deleted."""

    @abstractmethod
    def insert(
        self,
        owner_id: Optional[str],
        name: str,
        description: Optional[str],
        parent_id: Optional[str],
        order_key: float,
        path: str = "",
        extra: Optional[Dict[str, Any]] = None,
    ) -> Any: ...

    @abstractmethod
    def update_name_description(
        self, node_id: str, name: str, description: Optional[str]
    ) -> Any: ...
