"""
Fragment references - deferred fragments composed into a parent query.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from ..core.concrete import ConcreteFragment
from ..core.nodes import Fragment

Variables = dict[str, Any]
PrepareVariables = Callable[[Variables, str], Variables]


class FragmentReference:
    """
    Reference to a fragment of a subscription (or container).

    The fragment is built lazily. Variables for the fragment start from the
    owner's initial variables, are overridden through `variable_mapping`
    (fragment variable -> parent variable name) and finally passed through
    `prepare_variables` when given.
    """

    def __init__(
        self,
        fragment_getter: Callable[[], ConcreteFragment],
        initial_variables: Optional[Variables] = None,
        variable_mapping: Optional[dict[str, str]] = None,
        prepare_variables: Optional[PrepareVariables] = None,
    ):
        self._fragment_getter = fragment_getter
        self._initial_variables = dict(initial_variables or {})
        self._variable_mapping = dict(variable_mapping or {})
        self._prepare_variables = prepare_variables
        self._fragment: Optional[Fragment] = None

    @classmethod
    def create_for_container(
        cls,
        fragment_getter: Callable[[], ConcreteFragment],
        initial_variables: Optional[Variables] = None,
        variable_mapping: Optional[dict[str, str]] = None,
        prepare_variables: Optional[PrepareVariables] = None,
    ) -> FragmentReference:
        return cls(fragment_getter, initial_variables, variable_mapping, prepare_variables)

    def get_fragment(self) -> Fragment:
        if self._fragment is None:
            self._fragment = Fragment.create(self._fragment_getter())
        return self._fragment

    def get_variables(self, route_name: str, parent_variables: Variables) -> Variables:
        """Resolve the fragment's variables against its parent's."""
        variables = dict(self._initial_variables)
        for name, parent_name in self._variable_mapping.items():
            if parent_name in parent_variables:
                variables[name] = parent_variables[parent_name]
        if self._prepare_variables is not None:
            variables = self._prepare_variables(variables, route_name)
        return variables
