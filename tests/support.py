"""
Test doubles and sample subscriptions shared by the test modules.
"""

from __future__ import annotations

from livegraph.core import ConcreteField, ConcreteFragment, ConcreteSubscription
from livegraph.subscription import Subscription


class FakeDisposable:
    """Disposable counting how often it was released."""

    def __init__(self):
        self.dispose_count = 0

    def dispose(self):
        self.dispose_count += 1


class FakeNetworkLayer:
    """Network layer that records requests instead of sending them."""

    def __init__(self):
        self.requests = []
        self.disposables = []

    def send_subscription(self, request):
        disposable = FakeDisposable()
        self.requests.append(request)
        self.disposables.append(disposable)
        return disposable


def todo_edge_field():
    return ConcreteField(
        field_name="todoEdge",
        type="TodoEdge",
        children=[
            ConcreteField(field_name="cursor", type="String"),
            ConcreteField(
                field_name="node",
                type="Todo",
                children=[
                    ConcreteField(field_name="id", type="ID"),
                    ConcreteField(field_name="text", type="String"),
                ],
            ),
        ],
    )


VIEWER_FRAGMENT = ConcreteFragment(
    name="AddTodoSubscription_viewer",
    type="User",
    children=[ConcreteField(field_name="id", type="ID")],
)


class AddTodoSubscription(Subscription):
    fragments = {
        "viewer": lambda variables: VIEWER_FRAGMENT,
    }

    def get_subscription(self):
        return ConcreteSubscription(
            name="AddTodoSubscription",
            call_name="addTodoSubscribe",
            input_type="AddTodoSubscribeInput!",
            children=[todo_edge_field()],
        )

    def get_configs(self):
        return [{
            "type": "RANGE_ADD",
            "parentName": "viewer",
            "parentID": "VXNlcjox",
            "connectionName": "todos",
            "edgeName": "todoEdge",
            "rangeBehaviors": {"": "append"},
        }]

    def get_variables(self):
        return {"viewerId": "VXNlcjox"}

