"""
Todo subscription - minimal client example.

Usage:
    LIVEGRAPH_REDIS_URL=redis://redis:6379 python example/todos/main.py
"""

import asyncio
import logging

from livegraph import (
    ConcreteField,
    ConcreteSubscription,
    Environment,
    InMemoryRecordStore,
    LivegraphConfig,
    RedisSubscriptionNetworkLayer,
    Subscription,
    SubscriptionCallbacks,
    create_subscription,
    init_redis,
    load_config,
)


class AddTodoSubscription(Subscription):
    def get_subscription(self):
        return ConcreteSubscription(
            name="AddTodoSubscription",
            call_name="addTodoSubscribe",
            input_type="AddTodoSubscribeInput!",
            children=[
                ConcreteField(field_name="todoEdge", type="TodoEdge", children=[
                    ConcreteField(field_name="cursor"),
                    ConcreteField(field_name="node", type="Todo", children=[
                        ConcreteField(field_name="id", type="ID"),
                        ConcreteField(field_name="text"),
                    ]),
                ]),
            ],
        )

    def get_configs(self):
        return [{
            "type": "RANGE_ADD",
            "parentName": "viewer",
            "parentID": self.props["viewer_id"],
            "connectionName": "todos",
            "edgeName": "todoEdge",
            "rangeBehaviors": {"": "append"},
        }]

    def get_variables(self):
        return {"viewerId": self.props["viewer_id"]}


async def main():
    logging.basicConfig(level=logging.INFO)
    config = load_config() or LivegraphConfig.from_dict({})

    store = InMemoryRecordStore()
    client = await init_redis(config.redis_url)
    environment = Environment(store, RedisSubscriptionNetworkLayer(client, config=config))

    disposable = create_subscription(
        environment,
        AddTodoSubscription({"viewer_id": "VXNlcjox"}),
        SubscriptionCallbacks(
            on_next=lambda payload: print("todos:", store.get_range("VXNlcjox", "todos")),
            on_error=lambda error: print("failed:", error),
        ),
    )
    try:
        await asyncio.sleep(60)
    finally:
        disposable.dispose()
        await client.disconnect()


if __name__ == "__main__":
    asyncio.run(main())
