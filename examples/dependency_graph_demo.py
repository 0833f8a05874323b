"""
Run a small dependency-injection exercise and print its graph layout.

The exercise program prints ordinary output and, on one line, the graph of
the components it wired together. labrunner separates the two and lays the
graph out in dependency order.
"""

import asyncio
import logging

from labrunner import create_session

CONTAINER = '''
import json

class Container:
    def __init__(self):
        self.nodes, self.edges = [], []

    def register(self, name, scope="singleton", protocol=False, deps=()):
        self.nodes.append({"id": name, "scope": scope, "is_protocol": protocol})
        self.edges.extend({"from": name, "to": dep} for dep in deps)

    def emit_graph(self):
        print("__GRAPH_DATA__:" + json.dumps({"nodes": self.nodes, "edges": self.edges}))
'''

MAIN = '''
from container import Container

c = Container()
c.register("Config")
c.register("Repository", protocol=True, deps=["Config"])
c.register("SqlRepository", deps=["Repository", "Config"])
c.register("UserService", scope="transient", deps=["SqlRepository"])
print("Registered", len(c.nodes), "components")
c.emit_graph()
'''


async def main():
    logging.basicConfig(level=logging.INFO)

    async with await create_session(timeout=30.0) as session:
        ok = await session.run({"container.py": CONTAINER, "main.py": MAIN})
        print(session.console.text)
        print("✅ Run succeeded" if ok else "❌ Run failed")

        graph = session.layout()
        if graph is None:
            return
        for node in graph.nodes:
            print(f"  layer {node.layer}  ({node.position.x:>5}, {node.position.y:>6})  {node.id} [{node.kind}]")
        for edge in graph.edges:
            print(f"  {edge.source} -> {edge.target}")


if __name__ == "__main__":
    asyncio.run(main())
