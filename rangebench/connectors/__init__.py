"""Query executor backends."""

from rangebench.connectors.dynamodb import DynamoDBQueryExecutor
from rangebench.connectors.simulated import SimulatedQueryExecutor

__all__ = ["DynamoDBQueryExecutor", "SimulatedQueryExecutor"]
