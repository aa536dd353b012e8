from resource_runtime.runtime.describe import describe, describe_definition
from resource_runtime.runtime.dispatcher import ListResult, OperationDispatcher
from resource_runtime.runtime.error_mapper import map_exception
from resource_runtime.runtime.health import HealthEvaluator

__all__ = [
    "HealthEvaluator",
    "ListResult",
    "OperationDispatcher",
    "describe",
    "describe_definition",
    "map_exception",
]
