"""Storage backends for examples, runs, and feedback."""

from pairwise_evaluator.stores.base import ExampleStore, FeedbackSink, RunStore, Store
from pairwise_evaluator.stores.exceptions import NotFoundError, StorageError
from pairwise_evaluator.stores.json_store import JsonFileStore
from pairwise_evaluator.stores.memory import ExampleListing, InMemoryStore

__all__ = [
    "ExampleListing",
    "ExampleStore",
    "FeedbackSink",
    "InMemoryStore",
    "JsonFileStore",
    "NotFoundError",
    "RunStore",
    "StorageError",
    "Store",
]
