"""
agency_batch.services -- Stateful bulk allocation services.

``LineItemQueue`` holds validated line-item configs; ``BulkCommitter``
writes them out as individual tasks.
"""

from agency_batch.services.committer import BulkCommitter
from agency_batch.services.queue import LineItemQueue

__all__ = ["BulkCommitter", "LineItemQueue"]
