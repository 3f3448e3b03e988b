import copy
import logging

logger = logging.getLogger(__name__)


class PruningService:
    """Runs the save and generate actions against one ledger store."""

    def __init__(self, store, aggregator, engine):
        self.store = store
        self.aggregator = aggregator
        self.engine = engine

    def save(self, payload):
        """Merge a usage report into the ledger"""
        with self.store.transaction() as ledger:
            return self.aggregator.merge(ledger, payload)

    def generate(self, payload):
        """
        Merge, then rewrite from the merged ledger.

        The rewrite runs outside the ledger lock on a copy, so a rewrite that
        times out or fails cannot leave the ledger half written.

        Returns:
            tuple: (MergeResult, RewriteResult)
        """
        with self.store.transaction() as ledger:
            merge_result = self.aggregator.merge(ledger, payload)
            snapshot = copy.deepcopy(ledger)

        rewrite_result = self.engine.run(snapshot)
        return merge_result, rewrite_result
