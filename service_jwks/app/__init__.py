"""
JWKS Aggregator Service package.

Polls external key-set publishers on a schedule and republishes the merged
key set from memory:

- app.main: Application entrypoint that wires routes and lifecycle.
- app.sources: Static registry of upstream publishers.
- app.jwks: Fetcher that retrieves and decodes one publisher's key set.
- app.refresh: Fan-out/merge/publish orchestration and its cron trigger.
- app.snapshot: Holder for the published aggregate.

Design notes:
- Module import must not perform network calls. All IO happens in the
  scheduled refresh job, started from the service lifespan.
- The read path never touches the network; it serves the last snapshot.
"""
