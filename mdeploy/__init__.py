"""Marathon deploy (mdeploy).

Pushes a single Marathon application definition to a Marathon master and can
block until the resulting rollout has settled:
 - reconcile: create the app if it is new, update it otherwise
 - await: poll /v2/deployments until our deployment ids are gone or a
   deadline passes

The implementation is intentionally small so it can be audited and explained.
"""

__version__ = "0.1.0"
