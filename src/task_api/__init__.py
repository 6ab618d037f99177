"""
FastAPI Task Backend package.

Serves a single `task` resource with flat JSON bodies, singular resource
routes and epoch-second timestamps. The application object lives in
`task_api.main`.
"""
