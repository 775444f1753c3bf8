"""
Shared, cross-cutting code for the forum data layer.

`core/` should contain small building blocks that multiple features use
(DB wiring, error types). Keep SQL in `catalog/` and orchestration in
`store/`.
"""
